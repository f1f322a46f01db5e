#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
日志工具
"""
import os
import logging
from pathlib import Path
from typing import Optional

from bodyfat_gbn.errors import MalformedInputError

# 环境变量可统一改写日志目录与级别（测试与命令行使用）
LOG_DIR_ENV = "BODYFAT_GBN_LOG_DIR"
LOG_LEVEL_ENV = "BODYFAT_GBN_LOG_LEVEL"

LOG_LEVELS = {
    'DEBUG': logging.DEBUG,
    'INFO': logging.INFO,
    'WARNING': logging.WARNING,
    'ERROR': logging.ERROR,
    'CRITICAL': logging.CRITICAL,
}


def resolve_level(level: str) -> int:
    """
    将日志级别名称转换为数值

    Args:
        level: 级别名称（不区分大小写）

    Returns:
        logging 模块的数值级别
    """
    name = str(level).strip().upper()
    if name not in LOG_LEVELS:
        raise MalformedInputError(f"无效的日志级别: {level!r}，可选 {list(LOG_LEVELS)}")
    return LOG_LEVELS[name]


def setup_logger(name: str, log_dir: Optional[str] = None, level: Optional[str] = None) -> logging.Logger:
    """
    设置日志记录器

    Args:
        name: 日志记录器名称
        log_dir: 日志目录（默认读取环境变量，否则为 logs）
        level: 日志级别（默认读取环境变量，否则为 INFO；环境变量无效时回退到 INFO）

    Returns:
        配置好的日志记录器
    """
    log_dir = log_dir or os.environ.get(LOG_DIR_ENV, "logs")

    invalid_env_level = None
    if level is not None:
        numeric_level = resolve_level(level)
    else:
        env_level = os.environ.get(LOG_LEVEL_ENV, "INFO")
        if env_level.strip().upper() in LOG_LEVELS:
            numeric_level = LOG_LEVELS[env_level.strip().upper()]
        else:
            invalid_env_level = env_level
            numeric_level = logging.INFO

    # 创建日志记录器
    logger = logging.getLogger(f"bodyfat_gbn.{name}")
    logger.setLevel(numeric_level)

    # 避免重复添加处理器
    if logger.handlers:
        return logger

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # 控制台处理器
    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    # 文件处理器
    Path(log_dir).mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(
        os.path.join(log_dir, f"{name}.log"),
        encoding='utf-8'
    )
    file_handler.setLevel(numeric_level)
    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)

    if invalid_env_level is not None:
        logger.warning(f"环境变量 {LOG_LEVEL_ENV}={invalid_env_level!r} 不是有效的日志级别，使用 INFO")

    return logger


def set_level(level: str) -> None:
    """
    调整所有已创建的项目日志记录器的级别

    Args:
        level: 日志级别
    """
    numeric_level = resolve_level(level)
    for logger_name, logger in logging.Logger.manager.loggerDict.items():
        if not logger_name.startswith("bodyfat_gbn.") or not isinstance(logger, logging.Logger):
            continue
        logger.setLevel(numeric_level)
        for handler in logger.handlers:
            handler.setLevel(numeric_level)

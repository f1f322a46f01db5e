#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
配置工具
"""
import copy
import yaml
from pathlib import Path
from typing import Callable, Dict, Any, Optional

from bodyfat_gbn.errors import MalformedInputError


DEFAULT_CONFIG_PATH = "configs/default.yaml"


def load_config(config_path: str = DEFAULT_CONFIG_PATH) -> Dict[str, Any]:
    """
    加载配置文件
    
    Args:
        config_path: 配置文件路径
        
    Returns:
        配置字典
    """
    with open(config_path, 'r', encoding='utf-8') as f:
        config = yaml.safe_load(f)
    return config or {}


def override_config(config: Dict[str, Any], overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    用点分路径覆盖配置项（命令行参数优先于配置文件）
    
    例如 {'split.random_state': 7} 会覆盖 config['split']['random_state']。
    值为None的覆盖项被忽略。
    
    Args:
        config: 原始配置
        overrides: 点分路径到新值的映射
        
    Returns:
        覆盖后的新配置字典（原字典不变）
    """
    merged = copy.deepcopy(config)
    for dotted_key, value in (overrides or {}).items():
        if value is None:
            continue
        section = merged
        keys = dotted_key.split('.')
        for key in keys[:-1]:
            section = section.setdefault(key, {})
        section[keys[-1]] = value
    return merged


def coerce_settings(config: Dict[str, Any], casts: Dict[str, Callable[[Any], Any]]) -> Dict[str, Any]:
    """
    按点分路径把配置项转换为指定类型
    
    YAML 1.1 会把 1.0e12 这类不带指数符号的写法读成字符串，
    数值参数在进入计算前统一转换。缺失或为None的项保持不变。
    
    Args:
        config: 原始配置
        casts: 点分路径到类型转换函数的映射，如 {'inference.max_condition': float}
        
    Returns:
        转换后的新配置字典（原字典不变）
    """
    coerced = copy.deepcopy(config)
    for dotted_key, cast in casts.items():
        section = coerced
        keys = dotted_key.split('.')
        for key in keys[:-1]:
            section = section.get(key) if isinstance(section, dict) else None
            if section is None:
                break
        if not isinstance(section, dict) or section.get(keys[-1]) is None:
            continue
        
        value = section[keys[-1]]
        try:
            section[keys[-1]] = cast(value)
        except (TypeError, ValueError) as e:
            raise MalformedInputError(f"配置项 {dotted_key} 无法转换为{cast.__name__}: {value!r}") from e
    return coerced


def ensure_dir(directory: str) -> None:
    """
    确保目录存在，不存在则创建
    
    Args:
        directory: 目录路径
    """
    if directory:  # 防止空字符串
        Path(directory).mkdir(parents=True, exist_ok=True)

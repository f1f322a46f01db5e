#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
训练/测试集划分工具
基于一次随机置换的确定性切分
"""
import math
from fractions import Fraction

import pandas as pd
import numpy as np
from typing import Tuple, Optional

from bodyfat_gbn.utils.logging import setup_logger

logger = setup_logger("data_split")


def split_train_test(
    df: pd.DataFrame,
    train_ratio: float = 0.6,
    random_state: int = 2024
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """
    将数据划分为训练集和测试集
    
    只生成一次全体行位置的均匀随机置换，前 floor(N*p) 个作为训练集，
    其余作为测试集，因此两部分的大小是精确确定的。
    
    Args:
        df: 完整数据
        train_ratio: 训练集比例 p ∈ (0, 1)
        random_state: 随机种子
        
    Returns:
        (train_df, test_df)
    """
    if not 0.0 < train_ratio < 1.0:
        raise ValueError(f"训练集比例必须在 (0, 1) 之间: {train_ratio}")
    
    n_total = len(df)
    # 按十进制写法精确计算 floor(N*p)，避免 100*0.29 被舍成 28
    n_train = math.floor(n_total * Fraction(str(train_ratio)))
    
    logger.info(f"开始划分数据: 训练集={train_ratio*100:.0f}%, "
                f"测试集={100-train_ratio*100:.0f}%")
    
    rng = np.random.RandomState(random_state)
    permutation = rng.permutation(n_total)
    
    train_df = df.iloc[np.sort(permutation[:n_train])].copy()
    test_df = df.iloc[np.sort(permutation[n_train:])].copy()
    
    logger.info(f"  训练集: {len(train_df)} 条")
    logger.info(f"  测试集: {len(test_df)} 条")
    
    return train_df, test_df


def validate_split(
    train_df: pd.DataFrame,
    test_df: pd.DataFrame,
    n_total: Optional[int] = None
) -> bool:
    """
    验证数据划分的合理性
    
    检查：
    1. 两个集合无重叠
    2. 两个集合的并集覆盖全部样本
    3. 训练集不为空
    
    Args:
        train_df: 训练集
        test_df: 测试集
        n_total: 划分前的样本总数（None时跳过覆盖检查）
        
    Returns:
        验证是否通过
    """
    overlap = set(train_df.index) & set(test_df.index)
    if len(overlap) > 0:
        logger.error(f"❌ 训练集和测试集存在重叠（{len(overlap)} 条记录）")
        return False
    
    logger.info("✓ 训练集和测试集无重叠")
    
    if n_total is not None and len(train_df) + len(test_df) != n_total:
        logger.error(f"❌ 划分后样本数 {len(train_df) + len(test_df)} 与总数 {n_total} 不一致")
        return False
    
    if len(train_df) == 0:
        logger.error("❌ 训练集为空")
        return False
    
    logger.info(f"✓ 训练集大小合理（{len(train_df)} 条）")
    
    return True

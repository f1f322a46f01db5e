#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
可分解的高斯BIC评分

采用"越小越好"的约定：
    local_score(X | Pa) = -loglik(X | Pa) + penalty × (|Pa| + 2)
    penalty = penalty_weight × log(N) / 2
其中 loglik 是最大似然残差方差 RSS/N 下的高斯对数似然。
全图评分等于各节点局部评分之和。
"""
import math
import pandas as pd
import numpy as np
from typing import Dict, Iterable, Optional, Sequence, Tuple, FrozenSet
from scipy.stats import norm

from bodyfat_gbn.bayes.cpds import as_column_arrays, fit_regression
from bodyfat_gbn.utils.logging import setup_logger

logger = setup_logger("bic_score")

# 残差方差下限，避免完全拟合时对数似然发散
VARIANCE_FLOOR = 1e-12


class GaussianBICScore:
    """高斯BIC评分器，局部评分按 (节点, 父节点集合) 缓存"""
    
    def __init__(self, data: pd.DataFrame, variables: Optional[Sequence[str]] = None, penalty_weight: float = 1.0):
        """
        Args:
            data: 训练数据
            variables: 参与建模的变量（默认全部列）
            penalty_weight: 复杂度惩罚系数，1.0 即标准BIC
        """
        self.variables = list(variables if variables is not None else data.columns)
        self.data = as_column_arrays(data, self.variables)
        self.n_samples = len(data)
        self.penalty_weight = penalty_weight
        self.penalty = penalty_weight * math.log(self.n_samples) / 2.0
        self._cache: Dict[Tuple[str, FrozenSet[str]], float] = {}
        
        logger.info(f"初始化高斯BIC评分: N={self.n_samples}, "
                    f"每参数惩罚={self.penalty:.4f}")
    
    def log_likelihood(self, node: str, parents: Iterable[str]) -> float:
        """节点在给定父节点下的最大似然对数似然"""
        _, _, residuals = fit_regression(self.data, node, sorted(parents))
        variance = max(float(np.mean(residuals ** 2)), VARIANCE_FLOOR)
        return float(norm.logpdf(residuals, scale=math.sqrt(variance)).sum())
    
    def local_score(self, node: str, parents: Iterable[str]) -> float:
        """
        计算单个节点的局部评分（越小越好）
        
        Args:
            node: 节点名
            parents: 父节点
            
        Returns:
            局部评分
        """
        key = (node, frozenset(parents))
        if key not in self._cache:
            n_parameters = len(key[1]) + 2
            self._cache[key] = -self.log_likelihood(node, key[1]) + self.penalty * n_parameters
        return self._cache[key]
    
    def local_scores(self, structure) -> Dict[str, float]:
        """结构中每个节点的局部评分"""
        return {
            node: self.local_score(node, structure.get_parents(node))
            for node in structure.nodes
        }
    
    def score(self, structure) -> float:
        """
        从头计算整个结构的评分
        
        Args:
            structure: BayesianNetworkStructure对象
            
        Returns:
            全局评分（各节点局部评分之和）
        """
        return float(sum(self.local_scores(structure).values()))
    
    def n_parameters(self, structure) -> int:
        """结构的参数总数（截距 + 系数 + 方差）"""
        return sum(len(structure.get_parents(node)) + 2 for node in structure.nodes)
    
    @property
    def cache_size(self) -> int:
        return len(self._cache)

#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
线性高斯条件概率分布（CPD）学习
对每个节点在其父节点上做带截距的最小二乘回归
"""
import pandas as pd
import numpy as np
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple
from sklearn.linear_model import LinearRegression

from bodyfat_gbn.errors import MalformedInputError
from bodyfat_gbn.utils.logging import setup_logger

logger = setup_logger("cpd_learner")


@dataclass(frozen=True)
class LinearGaussianCPD:
    """
    线性高斯局部分布
    
    node = intercept + Σ coefficients[parent] × parent + ε,  ε ~ N(0, variance)
    
    Attributes:
        node: 节点名
        intercept: 截距
        coefficients: 父节点到回归系数的映射
        variance: 残差方差
        n_samples: 拟合所用样本数
    """
    node: str
    intercept: float
    coefficients: Dict[str, float] = field(default_factory=dict)
    variance: float = 1.0
    n_samples: int = 0
    
    @property
    def parents(self) -> List[str]:
        return list(self.coefficients)
    
    @property
    def n_parameters(self) -> int:
        """截距 + 系数 + 方差"""
        return len(self.coefficients) + 2
    
    def conditional_mean(self, parent_values: Dict[str, float]) -> float:
        """给定父节点取值时的条件均值"""
        return self.intercept + sum(
            coef * parent_values[parent] for parent, coef in self.coefficients.items()
        )
    
    def to_dict(self) -> Dict:
        return {
            'node': self.node,
            'intercept': float(self.intercept),
            'coefficients': {p: float(c) for p, c in self.coefficients.items()},
            'variance': float(self.variance),
            'n_samples': int(self.n_samples)
        }


def fit_regression(
    data: Dict[str, np.ndarray],
    node: str,
    parents: Sequence[str]
) -> Tuple[float, np.ndarray, np.ndarray]:
    """
    普通最小二乘回归（带截距）
    
    Args:
        data: 列名到一维数组的映射
        node: 因变量
        parents: 自变量
        
    Returns:
        (截距, 系数数组, 残差数组)
    """
    y = data[node]
    n = len(y)
    if n <= len(parents) + 1:
        raise MalformedInputError(
            f"节点 {node} 的回归欠定: 样本数 {n}, 参数数 {len(parents) + 1}"
        )
    
    if not parents:
        intercept = float(y.mean())
        return intercept, np.empty(0), y - intercept
    
    X = np.column_stack([data[p] for p in parents])
    model = LinearRegression().fit(X, y)
    residuals = y - model.predict(X)
    return float(model.intercept_), np.asarray(model.coef_, dtype=float), residuals


def as_column_arrays(df: pd.DataFrame, variables: Sequence[str]) -> Dict[str, np.ndarray]:
    """
    把DataFrame中的建模变量转换为浮点数组，并校验数据合法性
    
    Args:
        df: 数据
        variables: 需要的列
        
    Returns:
        列名到数组的映射
    """
    missing = [v for v in variables if v not in df.columns]
    if missing:
        raise MalformedInputError(f"数据缺少变量列: {missing}")
    
    arrays = {}
    for name in variables:
        if not pd.api.types.is_numeric_dtype(df[name]):
            raise MalformedInputError(f"变量 {name} 不是数值类型")
        values = df[name].to_numpy(dtype=float)
        if not np.all(np.isfinite(values)):
            raise MalformedInputError(f"变量 {name} 含缺失值或无穷值")
        arrays[name] = values
    return arrays


class CPDLearner:
    """
    条件概率分布学习器
    
    在固定的DAG上为每个节点估计线性高斯CPD
    """
    
    def __init__(self, structure):
        """
        初始化CPD学习器
        
        Args:
            structure: BayesianNetworkStructure对象
        """
        self.structure = structure
        self.cpds: Dict[str, LinearGaussianCPD] = {}
        logger.info("初始化CPD学习器")
    
    def learn_cpds(self, df: pd.DataFrame) -> Dict[str, LinearGaussianCPD]:
        """
        从数据中学习所有CPD
        
        残差方差使用无偏估计 RSS / (N - 父节点数 - 1)。
        
        Args:
            df: 训练数据
            
        Returns:
            节点名到CPD的映射
        """
        logger.info("开始学习线性高斯CPD...")
        
        nodes = self.structure.nodes
        data = as_column_arrays(df, nodes)
        
        for node in nodes:
            parents = self.structure.get_parents(node)
            intercept, coef, residuals = fit_regression(data, node, parents)
            
            dof = len(residuals) - len(parents) - 1
            variance = float(np.sum(residuals ** 2) / dof)
            
            self.cpds[node] = LinearGaussianCPD(
                node=node,
                intercept=intercept,
                coefficients=dict(zip(parents, coef.tolist())),
                variance=variance,
                n_samples=len(residuals)
            )
            logger.debug(f"节点 {node} 的CPD已学习，父节点: {parents}, 残差方差: {variance:.6g}")
        
        logger.info(f"CPD学习完成，共学习 {len(self.cpds)} 个节点的CPD")
        return self.cpds
    
    def query_cpd(self, node: str) -> LinearGaussianCPD:
        """
        查询CPD
        
        Args:
            node: 节点名
            
        Returns:
            该节点的CPD
        """
        if node not in self.cpds:
            raise KeyError(f"节点 {node} 的CPD未学习")
        return self.cpds[node]
    
    def export_cpds(self) -> Dict[str, Dict]:
        """导出所有CPD"""
        return {node: cpd.to_dict() for node, cpd in self.cpds.items()}

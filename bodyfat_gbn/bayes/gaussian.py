#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
多元正态分布代数

- 把DAG上的线性高斯CPD组合为联合多元正态分布
- 多元正态分布的条件化
- 由精度矩阵得到无向邻接矩阵
"""
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import numpy as np
import pandas as pd
from scipy import linalg

from bodyfat_gbn.bayes.cpds import LinearGaussianCPD, as_column_arrays
from bodyfat_gbn.errors import MalformedInputError, SingularEvidenceError
from bodyfat_gbn.utils.logging import setup_logger

logger = setup_logger("gaussian")

# 证据协方差块允许的最大条件数
DEFAULT_MAX_CONDITION = 1e12


def _frozen(array: np.ndarray) -> np.ndarray:
    array = np.array(array, dtype=float)
    array.setflags(write=False)
    return array


@dataclass(frozen=True, eq=False)
class MultivariateNormal:
    """
    多元正态分布 N(mean, covariance)
    
    Attributes:
        variables: 变量名（决定 mean 与 covariance 的排列顺序）
        mean: 均值向量
        covariance: 协方差矩阵
    """
    variables: tuple
    mean: np.ndarray
    covariance: np.ndarray
    
    def __post_init__(self):
        object.__setattr__(self, 'variables', tuple(self.variables))
        object.__setattr__(self, 'mean', _frozen(self.mean))
        object.__setattr__(self, 'covariance', _frozen(self.covariance))
        
        k = len(self.variables)
        if len(set(self.variables)) != k:
            raise MalformedInputError(f"变量名重复: {self.variables}")
        if self.mean.shape != (k,) or self.covariance.shape != (k, k):
            raise MalformedInputError(
                f"维度不一致: {k} 个变量, 均值 {self.mean.shape}, 协方差 {self.covariance.shape}"
            )
    
    @classmethod
    def from_data(cls, df: pd.DataFrame, variables: Sequence[str]) -> 'MultivariateNormal':
        """
        饱和模型：样本均值与样本协方差（ddof=1）
        
        Args:
            df: 训练数据
            variables: 变量名
            
        Returns:
            MultivariateNormal对象
        """
        variables = list(variables)
        data = as_column_arrays(df, variables)
        if len(df) <= len(variables):
            raise MalformedInputError(
                f"样本数 {len(df)} 不大于变量数 {len(variables)}，样本协方差奇异"
            )
        matrix = np.column_stack([data[v] for v in variables])
        covariance = np.cov(matrix, rowvar=False, ddof=1)
        return cls(variables, matrix.mean(axis=0), covariance)
    
    @property
    def dimension(self) -> int:
        return len(self.variables)
    
    def index_of(self, names: Sequence[str]) -> List[int]:
        """变量名到位置下标"""
        positions = {name: i for i, name in enumerate(self.variables)}
        unknown = [name for name in names if name not in positions]
        if unknown:
            raise MalformedInputError(f"未知变量: {unknown}")
        return [positions[name] for name in names]
    
    def marginal(self, names: Sequence[str]) -> 'MultivariateNormal':
        """边缘分布"""
        idx = self.index_of(names)
        return MultivariateNormal(names, self.mean[idx], self.covariance[np.ix_(idx, idx)])
    
    def variance_of(self, name: str) -> float:
        i = self.index_of([name])[0]
        return float(self.covariance[i, i])
    
    def is_symmetric(self, atol: float = 1e-10) -> bool:
        return bool(np.allclose(self.covariance, self.covariance.T, atol=atol))
    
    def is_psd(self, eps: float = 1e-10) -> bool:
        """所有特征值不小于 -eps"""
        eigenvalues = linalg.eigvalsh(self.covariance)
        return bool(np.all(eigenvalues >= -eps))
    
    def to_frame(self) -> Dict[str, pd.DataFrame]:
        """以带变量名的DataFrame导出"""
        return {
            'mean': pd.Series(self.mean, index=self.variables, name='mean').to_frame(),
            'covariance': pd.DataFrame(self.covariance, index=self.variables, columns=self.variables)
        }


def compose_joint(structure, cpds: Dict[str, LinearGaussianCPD]) -> MultivariateNormal:
    """
    把DAG上的线性高斯CPD组合为联合多元正态分布
    
    按拓扑序处理节点，把每个节点表示为 μ_i + L_i · E，其中 E 为独立的
    标准正态噪声向量（每个节点引入一个自己的噪声项）：
    
        μ_i = a_i + Σ_j b_ij μ_j
        L_i = Σ_j b_ij L_j + sqrt(σ²_i) e_i
    
    最后 Σ = L Lᵀ，并显式对称化以消除浮点误差。
    
    Args:
        structure: BayesianNetworkStructure对象
        cpds: 节点名到CPD的映射
        
    Returns:
        变量顺序与 structure.nodes 一致的 MultivariateNormal
    """
    variables = structure.nodes
    missing = [node for node in variables if node not in cpds]
    if missing:
        raise MalformedInputError(f"以下节点缺少CPD: {missing}")
    
    position = {node: i for i, node in enumerate(variables)}
    k = len(variables)
    mean = np.zeros(k)
    loading = np.zeros((k, k))
    
    for node in structure.get_topological_order():
        cpd = cpds[node]
        if sorted(cpd.parents) != structure.get_parents(node):
            raise MalformedInputError(
                f"节点 {node} 的CPD父节点 {cpd.parents} 与结构 {structure.get_parents(node)} 不一致"
            )
        if cpd.variance < 0:
            raise MalformedInputError(f"节点 {node} 的残差方差为负: {cpd.variance}")
        
        i = position[node]
        mean[i] = cpd.intercept
        for parent, coef in cpd.coefficients.items():
            j = position[parent]
            mean[i] += coef * mean[j]
            loading[i] += coef * loading[j]
        loading[i, i] += np.sqrt(cpd.variance)
    
    covariance = loading @ loading.T
    covariance = (covariance + covariance.T) / 2.0
    
    logger.info(f"联合分布组合完成: {k} 个变量")
    return MultivariateNormal(variables, mean, covariance)


def condition(
    mvn: MultivariateNormal,
    evidence: Dict[str, float],
    targets: Optional[Sequence[str]] = None,
    max_condition: float = DEFAULT_MAX_CONDITION
) -> MultivariateNormal:
    """
    多元正态分布的条件化
    
        mean = μ_t + Σ_te Σ_ee⁻¹ (x_e - μ_e)
        cov  = Σ_tt - Σ_te Σ_ee⁻¹ Σ_et
    
    纯函数：不依赖也不修改任何外部状态。
    
    Args:
        mvn: 联合分布
        evidence: 观测变量名到观测值的映射
        targets: 目标变量（默认取全部非证据变量，保持模型顺序）
        max_condition: Σ_ee 允许的最大条件数
        
    Returns:
        目标变量的条件分布
    """
    evidence_names = list(evidence)
    mvn.index_of(evidence_names)
    
    if targets is None:
        targets = [v for v in mvn.variables if v not in evidence]
    else:
        targets = list(targets)
        clash = [t for t in targets if t in evidence]
        if clash:
            raise MalformedInputError(f"目标变量同时出现在证据中: {clash}")
    
    if not evidence_names:
        return mvn.marginal(targets)
    
    t_idx = mvn.index_of(targets)
    e_idx = mvn.index_of(evidence_names)
    
    observed = np.array([evidence[name] for name in evidence_names], dtype=float)
    if not np.all(np.isfinite(observed)):
        raise MalformedInputError(f"证据取值含缺失值或无穷值: {evidence}")
    
    sigma_ee = mvn.covariance[np.ix_(e_idx, e_idx)]
    sigma_te = mvn.covariance[np.ix_(t_idx, e_idx)]
    sigma_tt = mvn.covariance[np.ix_(t_idx, t_idx)]
    
    cond_number = np.linalg.cond(sigma_ee)
    if not np.isfinite(cond_number) or cond_number > max_condition:
        raise SingularEvidenceError(
            f"证据协方差块近似奇异（条件数 {cond_number:.3g} > {max_condition:.3g}）: {evidence_names}"
        )
    
    rhs = np.column_stack([observed - mvn.mean[e_idx], sigma_te.T])
    try:
        solved = linalg.solve(sigma_ee, rhs, assume_a='sym')
    except linalg.LinAlgError as e:
        raise SingularEvidenceError(f"证据协方差块不可逆: {e}") from e
    
    mean = mvn.mean[t_idx] + sigma_te @ solved[:, 0]
    covariance = sigma_tt - sigma_te @ solved[:, 1:]
    covariance = (covariance + covariance.T) / 2.0
    
    return MultivariateNormal(targets, mean, covariance)


def precision_adjacency(mvn: MultivariateNormal, threshold: float = 1e-4) -> pd.DataFrame:
    """
    由精度矩阵（协方差矩阵的逆）得到无向邻接矩阵
    
    |Σ⁻¹_ij| > threshold 时认为 i 与 j 之间有边（对角线置0）。
    对称化后再比较阈值，保证输出对称。
    
    Args:
        mvn: 多元正态分布
        threshold: 阈值
        
    Returns:
        0/1 邻接矩阵
    """
    try:
        precision = linalg.inv(mvn.covariance)
    except linalg.LinAlgError as e:
        raise SingularEvidenceError(f"协方差矩阵不可逆: {e}") from e
    precision = (precision + precision.T) / 2.0
    
    adjacency = (np.abs(precision) > threshold).astype(int)
    np.fill_diagonal(adjacency, 0)
    
    logger.info(f"精度矩阵阈值化: 阈值 {threshold}, 无向边 {int(adjacency.sum() // 2)} 条")
    return pd.DataFrame(adjacency, index=list(mvn.variables), columns=list(mvn.variables))

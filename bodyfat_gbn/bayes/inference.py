#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
贝叶斯推断
基于联合多元正态分布逐行计算目标变量的条件分布
"""
import pandas as pd
import numpy as np
from typing import Dict, Sequence
from tqdm import tqdm

from bodyfat_gbn.bayes.gaussian import MultivariateNormal, condition, DEFAULT_MAX_CONDITION
from bodyfat_gbn.errors import MalformedInputError
from bodyfat_gbn.utils.logging import setup_logger

logger = setup_logger("bayes_inference")


class BayesianInference:
    """
    贝叶斯推断器
    
    给定证据变量的观测值，输出目标变量的条件均值与条件方差
    注意：每一行都独立做条件化，行与行之间不共享任何状态
    """
    
    def __init__(
        self,
        mvn: MultivariateNormal,
        evidence_vars: Sequence[str],
        target_vars: Sequence[str],
        max_condition: float = DEFAULT_MAX_CONDITION
    ):
        """
        初始化推断器
        
        Args:
            mvn: 联合分布（饱和模型或GBN组合得到）
            evidence_vars: 证据变量（协变量）
            target_vars: 目标变量（响应变量）
            max_condition: 证据协方差块允许的最大条件数
        """
        self.mvn = mvn
        self.evidence_vars = list(evidence_vars)
        self.target_vars = list(target_vars)
        self.max_condition = max_condition
        
        overlap = set(self.evidence_vars) & set(self.target_vars)
        if overlap:
            raise MalformedInputError(f"证据变量与目标变量重叠: {sorted(overlap)}")
        mvn.index_of(self.evidence_vars + self.target_vars)
        
        logger.info(f"初始化贝叶斯推断器: 证据 {len(self.evidence_vars)} 个, "
                    f"目标 {self.target_vars}")
    
    def predict(self, evidence: Dict[str, float]) -> MultivariateNormal:
        """
        单样本预测
        
        Args:
            evidence: 全部证据变量的观测值
            
        Returns:
            目标变量的条件分布
        """
        missing = [v for v in self.evidence_vars if v not in evidence]
        if missing:
            raise MalformedInputError(f"证据不完整，缺少: {missing}")
        
        observed = {v: float(evidence[v]) for v in self.evidence_vars}
        return condition(self.mvn, observed, self.target_vars, self.max_condition)
    
    def infer(self, df: pd.DataFrame, show_progress: bool = False) -> pd.DataFrame:
        """
        逐行计算目标变量的条件均值与条件方差
        
        Args:
            df: 含证据变量的测试数据
            show_progress: 是否显示进度条
            
        Returns:
            与 df 同索引的DataFrame，列为 <目标>_mean 与 <目标>_var
        """
        logger.info(f"开始逐行推断，共 {len(df)} 条记录...")
        
        missing = [v for v in self.evidence_vars if v not in df.columns]
        if missing:
            raise MalformedInputError(f"测试数据缺少证据列: {missing}")
        
        records = []
        rows = df[self.evidence_vars].itertuples(index=False, name=None)
        for values in tqdm(rows, total=len(df), desc="条件推断", disable=not show_progress):
            posterior = self.predict(dict(zip(self.evidence_vars, values)))
            record = {}
            for i, target in enumerate(self.target_vars):
                record[f'{target}_mean'] = posterior.mean[i]
                record[f'{target}_var'] = posterior.covariance[i, i]
            records.append(record)
        
        columns = [f'{t}_{suffix}' for t in self.target_vars for suffix in ('mean', 'var')]
        predictions = pd.DataFrame(records, index=df.index, columns=columns)
        
        logger.info("条件推断完成")
        return predictions
    
    def explain_prediction(
        self,
        structure,
        evidence: Dict[str, float],
        target_variable: str
    ) -> Dict:
        """
        解释预测结果
        
        返回Markov Blanket、其中的证据以及条件分布
        
        Args:
            structure: BayesianNetworkStructure对象
            evidence: 观测证据
            target_variable: 目标变量
            
        Returns:
            解释字典
        """
        if target_variable not in self.target_vars:
            raise MalformedInputError(f"{target_variable} 不是目标变量")
        
        markov_blanket = structure.get_markov_blanket(target_variable)
        posterior = self.predict(evidence)
        i = self.target_vars.index(target_variable)
        
        return {
            'target_variable': target_variable,
            'mean': float(posterior.mean[i]),
            'stdev': float(np.sqrt(posterior.covariance[i, i])),
            'markov_blanket': markov_blanket,
            'relevant_evidence': {k: v for k, v in evidence.items() if k in markov_blanket},
            'parents': structure.get_parents(target_variable)
        }

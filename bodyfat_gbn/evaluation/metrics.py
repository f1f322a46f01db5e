#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
评估指标
包含偏差（Bias）、标准差（Stdev）与预测标准误（SEP）
"""
import pandas as pd
import numpy as np
from typing import Dict, Sequence

from bodyfat_gbn.bayes.inference import BayesianInference
from bodyfat_gbn.errors import MalformedInputError
from bodyfat_gbn.utils.logging import setup_logger

logger = setup_logger("metrics")

METRICS = ['bias', 'stdev', 'sep']


def compute_prediction_errors(
    observed: pd.DataFrame,
    predictions: pd.DataFrame,
    targets: Sequence[str]
) -> pd.DataFrame:
    """
    逐行计算预测误差
    
    bias = |观测值 - 条件均值|
    stdev = sqrt(条件方差)
    sep = sqrt(bias² + stdev²)
    
    Args:
        observed: 含目标变量真实值的数据
        predictions: BayesianInference.infer 的输出
        targets: 目标变量
        
    Returns:
        列为 (目标, 指标) 二级索引的DataFrame
    """
    if not observed.index.equals(predictions.index):
        raise MalformedInputError("观测数据与预测结果的行索引不一致")
    
    columns = {}
    for target in targets:
        bias = (observed[target] - predictions[f'{target}_mean']).abs()
        stdev = np.sqrt(predictions[f'{target}_var'])
        columns[(target, 'bias')] = bias
        columns[(target, 'stdev')] = stdev
        columns[(target, 'sep')] = np.sqrt(bias ** 2 + stdev ** 2)
    
    errors = pd.DataFrame(columns, index=observed.index)
    errors.columns = pd.MultiIndex.from_tuples(errors.columns, names=['target', 'metric'])
    return errors


def summarize_errors(errors: pd.DataFrame) -> pd.DataFrame:
    """
    对测试集各行取列均值
    
    Args:
        errors: compute_prediction_errors 的输出
        
    Returns:
        以目标变量为行、bias/stdev/sep 为列的汇总表
    """
    summary = errors.mean(axis=0).unstack('metric')
    return summary[METRICS]


def evaluate_model(
    inference: BayesianInference,
    test_df: pd.DataFrame,
    model_name: str = 'model'
) -> Dict:
    """
    评估模型性能
    
    Args:
        inference: 已配置好证据/目标变量的推断器
        test_df: 测试集（含证据变量和目标变量真实值）
        model_name: 模型名称（仅用于日志）
        
    Returns:
        评估结果字典
    """
    logger.info(f"开始评估模型: {model_name}")
    
    if len(test_df) == 0:
        raise MalformedInputError("测试集为空，无法评估")
    
    predictions = inference.infer(test_df)
    errors = compute_prediction_errors(test_df, predictions, inference.target_vars)
    summary = summarize_errors(errors)
    
    for target, row in summary.iterrows():
        logger.info(f"  {target}: Bias={row['bias']:.4f}, Stdev={row['stdev']:.4f}, SEP={row['sep']:.4f}")
    
    return {
        'model': model_name,
        'predictions': predictions,
        'per_row': errors,
        'summary': summary,
        'n_samples': len(test_df)
    }


def compare_models(results: Dict[str, Dict]) -> pd.DataFrame:
    """
    汇总多个模型的评估结果
    
    Args:
        results: 模型名到 evaluate_model 结果的映射
        
    Returns:
        以 (模型, 目标变量) 为行索引的对比表
    """
    frames = {name: result['summary'] for name, result in results.items()}
    comparison = pd.concat(frames, names=['model', 'target'])
    return comparison

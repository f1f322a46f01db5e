#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
评估模块
包含预测误差指标与结构可视化
"""
from bodyfat_gbn.evaluation.metrics import (
    compute_prediction_errors,
    summarize_errors,
    evaluate_model,
    compare_models
)
from bodyfat_gbn.evaluation.plots import plot_network

__all__ = [
    'compute_prediction_errors',
    'summarize_errors',
    'evaluate_model',
    'compare_models',
    'plot_network'
]

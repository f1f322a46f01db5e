#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
数据预处理模块
负责数据校验、离群样本剔除与单位换算
"""
from bodyfat_gbn.preprocessing.bodyfat import BodyFatPreprocessor, add_derived_columns

__all__ = [
    'BodyFatPreprocessor',
    'add_derived_columns'
]

#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
BodyFat GBN
基于高斯贝叶斯网络的体脂预测：结构学习、参数估计与条件推断
"""
__version__ = "0.1.0"

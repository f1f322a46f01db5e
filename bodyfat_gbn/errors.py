#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
异常定义
结构冲突、奇异证据、输入格式错误
"""


class GBNError(Exception):
    """高斯贝叶斯网络流程中所有错误的基类"""


class StructuralConflictError(GBNError, ValueError):
    """
    结构冲突

    白名单与黑名单重叠、白名单本身存在环、或出现自环边
    """


class SingularEvidenceError(GBNError, ArithmeticError):
    """证据协方差块奇异（或条件数过大），无法求条件分布"""


class MalformedInputError(GBNError, ValueError):
    """输入数据不合法：缺列、非数值、缺失值、样本数不足或变量名未知"""

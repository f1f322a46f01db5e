#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
贝叶斯网络变量定义
定义体脂数据中的所有连续随机变量
"""
from typing import List, Dict
from dataclasses import dataclass


@dataclass(frozen=True)
class GaussianVariable:
    """
    高斯贝叶斯网络中的连续随机变量
    
    Attributes:
        name: 变量名（数据列名）
        unit: 计量单位
        description: 变量描述
        variable_type: 变量类型（'response', 'covariate'）
    """
    name: str
    unit: str
    description: str
    variable_type: str


# 英制到公制的换算系数
POUND_TO_KG = 0.45359237
INCH_TO_CM = 2.54


# ============ 响应变量 ============

DENSITY = GaussianVariable('Density', 'g/cm^3', '水下称重法测得的身体密度', 'response')
BODY_FAT = GaussianVariable('BodyFat', '%', 'Siri公式计算的体脂百分比', 'response')


# ============ 协变量 ============

WEIGHT_KG = GaussianVariable('Wkg', 'kg', '体重（由Weight磅换算）', 'covariate')
HEIGHT_CM = GaussianVariable('Hcm', 'cm', '身高（由Height英寸换算）', 'covariate')
NECK = GaussianVariable('Neck', 'cm', '颈围', 'covariate')
CHEST = GaussianVariable('Chest', 'cm', '胸围', 'covariate')
ABDOMEN = GaussianVariable('Abdomen', 'cm', '腹围', 'covariate')
HIP = GaussianVariable('Hip', 'cm', '臀围', 'covariate')
THIGH = GaussianVariable('Thigh', 'cm', '大腿围', 'covariate')
KNEE = GaussianVariable('Knee', 'cm', '膝围', 'covariate')
ANKLE = GaussianVariable('Ankle', 'cm', '踝围', 'covariate')
BICEPS = GaussianVariable('Biceps', 'cm', '上臂围（伸展）', 'covariate')
FOREARM = GaussianVariable('Forearm', 'cm', '前臂围', 'covariate')
WRIST = GaussianVariable('Wrist', 'cm', '腕围', 'covariate')


def get_all_variables() -> Dict[str, GaussianVariable]:
    """
    获取所有定义的变量
    
    Returns:
        变量名到变量对象的映射（响应变量在前）
    """
    variables = [
        DENSITY, BODY_FAT,
        WEIGHT_KG, HEIGHT_CM, NECK, CHEST, ABDOMEN, HIP,
        THIGH, KNEE, ANKLE, BICEPS, FOREARM, WRIST
    ]
    return {var.name: var for var in variables}


def get_variables_by_type(variable_type: str) -> List[GaussianVariable]:
    """
    按类型获取变量
    
    Args:
        variable_type: 变量类型
        
    Returns:
        该类型的所有变量
    """
    all_vars = get_all_variables()
    return [var for var in all_vars.values() if var.variable_type == variable_type]


def default_responses() -> List[str]:
    """默认响应变量名"""
    return [var.name for var in get_variables_by_type('response')]


def default_covariates() -> List[str]:
    """默认协变量名"""
    return [var.name for var in get_variables_by_type('covariate')]

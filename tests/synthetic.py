#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
测试用的合成数据
"""
import numpy as np
import pandas as pd


def make_bodyfat_frame(n: int = 252, seed: int = 7) -> pd.DataFrame:
    """
    生成与体脂数据列结构一致的合成数据
    
    第38、41行被改写为明显的离群值（体重363磅、身高29.5英寸）。
    """
    rng = np.random.RandomState(seed)
    size = rng.normal(0, 1, n)
    fat = rng.normal(0, 1, n)
    
    def noise(scale):
        return rng.normal(0, scale, n)
    
    df = pd.DataFrame({
        'Age': rng.randint(22, 81, n).astype(float),
        'Weight': 178 + 15 * size + 15 * fat + noise(8),
        'Height': 70 + 1.5 * size + noise(2),
        'Neck': 38 + 1.2 * size + 0.8 * fat + noise(0.8),
        'Chest': 100 + 4 * size + 4 * fat + noise(2.5),
        'Abdomen': 92 + 3 * size + 7 * fat + noise(2.5),
        'Hip': 99 + 3 * size + 4 * fat + noise(2),
        'Thigh': 59 + 2 * size + 3 * fat + noise(2),
        'Knee': 38.5 + 1.2 * size + 0.5 * fat + noise(0.8),
        'Ankle': 23 + 0.8 * size + noise(0.8),
        'Biceps': 32 + 1.5 * size + 1.2 * fat + noise(1.2),
        'Forearm': 28.6 + 1.0 * size + 0.4 * fat + noise(1.0),
        'Wrist': 18.2 + 0.6 * size + noise(0.5),
    })
    df['BodyFat'] = 19 + 6 * fat + 0.4 * (df['Abdomen'] - 92) + noise(2)
    df['Density'] = 495.0 / (df['BodyFat'] + 450.0) + noise(0.001)
    
    df.loc[38, 'Weight'] = 363.15
    df.loc[41, 'Height'] = 29.5
    return df


def make_chain_frame(n: int = 400, seed: int = 0) -> pd.DataFrame:
    """A -> B -> C 链式结构的数据"""
    rng = np.random.RandomState(seed)
    a = rng.normal(0, 1, n)
    b = 1.5 * a + rng.normal(0, 0.5, n)
    c = -2.0 * b + rng.normal(0, 0.5, n)
    return pd.DataFrame({'A': a, 'B': b, 'C': c})

#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
体脂数据预处理器
负责字段校验、剔除离群样本与单位换算
"""
import pandas as pd
from typing import List, Optional, Sequence

from bodyfat_gbn.errors import MalformedInputError
from bodyfat_gbn.bayes.variables import (
    POUND_TO_KG, INCH_TO_CM, default_responses, default_covariates
)
from bodyfat_gbn.utils.logging import setup_logger

logger = setup_logger("bodyfat_preprocessor")

# 派生列 -> (原始列, 换算系数)
DERIVED_COLUMNS = {
    'Wkg': ('Weight', POUND_TO_KG),
    'Hcm': ('Height', INCH_TO_CM),
}

# 原始文件第39行（体重363磅）与第42行（身高29.5英寸）
DEFAULT_OUTLIER_ROWS = (38, 41)


class BodyFatPreprocessor:
    """体脂测量数据预处理器"""
    
    def __init__(
        self,
        responses: Optional[List[str]] = None,
        covariates: Optional[List[str]] = None,
        outlier_rows: Sequence[int] = DEFAULT_OUTLIER_ROWS
    ):
        """
        初始化预处理器
        
        Args:
            responses: 响应变量列名
            covariates: 协变量列名
            outlier_rows: 需要剔除的离群样本行标签
        """
        self.responses = list(responses or default_responses())
        self.covariates = list(covariates or default_covariates())
        self.outlier_rows = list(outlier_rows)
        
        overlap = set(self.responses) & set(self.covariates)
        if overlap:
            raise MalformedInputError(f"响应变量与协变量重叠: {sorted(overlap)}")
        
        logger.info(f"初始化体脂预处理器: {len(self.responses)} 个响应变量, "
                    f"{len(self.covariates)} 个协变量")
    
    @property
    def variables(self) -> List[str]:
        """建模使用的全部变量（响应变量在前）"""
        return self.responses + self.covariates
    
    def prepare(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        校验、剔除离群样本并派生公制列
        
        Args:
            df: 原始数据
            
        Returns:
            清洗后的新DataFrame（重新编号的行索引）
        """
        logger.info(f"开始预处理体脂数据，原始记录 {len(df)} 条")
        
        required = self._check_columns(df)
        self._check_values(df, required)

        df_clean = self._drop_outliers(df)
        df_clean = add_derived_columns(df_clean)

        if len(df_clean) <= len(self.variables):
            raise MalformedInputError(
                f"样本数 {len(df_clean)} 不大于变量数 {len(self.variables)}，回归欠定"
            )

        df_clean = df_clean.reset_index(drop=True)
        logger.info(f"预处理完成，保留 {len(df_clean)} 条记录")
        return df_clean
    
    def _check_columns(self, df: pd.DataFrame) -> List[str]:
        """检查建模所需的原始列是否齐全，返回这些列名"""
        required = []
        for name in self.variables:
            if name in DERIVED_COLUMNS and name not in df.columns:
                name = DERIVED_COLUMNS[name][0]
            if name not in required:
                required.append(name)

        missing = [col for col in required if col not in df.columns]
        if missing:
            raise MalformedInputError(f"数据缺少必需列: {missing}")
        return required
    
    def _drop_outliers(self, df: pd.DataFrame) -> pd.DataFrame:
        """剔除预先标记的离群样本"""
        absent = [row for row in self.outlier_rows if row not in df.index]
        if absent:
            raise MalformedInputError(f"离群样本行不存在: {absent}")
        
        df_clean = df.drop(index=self.outlier_rows)
        logger.info(f"  剔除离群样本 {len(self.outlier_rows)} 条: {self.outlier_rows}")
        return df_clean
    
    def _check_values(self, df: pd.DataFrame, columns: List[str]) -> None:
        """检查给定列均为数值且无缺失"""
        non_numeric = [
            col for col in columns
            if not pd.api.types.is_numeric_dtype(df[col])
        ]
        if non_numeric:
            raise MalformedInputError(f"以下列不是数值类型: {non_numeric}")

        n_missing = df[columns].isna().sum()
        n_missing = n_missing[n_missing > 0]
        if len(n_missing) > 0:
            raise MalformedInputError(f"以下列存在缺失值: {n_missing.to_dict()}")


def add_derived_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    追加公制单位列 Wkg 与 Hcm
    
    已存在的派生列不会重新计算。
    
    Args:
        df: 含 Weight（磅）和 Height（英寸）的数据
        
    Returns:
        追加派生列后的新DataFrame
    """
    df = df.copy()
    for derived, (source, factor) in DERIVED_COLUMNS.items():
        if derived in df.columns or source not in df.columns:
            continue
        df[derived] = df[source].astype(float) * factor
        logger.debug(f"派生列 {derived} = {source} × {factor}")
    return df

#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
测试训练/测试集划分
"""
import unittest
import pandas as pd
import numpy as np
from bodyfat_gbn.utils.data_split import split_train_test, validate_split


class TestSplitTrainTest(unittest.TestCase):
    """测试单次置换切分"""
    
    def setUp(self):
        """准备250行数据（252行剔除2个离群样本）"""
        self.df = pd.DataFrame({'x': np.arange(250, dtype=float)})
    
    def test_exact_sizes(self):
        """0.6 的比例得到精确的 150 / 100"""
        train, test = split_train_test(self.df, train_ratio=0.6, random_state=1)
        self.assertEqual(len(train), 150)
        self.assertEqual(len(test), 100)
    
    def test_disjoint_and_complete(self):
        """两部分不相交且并集为全集"""
        train, test = split_train_test(self.df, train_ratio=0.6, random_state=1)
        self.assertEqual(set(train.index) & set(test.index), set())
        self.assertEqual(set(train.index) | set(test.index), set(self.df.index))
        self.assertTrue(validate_split(train, test, n_total=len(self.df)))
    
    def test_floor_of_fraction(self):
        """训练集大小取 floor(N*p)"""
        df = pd.DataFrame({'x': np.arange(7, dtype=float)})
        train, test = split_train_test(df, train_ratio=0.5, random_state=0)
        self.assertEqual(len(train), 3)
        self.assertEqual(len(test), 4)
    
    def test_decimal_ratio_not_rounded_down(self):
        """100 * 0.29 的浮点结果略小于 29，训练集仍为 29 行"""
        df = pd.DataFrame({'x': np.arange(100, dtype=float)})
        train, test = split_train_test(df, train_ratio=0.29, random_state=0)
        self.assertEqual(len(train), 29)
        self.assertEqual(len(test), 71)
    
    def test_reproducible(self):
        """相同种子得到相同划分"""
        train1, _ = split_train_test(self.df, random_state=42)
        train2, _ = split_train_test(self.df, random_state=42)
        self.assertListEqual(list(train1.index), list(train2.index))
        
        train3, _ = split_train_test(self.df, random_state=43)
        self.assertNotEqual(list(train1.index), list(train3.index))
    
    def test_invalid_ratio(self):
        """比例必须在 (0, 1) 之间"""
        for ratio in (0.0, 1.0, -0.2, 1.5):
            with self.assertRaises(ValueError):
                split_train_test(self.df, train_ratio=ratio)
    
    def test_validate_detects_overlap(self):
        """重叠的划分不能通过校验"""
        self.assertFalse(validate_split(self.df.iloc[:10], self.df.iloc[5:20]))
    
    def test_validate_detects_missing_rows(self):
        """并集不完整时不能通过校验"""
        self.assertFalse(validate_split(self.df.iloc[:10], self.df.iloc[10:20], n_total=250))


if __name__ == '__main__':
    unittest.main()

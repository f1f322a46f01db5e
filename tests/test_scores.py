#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
测试高斯BIC评分
"""
import math
import unittest
import numpy as np

from bodyfat_gbn.bayes.scores import GaussianBICScore
from bodyfat_gbn.bayes.structure import BayesianNetworkStructure
from bodyfat_gbn.errors import MalformedInputError
from synthetic import make_chain_frame


class TestGaussianBICScore(unittest.TestCase):
    """测试局部评分与可分解性"""
    
    def setUp(self):
        self.df = make_chain_frame(n=300)
        self.scorer = GaussianBICScore(self.df)
    
    def test_root_closed_form(self):
        """无父节点时的评分等于闭式解"""
        x = self.df['A'].to_numpy()
        n = len(x)
        sigma2 = np.mean((x - x.mean()) ** 2)
        loglik = -n / 2.0 * (math.log(2 * math.pi * sigma2) + 1)
        expected = -loglik + math.log(n) / 2.0 * 2
        self.assertAlmostEqual(self.scorer.local_score('A', []), expected, places=6)
    
    def test_parent_improves_fit(self):
        """真实父节点使评分下降"""
        self.assertLess(self.scorer.local_score('B', ['A']), self.scorer.local_score('B', []))
    
    def test_penalty_weight(self):
        """惩罚系数按参数个数线性作用"""
        heavy = GaussianBICScore(self.df, penalty_weight=3.0)
        diff = heavy.local_score('C', ['A', 'B']) - self.scorer.local_score('C', ['A', 'B'])
        self.assertAlmostEqual(diff, 2.0 * math.log(300) / 2.0 * 4, places=6)
    
    def test_decomposable(self):
        """全局评分等于各节点局部评分之和"""
        structure = BayesianNetworkStructure.from_edges(['A', 'B', 'C'], [('A', 'B'), ('B', 'C')])
        total = self.scorer.score(structure)
        parts = (self.scorer.local_score('A', [])
                 + self.scorer.local_score('B', ['A'])
                 + self.scorer.local_score('C', ['B']))
        self.assertAlmostEqual(total, parts, places=8)
        self.assertEqual(self.scorer.n_parameters(structure), 2 + 3 + 3)
    
    def test_cache_order_insensitive(self):
        """父节点顺序不影响缓存"""
        s1 = self.scorer.local_score('C', ['A', 'B'])
        size = self.scorer.cache_size
        s2 = self.scorer.local_score('C', ['B', 'A'])
        self.assertEqual(s1, s2)
        self.assertEqual(self.scorer.cache_size, size)
    
    def test_underdetermined(self):
        """样本数不足时回归欠定"""
        scorer = GaussianBICScore(self.df.iloc[:3])
        with self.assertRaises(MalformedInputError):
            scorer.local_score('C', ['A', 'B'])
    
    def test_missing_variable(self):
        with self.assertRaises(MalformedInputError):
            GaussianBICScore(self.df, variables=['A', 'Z'])


if __name__ == '__main__':
    unittest.main()

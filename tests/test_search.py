#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
测试受约束的爬山结构搜索
"""
import unittest
import networkx as nx
import numpy as np
import pandas as pd

from bodyfat_gbn.bayes.scores import GaussianBICScore
from bodyfat_gbn.bayes.search import HillClimbSearch, Move, ADD, REMOVE, REVERSE, _precedes
from bodyfat_gbn.bayes.structure import BayesianNetworkStructure, EdgeConstraints
from bodyfat_gbn.errors import StructuralConflictError
from bodyfat_gbn.preprocessing import BodyFatPreprocessor
from synthetic import make_bodyfat_frame, make_chain_frame


class TestHillClimbChain(unittest.TestCase):
    """三节点链数据上的搜索"""
    
    def setUp(self):
        self.scorer = GaussianBICScore(make_chain_frame())
        self.search = HillClimbSearch(self.scorer)
    
    def test_recovers_skeleton(self):
        """找到 A-B 与 B-C 两条相邻关系"""
        result = self.search.estimate()
        skeleton = {frozenset(edge) for edge in result.structure.edges}
        self.assertIn(frozenset(('A', 'B')), skeleton)
        self.assertIn(frozenset(('B', 'C')), skeleton)
        self.assertTrue(result.converged)
    
    def test_incremental_score_matches_full(self):
        """增量维护的评分等于从头计算的评分"""
        result = self.search.estimate()
        self.assertAlmostEqual(result.score, self.scorer.score(result.structure), places=6)
        self.assertLessEqual(result.score, result.initial_score)
    
    def test_history_replay(self):
        """逐步重放每一次操作，评分与记录一致"""
        result = self.search.estimate()
        structure = BayesianNetworkStructure(self.scorer.variables)
        for step in result.history:
            move = step.move
            if move.operation == ADD:
                structure.add_edge(move.parent, move.child)
            elif move.operation == REMOVE:
                structure.remove_edge(move.parent, move.child)
            else:
                self.assertEqual(move.operation, REVERSE)
                structure.reverse_edge(move.parent, move.child)
            self.assertLess(step.delta, 0)
            self.assertAlmostEqual(step.score, self.scorer.score(structure), places=6)
        self.assertListEqual(structure.edges, result.structure.edges)
    
    def test_deterministic(self):
        first = self.search.estimate()
        second = HillClimbSearch(GaussianBICScore(make_chain_frame())).estimate()
        self.assertListEqual(first.structure.edges, second.structure.edges)
    
    def test_heavy_penalty_keeps_whitelist_only(self):
        """惩罚极大时只剩白名单边"""
        scorer = GaussianBICScore(make_chain_frame(), penalty_weight=1e6)
        constraints = EdgeConstraints.from_config(whitelist=[['C', 'A']])
        result = HillClimbSearch(scorer).estimate(constraints)
        self.assertListEqual(result.structure.edges, [('C', 'A')])
    
    def test_no_legal_moves(self):
        """两个变量、唯一的边在白名单中：直接返回初始图"""
        scorer = GaussianBICScore(make_chain_frame()[['A', 'B']])
        constraints = EdgeConstraints.from_config(whitelist=[['A', 'B']])
        result = HillClimbSearch(scorer).estimate(constraints)
        self.assertEqual(result.n_iterations, 0)
        self.assertListEqual(result.structure.edges, [('A', 'B')])
        self.assertAlmostEqual(result.score, result.initial_score)
    
    def test_max_indegree(self):
        result = self.search.estimate(max_indegree=1)
        for node in result.structure.nodes:
            self.assertLessEqual(len(result.structure.get_parents(node)), 1)
    
    def test_whitelist_exceeds_indegree(self):
        constraints = EdgeConstraints.from_config(whitelist=[['A', 'C'], ['B', 'C']])
        with self.assertRaises(StructuralConflictError):
            self.search.estimate(constraints, max_indegree=1)
    
    def test_conflicting_constraints(self):
        constraints = EdgeConstraints.from_config(whitelist=[['A', 'B']], blacklist=[['A', 'B']])
        with self.assertRaises(StructuralConflictError):
            self.search.estimate(constraints)
    
    def test_max_iter_stops(self):
        result = self.search.estimate(max_iter=1)
        self.assertEqual(result.n_iterations, 1)
        self.assertFalse(result.converged)


class TestScoreEquivalentTies(unittest.TestCase):
    """得分等价的操作按字典序取第一条边"""
    
    @staticmethod
    def _pair_frame(seed, columns=('A', 'B')):
        rng = np.random.RandomState(seed)
        a = rng.normal(0, 1, 200)
        b = a + rng.normal(0, 1, 200)
        return pd.DataFrame({'A': a, 'B': b})[list(columns)]
    
    def test_pair_orientation_is_lexicographic(self):
        """A -> B 与 B -> A 评分相同，所有种子都选 A -> B"""
        for seed in range(20):
            result = HillClimbSearch(GaussianBICScore(self._pair_frame(seed))).estimate()
            self.assertListEqual(result.structure.edges, [('A', 'B')], msg=f"seed={seed}")
    
    def test_column_order_does_not_matter(self):
        for seed in (0, 2, 6):
            frame = self._pair_frame(seed, columns=('B', 'A'))
            result = HillClimbSearch(GaussianBICScore(frame)).estimate()
            self.assertListEqual(result.structure.edges, [('A', 'B')])
    
    def test_precedes(self):
        first, second = Move(ADD, 'A', 'B'), Move(ADD, 'B', 'A')
        # 只差浮点舍入时按字典序
        self.assertTrue(_precedes(first, -12.5 + 8e-14, second, -12.5))
        self.assertFalse(_precedes(second, -12.5 - 8e-14, first, -12.5))
        # 真正更小的评分差优先
        self.assertTrue(_precedes(second, -13.0, first, -12.5))
        self.assertTrue(_precedes(Move(REMOVE, 'A', 'B'), -1.0, Move(REVERSE, 'A', 'B'), -1.0))


class TestHillClimbBodyFat(unittest.TestCase):
    """体脂数据上的约束搜索"""
    
    def setUp(self):
        preprocessor = BodyFatPreprocessor()
        df = preprocessor.prepare(make_bodyfat_frame())
        self.scorer = GaussianBICScore(df.iloc[:150], variables=preprocessor.variables)
        self.constraints = EdgeConstraints.from_config(
            whitelist=[['Hcm', 'Wkg'], ['Density', 'BodyFat']],
            blacklist=[['BodyFat', 'Hcm'], ['Density', 'Hcm'], ['Abdomen', 'BodyFat']]
        )
    
    def test_constraints_respected(self):
        """结果无环、包含全部白名单边、不含任何黑名单边"""
        result = HillClimbSearch(self.scorer).estimate(self.constraints)
        structure = result.structure
        
        self.assertTrue(nx.is_directed_acyclic_graph(structure.graph))
        self.assertEqual(len(structure.get_topological_order()), 14)
        for edge in self.constraints.whitelist:
            self.assertIn(edge, structure.edges)
        for edge in self.constraints.blacklist:
            self.assertNotIn(edge, structure.edges)
        self.assertAlmostEqual(result.score, self.scorer.score(structure), places=5)


if __name__ == '__main__':
    unittest.main()

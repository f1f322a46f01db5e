#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
测试DAG结构与边约束
"""
import unittest

from bodyfat_gbn.bayes.structure import BayesianNetworkStructure, EdgeConstraints
from bodyfat_gbn.errors import StructuralConflictError, MalformedInputError


class TestEdgeConstraints(unittest.TestCase):
    """测试白名单/黑名单校验"""
    
    def setUp(self):
        self.variables = ['A', 'B', 'C']
    
    def test_valid(self):
        constraints = EdgeConstraints.from_config(whitelist=[['A', 'B']], blacklist=[['B', 'A']])
        constraints.validate(self.variables)
        self.assertIn(('A', 'B'), constraints.whitelist)
    
    def test_overlap(self):
        """同一条边同时出现在白名单和黑名单中"""
        constraints = EdgeConstraints.from_config(whitelist=[['A', 'B']], blacklist=[['A', 'B']])
        with self.assertRaises(StructuralConflictError):
            constraints.validate(self.variables)
    
    def test_cyclic_whitelist(self):
        """白名单自身成环"""
        constraints = EdgeConstraints.from_config(
            whitelist=[['A', 'B'], ['B', 'C'], ['C', 'A']]
        )
        with self.assertRaises(StructuralConflictError):
            constraints.validate(self.variables)
    
    def test_self_loop(self):
        constraints = EdgeConstraints.from_config(blacklist=[['A', 'A']])
        with self.assertRaises(StructuralConflictError):
            constraints.validate(self.variables)
    
    def test_unknown_variable(self):
        constraints = EdgeConstraints.from_config(whitelist=[['A', 'Z']])
        with self.assertRaises(MalformedInputError):
            constraints.validate(self.variables)
    
    def test_malformed_pair(self):
        with self.assertRaises(MalformedInputError):
            EdgeConstraints.from_config(whitelist=[['A', 'B', 'C']])


class TestBayesianNetworkStructure(unittest.TestCase):
    """测试DAG操作"""
    
    def setUp(self):
        self.structure = BayesianNetworkStructure.from_edges(
            ['C', 'B', 'A', 'D'], [('A', 'B'), ('B', 'C'), ('D', 'C')]
        )
    
    def test_parents_children(self):
        self.assertListEqual(self.structure.get_parents('C'), ['B', 'D'])
        self.assertListEqual(self.structure.get_children('B'), ['C'])
        self.assertListEqual(self.structure.get_parents('A'), [])
    
    def test_cycle_rejected(self):
        """添加形成环的边会报错"""
        self.assertTrue(self.structure.creates_cycle('C', 'A'))
        with self.assertRaises(StructuralConflictError):
            self.structure.add_edge('C', 'A')
        self.assertTrue(self.structure.is_acyclic())
    
    def test_self_loop_rejected(self):
        with self.assertRaises(StructuralConflictError):
            self.structure.add_edge('A', 'A')
    
    def test_unknown_node(self):
        with self.assertRaises(MalformedInputError):
            self.structure.add_edge('A', 'Z')
    
    def test_reverse(self):
        """反转边"""
        self.structure.reverse_edge('D', 'C')
        self.assertTrue(self.structure.has_edge('C', 'D'))
        self.assertFalse(self.structure.has_edge('D', 'C'))
    
    def test_reverse_creating_cycle(self):
        """存在另一条路径时反转会成环"""
        self.structure.add_edge('A', 'C')
        self.assertTrue(self.structure.reversal_creates_cycle('A', 'C'))
        with self.assertRaises(StructuralConflictError):
            self.structure.reverse_edge('A', 'C')
        self.assertTrue(self.structure.has_edge('A', 'C'))
    
    def test_markov_blanket(self):
        """父节点、子节点与子节点的其他父节点"""
        self.assertListEqual(self.structure.get_markov_blanket('B'), ['A', 'C', 'D'])
        self.assertListEqual(self.structure.get_markov_blanket('A'), ['B'])
    
    def test_topological_order(self):
        """拓扑排序确定且满足边方向"""
        order = self.structure.get_topological_order()
        self.assertListEqual(order, ['A', 'B', 'D', 'C'])
    
    def test_satisfies(self):
        constraints = EdgeConstraints.from_config(whitelist=[['A', 'B']], blacklist=[['C', 'A']])
        self.assertTrue(self.structure.satisfies(constraints))
        constraints = EdgeConstraints.from_config(blacklist=[['B', 'C']])
        self.assertFalse(self.structure.satisfies(constraints))
    
    def test_edge_listing_and_export(self):
        self.assertListEqual(self.structure.edge_listing(), ['A -> B', 'B -> C', 'D -> C'])
        exported = self.structure.export_structure()
        self.assertTrue(exported['is_acyclic'])
        self.assertEqual(len(exported['edges']), 3)
    
    def test_copy_independent(self):
        copied = self.structure.copy()
        copied.remove_edge('A', 'B')
        self.assertTrue(self.structure.has_edge('A', 'B'))


if __name__ == '__main__':
    unittest.main()

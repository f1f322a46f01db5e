#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
测试网络结构图绘制
"""
import os
import shutil
import tempfile
import unittest

from bodyfat_gbn.bayes.structure import BayesianNetworkStructure
from bodyfat_gbn.evaluation import plots


class TestPlotNetwork(unittest.TestCase):
    
    def setUp(self):
        self.output_dir = tempfile.mkdtemp()
        self.structure = BayesianNetworkStructure.from_edges(
            ['A', 'B', 'C'], [('A', 'B'), ('B', 'C')]
        )
    
    def tearDown(self):
        shutil.rmtree(self.output_dir, ignore_errors=True)
    
    def test_import_leaves_backend_alone(self):
        """模块导入时不加载 pyplot、不设置后端"""
        self.assertFalse(hasattr(plots, 'plt'))
        self.assertFalse(hasattr(plots, 'matplotlib'))
    
    def test_writes_png(self):
        path = os.path.join(self.output_dir, 'nested', 'network.png')
        plots.plot_network(self.structure, path, highlight=['C'])
        self.assertTrue(os.path.exists(path))
        with open(path, 'rb') as f:
            self.assertEqual(f.read(8), b'\x89PNG\r\n\x1a\n')


if __name__ == '__main__':
    unittest.main()

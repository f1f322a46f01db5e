#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
贝叶斯网络模块
包含DAG结构、结构搜索、线性高斯CPD学习、联合分布组合与条件推断
"""
from bodyfat_gbn.bayes.variables import GaussianVariable, get_all_variables
from bodyfat_gbn.bayes.structure import BayesianNetworkStructure, EdgeConstraints
from bodyfat_gbn.bayes.scores import GaussianBICScore
from bodyfat_gbn.bayes.search import HillClimbSearch, SearchResult
from bodyfat_gbn.bayes.cpds import CPDLearner, LinearGaussianCPD
from bodyfat_gbn.bayes.gaussian import MultivariateNormal, compose_joint, condition, precision_adjacency
from bodyfat_gbn.bayes.inference import BayesianInference

__all__ = [
    'GaussianVariable',
    'get_all_variables',
    'BayesianNetworkStructure',
    'EdgeConstraints',
    'GaussianBICScore',
    'HillClimbSearch',
    'SearchResult',
    'CPDLearner',
    'LinearGaussianCPD',
    'MultivariateNormal',
    'compose_joint',
    'condition',
    'precision_adjacency',
    'BayesianInference'
]

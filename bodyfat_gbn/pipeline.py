#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Pipeline调度器
协调整个高斯贝叶斯网络建模与评估流程
"""
import os
from typing import Dict, Optional, Tuple

import numpy as np
import pandas as pd

from bodyfat_gbn.utils.config import load_config, override_config, coerce_settings, ensure_dir
from bodyfat_gbn.utils.data_split import split_train_test, validate_split
from bodyfat_gbn.utils.io import load_data, save_data, save_metadata, save_text
from bodyfat_gbn.utils.logging import setup_logger
from bodyfat_gbn.preprocessing import BodyFatPreprocessor
from bodyfat_gbn.bayes import (
    BayesianInference,
    CPDLearner,
    EdgeConstraints,
    GaussianBICScore,
    HillClimbSearch,
    MultivariateNormal,
    compose_joint,
    precision_adjacency
)
from bodyfat_gbn.bayes.gaussian import DEFAULT_MAX_CONDITION
from bodyfat_gbn.errors import MalformedInputError, StructuralConflictError
from bodyfat_gbn.evaluation import evaluate_model, compare_models, plot_network

logger = setup_logger("pipeline")

# 数值配置项及其类型
NUMERIC_SETTINGS = {
    'split.train_ratio': float,
    'split.random_state': int,
    'structure.penalty_weight': float,
    'structure.max_indegree': int,
    'structure.max_iter': int,
    'structure.tolerance': float,
    'inference.max_condition': float,
    'inference.precision_threshold': float,
}


class BodyFatGBNPipeline:
    """
    体脂高斯贝叶斯网络Pipeline
    
    完整流程：
    1. 数据预处理 - 剔除离群样本，派生公制列
    2. 训练/测试集划分
    3. 饱和模型（样本均值与协方差）及其精度矩阵邻接
    4. 受约束的爬山结构搜索
    5. 线性高斯参数估计与联合分布组合
    6. 两个模型在测试集上的条件预测评估
    7. 单样本示例预测
    """
    
    def __init__(self, config: Dict):
        """
        初始化Pipeline
        
        Args:
            config: 配置字典（见 configs/default.yaml）
        """
        self.config = coerce_settings(config, NUMERIC_SETTINGS)
        self.artifacts: Dict = {}
        
        data_cfg = self.config.get('data', {})
        self.preprocessor = BodyFatPreprocessor(
            responses=data_cfg.get('responses'),
            covariates=data_cfg.get('covariates'),
            outlier_rows=data_cfg.get('outlier_rows', [38, 41])
        )
        
        logger.info("="*80)
        logger.info("BodyFat GBN Pipeline 初始化")
        logger.info("="*80)
    
    @classmethod
    def from_config_file(cls, config_path: str, overrides: Optional[Dict] = None) -> 'BodyFatGBNPipeline':
        """从YAML配置文件构造，命令行覆盖项优先"""
        return cls(override_config(load_config(config_path), overrides))
    
    @property
    def responses(self):
        return self.preprocessor.responses
    
    @property
    def covariates(self):
        return self.preprocessor.covariates
    
    def run(self, df: Optional[pd.DataFrame] = None) -> Dict:
        """
        运行完整Pipeline
        
        Args:
            df: 原始数据（None时从配置的路径加载）
            
        Returns:
            处理结果统计字典
        """
        # ========== 阶段1: 数据预处理 ==========
        logger.info("【阶段1】数据预处理")
        df = self._prepare(df)
        
        # ========== 阶段2: 数据划分 ==========
        logger.info("\n【阶段2】训练/测试集划分")
        train_df, test_df = self._split(df)
        
        # ========== 阶段3: 饱和模型 ==========
        logger.info("\n【阶段3】饱和模型")
        saturated, adjacency = self._fit_saturated(train_df)
        
        # ========== 阶段4: 结构学习 ==========
        logger.info("\n【阶段4】受约束的爬山结构搜索")
        search_result = self._learn_structure(train_df)
        structure = search_result.structure
        
        # ========== 阶段5: 参数估计 ==========
        logger.info("\n【阶段5】线性高斯参数估计")
        gbn, cpd_learner = self._fit_gbn(train_df, structure)
        
        # ========== 阶段6: 推断与评估 ==========
        logger.info("\n【阶段6】推断与评估")
        results = self._evaluate({'saturated': saturated, 'gbn': gbn}, test_df)
        
        # ========== 阶段7: 单样本预测 ==========
        logger.info("\n【阶段7】单样本示例预测")
        example = self._example_prediction(gbn, structure, test_df)
        
        self.artifacts = {
            'data': df,
            'train': train_df,
            'test': test_df,
            'saturated': saturated,
            'precision_adjacency': adjacency,
            'search_result': search_result,
            'structure': structure,
            'cpds': cpd_learner.cpds,
            'gbn': gbn,
            'results': results,
            'comparison': compare_models(results),
            'example': example
        }
        
        # ========== 保存结果 ==========
        output_files = self._save_results()
        
        stats = self._generate_statistics(output_files)
        
        logger.info(f"\n{'='*80}")
        logger.info("Pipeline 运行完成！")
        logger.info(f"{'='*80}\n")
        
        return stats
    
    def _prepare(self, df: Optional[pd.DataFrame]) -> pd.DataFrame:
        """阶段1: 加载并清洗数据"""
        if df is None:
            path = self.config.get('data', {}).get('path')
            if not path:
                raise MalformedInputError("未提供数据，也未在配置中指定 data.path")
            logger.info(f"  加载数据: {path}")
            df = load_data(path)
        return self.preprocessor.prepare(df)
    
    def _split(self, df: pd.DataFrame) -> Tuple[pd.DataFrame, pd.DataFrame]:
        """阶段2: 单次随机置换后切分"""
        split_cfg = self.config.get('split', {})
        train_df, test_df = split_train_test(
            df,
            train_ratio=split_cfg.get('train_ratio', 0.6),
            random_state=split_cfg.get('random_state', 2024)
        )
        if not validate_split(train_df, test_df, n_total=len(df)):
            raise MalformedInputError("训练/测试集划分校验失败")
        return train_df, test_df
    
    def _fit_saturated(self, train_df: pd.DataFrame) -> Tuple[MultivariateNormal, pd.DataFrame]:
        """阶段3: 饱和模型与精度矩阵邻接"""
        variables = self.preprocessor.variables
        saturated = MultivariateNormal.from_data(train_df, variables)
        
        threshold = self.config.get('inference', {}).get('precision_threshold', 1e-4)
        adjacency = precision_adjacency(saturated, threshold=threshold)
        
        logger.info(f"  饱和模型: {saturated.dimension} 维, "
                    f"精度矩阵非零项 {int(adjacency.values.sum() // 2)} 对")
        return saturated, adjacency
    
    def _learn_structure(self, train_df: pd.DataFrame):
        """阶段4: 结构搜索"""
        structure_cfg = self.config.get('structure', {})
        
        constraints = EdgeConstraints.from_config(
            whitelist=structure_cfg.get('whitelist'),
            blacklist=structure_cfg.get('blacklist')
        )
        scorer = GaussianBICScore(
            train_df,
            variables=self.preprocessor.variables,
            penalty_weight=structure_cfg.get('penalty_weight', 1.0)
        )
        search = HillClimbSearch(scorer)
        result = search.estimate(
            constraints=constraints,
            max_indegree=structure_cfg.get('max_indegree'),
            max_iter=structure_cfg.get('max_iter', 1000),
            tolerance=structure_cfg.get('tolerance', 1e-8),
            show_progress=structure_cfg.get('show_progress', False)
        )
        
        if not result.structure.is_acyclic() or not result.structure.satisfies(constraints):
            raise StructuralConflictError("学到的结构违反无环性或边约束")
        
        for line in result.structure.edge_listing():
            logger.info(f"  {line}")
        return result
    
    def _fit_gbn(self, train_df: pd.DataFrame, structure) -> Tuple[MultivariateNormal, CPDLearner]:
        """阶段5: 学习CPD并组合为联合分布"""
        cpd_learner = CPDLearner(structure)
        cpds = cpd_learner.learn_cpds(train_df)
        gbn = compose_joint(structure, cpds)
        # 与饱和模型保持相同的变量顺序
        gbn = gbn.marginal(self.preprocessor.variables)
        logger.info(f"  拓扑排序: {structure.get_topological_order()}")
        return gbn, cpd_learner
    
    def _inference(self, mvn: MultivariateNormal) -> BayesianInference:
        max_condition = self.config.get('inference', {}).get('max_condition', DEFAULT_MAX_CONDITION)
        return BayesianInference(mvn, self.covariates, self.responses, max_condition=max_condition)
    
    def _evaluate(self, models: Dict[str, MultivariateNormal], test_df: pd.DataFrame) -> Dict:
        """阶段6: 在测试集上评估各模型"""
        return {
            name: evaluate_model(self._inference(mvn), test_df, model_name=name)
            for name, mvn in models.items()
        }
    
    def _example_prediction(self, gbn: MultivariateNormal, structure, test_df: pd.DataFrame) -> Dict:
        """阶段7: 对一个完整的协变量向量做条件预测"""
        evidence = self.config.get('inference', {}).get('example_evidence')
        if not evidence:
            evidence = test_df[self.covariates].iloc[0].to_dict()
        evidence = {k: float(v) for k, v in evidence.items()}
        
        inference = self._inference(gbn)
        posterior = inference.predict(evidence)
        example = {
            'evidence': evidence,
            'mean': {t: float(m) for t, m in zip(posterior.variables, posterior.mean)},
            'covariance': posterior.covariance.tolist(),
            'explanations': [
                inference.explain_prediction(structure, evidence, target)
                for target in self.responses
            ]
        }
        for target in self.responses:
            logger.info(f"  {target}: 均值 {example['mean'][target]:.4f}, "
                        f"标准差 {np.sqrt(posterior.variance_of(target)):.4f}")
        return example
    
    def _save_results(self) -> Dict[str, str]:
        """
        保存结果文件
        
        Returns:
            产物名称到路径的映射
        """
        output_cfg = self.config.get('output', {})
        output_dir = output_cfg.get('dir', 'outputs')
        ensure_dir(output_dir)
        
        structure = self.artifacts['structure']
        search_result = self.artifacts['search_result']
        
        files = {
            'edges': os.path.join(output_dir, 'edges.txt'),
            'structure': os.path.join(output_dir, 'structure.yaml'),
            'adjacency': os.path.join(output_dir, 'precision_adjacency.csv'),
            'comparison': os.path.join(output_dir, 'model_comparison.csv'),
            'example': os.path.join(output_dir, 'example_prediction.yaml'),
        }
        
        save_text(structure.edge_listing(), files['edges'])
        save_metadata({
            'structure': structure.export_structure(),
            'score': float(search_result.score),
            'initial_score': float(search_result.initial_score),
            'n_iterations': search_result.n_iterations,
            'converged': search_result.converged,
            'cpds': {node: cpd.to_dict() for node, cpd in self.artifacts['cpds'].items()}
        }, files['structure'])
        save_data(self.artifacts['precision_adjacency'], files['adjacency'], index=True)
        save_data(self.artifacts['comparison'], files['comparison'], index=True)
        
        for name, result in self.artifacts['results'].items():
            files[f'summary_{name}'] = os.path.join(output_dir, f'summary_{name}.csv')
            save_data(result['summary'], files[f'summary_{name}'], index=True)
        
        save_metadata(self.artifacts['example'], files['example'])
        
        if output_cfg.get('plot', False):
            files['plot'] = os.path.join(output_dir, 'network.png')
            plot_network(structure, files['plot'], highlight=self.responses)
        
        logger.info(f"结果已保存到 {output_dir}/")
        return files
    
    def _generate_statistics(self, output_files: Dict[str, str]) -> Dict:
        """
        生成统计信息
        
        Returns:
            统计信息字典
        """
        search_result = self.artifacts['search_result']
        return {
            'n_samples': len(self.artifacts['data']),
            'n_train': len(self.artifacts['train']),
            'n_test': len(self.artifacts['test']),
            'n_edges': len(self.artifacts['structure'].edges),
            'edges': self.artifacts['structure'].edge_listing(),
            'score': float(search_result.score),
            'n_iterations': search_result.n_iterations,
            'summary': {
                name: result['summary'].to_dict(orient='index')
                for name, result in self.artifacts['results'].items()
            },
            'example_mean': self.artifacts['example']['mean'],
            'output_files': output_files
        }

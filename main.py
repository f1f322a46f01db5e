#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
主执行脚本
运行体脂高斯贝叶斯网络的完整建模与评估流程
"""
import sys
import argparse

from bodyfat_gbn.pipeline import BodyFatGBNPipeline
from bodyfat_gbn.errors import GBNError
from bodyfat_gbn.utils import setup_logger, set_level

logger = setup_logger("main")


def parse_args(argv=None) -> argparse.Namespace:
    """解析命令行参数"""
    parser = argparse.ArgumentParser(
        description='BodyFat GBN - 基于高斯贝叶斯网络的体脂预测'
    )
    parser.add_argument('--config', type=str, default='configs/default.yaml', help='配置文件路径')
    parser.add_argument('--data', type=str, default=None, help='数据文件路径（覆盖配置）')
    parser.add_argument('--seed', type=int, default=None, help='划分数据的随机种子')
    parser.add_argument('--train-ratio', type=float, default=None, help='训练集比例')
    parser.add_argument('--penalty-weight', type=float, default=None, help='BIC惩罚系数')
    parser.add_argument('--max-indegree', type=int, default=None, help='每个节点的最大父节点数')
    parser.add_argument('--output-dir', type=str, default=None, help='结果输出目录')
    parser.add_argument('--plot', action='store_true', default=None, help='绘制网络结构图')
    parser.add_argument('--log-level', type=str, default=None,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], help='日志级别')
    return parser.parse_args(argv)


def main(argv=None) -> int:
    """主函数"""
    args = parse_args(argv)
    
    overrides = {
        'data.path': args.data,
        'split.random_state': args.seed,
        'split.train_ratio': args.train_ratio,
        'structure.penalty_weight': args.penalty_weight,
        'structure.max_indegree': args.max_indegree,
        'output.dir': args.output_dir,
        'output.plot': args.plot,
        'logging.level': args.log_level
    }
    try:
        pipeline = BodyFatGBNPipeline.from_config_file(args.config, overrides)
        set_level(pipeline.config.get('logging', {}).get('level', 'INFO'))
        stats = pipeline.run()
    except GBNError as e:
        logger.error(f"Pipeline 运行失败: {e}", exc_info=True)
        return 1
    
    logger.info(f"样本: {stats['n_samples']} (训练 {stats['n_train']} / 测试 {stats['n_test']})")
    logger.info(f"DAG: {stats['n_edges']} 条边, 评分 {stats['score']:.4f}")
    for model_name, summary in stats['summary'].items():
        for target, metrics in summary.items():
            logger.info(f"  [{model_name}] {target}: "
                        f"Bias={metrics['bias']:.4f}, Stdev={metrics['stdev']:.4f}, SEP={metrics['sep']:.4f}")
    
    logger.info("\n🎉 所有任务完成！")
    return 0


if __name__ == '__main__':
    sys.exit(main())

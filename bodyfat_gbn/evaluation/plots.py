#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
网络结构可视化
使用力导向布局，不固定节点坐标
"""
import os
import networkx as nx
from typing import Optional, Sequence

from bodyfat_gbn.utils.config import ensure_dir
from bodyfat_gbn.utils.logging import setup_logger

logger = setup_logger("plots")


def plot_network(
    structure,
    output_path: str,
    highlight: Optional[Sequence[str]] = None,
    seed: int = 0
) -> None:
    """
    绘制DAG
    
    Args:
        structure: BayesianNetworkStructure对象
        output_path: 图片路径
        highlight: 需要高亮的节点（如响应变量）
        seed: 布局随机种子
    """
    # 直接使用 Agg 画布，不改变全局 matplotlib 后端
    from matplotlib.backends.backend_agg import FigureCanvasAgg
    from matplotlib.figure import Figure
    
    ensure_dir(os.path.dirname(output_path))
    
    graph = structure.graph
    highlight = set(highlight or [])
    node_colors = ['#f4a261' if node in highlight else '#a8dadc' for node in graph.nodes()]
    
    fig = Figure(figsize=(9, 7))
    FigureCanvasAgg(fig)
    ax = fig.subplots()
    pos = nx.spring_layout(graph, seed=seed)
    nx.draw_networkx_nodes(graph, pos, node_color=node_colors, node_size=1400, ax=ax)
    nx.draw_networkx_labels(graph, pos, font_size=9, ax=ax)
    nx.draw_networkx_edges(graph, pos, arrows=True, arrowsize=15,
                           node_size=1400, edge_color='#404040', ax=ax)
    ax.set_axis_off()
    fig.tight_layout()
    fig.savefig(output_path, dpi=200)
    
    logger.info(f"网络结构图已保存: {output_path}")

#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
贝叶斯网络DAG结构定义
包含边约束（白名单/黑名单）与可变的DAG容器
"""
from dataclasses import dataclass, field
from typing import List, Tuple, Dict, Iterable, FrozenSet
import networkx as nx

from bodyfat_gbn.errors import StructuralConflictError, MalformedInputError
from bodyfat_gbn.utils.logging import setup_logger

logger = setup_logger("bayes_structure")

Edge = Tuple[str, str]


def _as_edges(pairs: Iterable) -> FrozenSet[Edge]:
    """把配置中的 [父, 子] 列表统一为有序二元组集合"""
    edges = set()
    for pair in pairs or []:
        if len(pair) != 2:
            raise MalformedInputError(f"边必须是 (父节点, 子节点) 二元组: {pair}")
        edges.add((str(pair[0]), str(pair[1])))
    return frozenset(edges)


@dataclass(frozen=True)
class EdgeConstraints:
    """
    结构学习的边约束
    
    Attributes:
        whitelist: 必须出现的有向边（父 -> 子）
        blacklist: 禁止出现的有向边（父 -> 子）
    """
    whitelist: FrozenSet[Edge] = field(default_factory=frozenset)
    blacklist: FrozenSet[Edge] = field(default_factory=frozenset)
    
    @classmethod
    def from_config(cls, whitelist=None, blacklist=None) -> 'EdgeConstraints':
        """从配置中的边列表构造约束"""
        return cls(whitelist=_as_edges(whitelist), blacklist=_as_edges(blacklist))
    
    def validate(self, variables: List[str]) -> None:
        """
        校验约束的一致性，发现冲突立即报错
        
        检查：
        1. 边的端点都是已知变量
        2. 没有自环
        3. 白名单与黑名单不相交
        4. 白名单自身无环
        
        Args:
            variables: 全部变量名
        """
        known = set(variables)
        for edge in sorted(self.whitelist | self.blacklist):
            unknown = [v for v in edge if v not in known]
            if unknown:
                raise MalformedInputError(f"约束边 {edge} 包含未知变量: {unknown}")
            if edge[0] == edge[1]:
                raise StructuralConflictError(f"约束边不能是自环: {edge}")
        
        conflict = sorted(self.whitelist & self.blacklist)
        if conflict:
            raise StructuralConflictError(f"白名单与黑名单存在相同的边: {conflict}")
        
        graph = nx.DiGraph(list(self.whitelist))
        if not nx.is_directed_acyclic_graph(graph):
            cycle = nx.find_cycle(graph)
            raise StructuralConflictError(f"白名单边本身构成环: {cycle}")
        
        logger.info(f"边约束校验通过: 白名单 {len(self.whitelist)} 条, 黑名单 {len(self.blacklist)} 条")


class BayesianNetworkStructure:
    """
    贝叶斯网络DAG结构
    
    定义变量之间的父子关系，保证任意时刻都是有向无环图
    """
    
    def __init__(self, variables: Iterable[str]):
        """
        初始化网络结构（仅含节点，无边）
        
        Args:
            variables: 节点名
        """
        self.graph = nx.DiGraph()
        self.graph.add_nodes_from(variables)
    
    @classmethod
    def from_edges(cls, variables: Iterable[str], edges: Iterable[Edge]) -> 'BayesianNetworkStructure':
        """
        由节点与边列表构造结构
        
        Args:
            variables: 节点名
            edges: 有向边列表
            
        Returns:
            网络结构
        """
        structure = cls(variables)
        for parent, child in sorted(edges):
            structure.add_edge(parent, child)
        return structure
    
    @property
    def nodes(self) -> List[str]:
        """按插入顺序返回节点"""
        return list(self.graph.nodes())
    
    @property
    def edges(self) -> List[Edge]:
        """按字典序返回有向边"""
        return sorted(self.graph.edges())
    
    def copy(self) -> 'BayesianNetworkStructure':
        """深拷贝结构"""
        structure = BayesianNetworkStructure(self.nodes)
        structure.graph.add_edges_from(self.graph.edges())
        return structure
    
    def has_edge(self, parent: str, child: str) -> bool:
        return self.graph.has_edge(parent, child)
    
    def creates_cycle(self, parent: str, child: str) -> bool:
        """
        判断添加 parent -> child 是否会形成环
        
        当且仅当图中已存在 child 到 parent 的有向路径时成环。
        """
        if parent == child:
            return True
        return nx.has_path(self.graph, child, parent)
    
    def reversal_creates_cycle(self, parent: str, child: str) -> bool:
        """
        判断把 parent -> child 反转为 child -> parent 是否会形成环
        
        去掉原边后若仍存在 parent 到 child 的路径，则反转成环。
        """
        self.graph.remove_edge(parent, child)
        try:
            return nx.has_path(self.graph, parent, child)
        finally:
            self.graph.add_edge(parent, child)
    
    def add_edge(self, parent: str, child: str) -> None:
        """
        添加有向边
        
        Args:
            parent: 父节点
            child: 子节点
        """
        for node in (parent, child):
            if node not in self.graph:
                raise MalformedInputError(f"未知节点: {node}")
        if self.creates_cycle(parent, child):
            raise StructuralConflictError(f"添加边 {parent} -> {child} 会形成环")
        self.graph.add_edge(parent, child)
        logger.debug(f"添加边: {parent} -> {child}")
    
    def remove_edge(self, parent: str, child: str) -> None:
        """删除有向边"""
        self.graph.remove_edge(parent, child)
        logger.debug(f"删除边: {parent} -> {child}")
    
    def reverse_edge(self, parent: str, child: str) -> None:
        """反转有向边 parent -> child 为 child -> parent"""
        if self.reversal_creates_cycle(parent, child):
            raise StructuralConflictError(f"反转边 {parent} -> {child} 会形成环")
        self.graph.remove_edge(parent, child)
        self.graph.add_edge(child, parent)
        logger.debug(f"反转边: {parent} -> {child}")
    
    def get_parents(self, node: str) -> List[str]:
        """
        获取节点的父节点
        
        Args:
            node: 节点名
            
        Returns:
            按字典序排列的父节点列表
        """
        return sorted(self.graph.predecessors(node))
    
    def get_children(self, node: str) -> List[str]:
        """
        获取节点的子节点
        
        Args:
            node: 节点名
            
        Returns:
            按字典序排列的子节点列表
        """
        return sorted(self.graph.successors(node))
    
    def get_markov_blanket(self, node: str) -> List[str]:
        """
        获取Markov Blanket
        
        包含：父节点、子节点、子节点的其他父节点
        
        Args:
            node: 节点名
            
        Returns:
            Markov Blanket节点列表
        """
        markov_blanket = set(self.get_parents(node))
        
        children = self.get_children(node)
        markov_blanket.update(children)
        
        for child in children:
            markov_blanket.update(self.get_parents(child))
        
        markov_blanket.discard(node)
        
        return sorted(markov_blanket)
    
    def is_acyclic(self) -> bool:
        """检查是否为有向无环图"""
        return nx.is_directed_acyclic_graph(self.graph)
    
    def get_topological_order(self) -> List[str]:
        """获取拓扑排序（同层节点按字典序，结果可复现）"""
        if not self.is_acyclic():
            raise StructuralConflictError("图中存在环，无法进行拓扑排序")
        return list(nx.lexicographical_topological_sort(self.graph))
    
    def satisfies(self, constraints: EdgeConstraints) -> bool:
        """检查结构是否包含全部白名单边且不含任何黑名单边"""
        edges = set(self.graph.edges())
        return constraints.whitelist <= edges and not (constraints.blacklist & edges)
    
    def edge_listing(self) -> List[str]:
        """
        文本形式的边列表
        
        Returns:
            形如 'Abdomen -> BodyFat' 的字符串列表
        """
        return [f"{parent} -> {child}" for parent, child in self.edges]
    
    def export_structure(self) -> Dict:
        """
        导出网络结构
        
        Returns:
            结构字典
        """
        acyclic = self.is_acyclic()
        return {
            'nodes': self.nodes,
            'edges': [list(edge) for edge in self.edges],
            'parents': {node: self.get_parents(node) for node in self.nodes},
            'is_acyclic': acyclic,
            'topological_order': self.get_topological_order() if acyclic else None
        }

#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
受约束的贪心爬山结构搜索

每一步枚举所有合法的单边操作（加边、删边、反转），只对父节点集合
发生变化的节点重新计算局部评分，选择评分下降最多的操作，
直到没有操作能继续降低评分为止。
"""
import math
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

from tqdm import tqdm

from bodyfat_gbn.bayes.scores import GaussianBICScore
from bodyfat_gbn.bayes.structure import BayesianNetworkStructure, EdgeConstraints
from bodyfat_gbn.errors import StructuralConflictError
from bodyfat_gbn.utils.logging import setup_logger

logger = setup_logger("structure_search")

ADD, REMOVE, REVERSE = 'add', 'remove', 'reverse'

# 评分差相同时按 (操作, 父节点, 子节点) 排序
OPERATION_ORDER = {ADD: 0, REMOVE: 1, REVERSE: 2}

# 评分差在此（相对/绝对）容差内视为相等
TIE_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Move:
    """单边操作"""
    operation: str
    parent: str
    child: str
    
    def sort_key(self):
        return (OPERATION_ORDER[self.operation], self.parent, self.child)
    
    def __str__(self) -> str:
        return f"{self.operation}({self.parent} -> {self.child})"


@dataclass
class SearchStep:
    """一次被采纳的操作及其后的评分"""
    iteration: int
    move: Move
    delta: float
    score: float


@dataclass
class SearchResult:
    """
    结构搜索结果
    
    Attributes:
        structure: 学到的DAG
        score: 增量维护的最终评分
        initial_score: 初始（白名单）结构的评分
        n_iterations: 采纳的操作数
        history: 每一步的记录
        converged: 是否在 max_iter 之前到达局部最优
    """
    structure: BayesianNetworkStructure
    score: float
    initial_score: float
    n_iterations: int
    history: List[SearchStep] = field(default_factory=list)
    converged: bool = True


class HillClimbSearch:
    """
    受约束的爬山搜索
    
    起点为空图加全部白名单边；白名单边不可删除或反转，黑名单边不可出现。
    """
    
    def __init__(self, scorer: GaussianBICScore):
        """
        初始化搜索器
        
        Args:
            scorer: 可分解的评分器
        """
        self.scorer = scorer
        self.variables = sorted(scorer.variables)
        logger.info(f"初始化爬山搜索，变量数: {len(self.variables)}")
    
    def estimate(
        self,
        constraints: Optional[EdgeConstraints] = None,
        max_indegree: Optional[int] = None,
        max_iter: int = 1000,
        tolerance: float = 1e-8,
        show_progress: bool = False
    ) -> SearchResult:
        """
        执行结构搜索
        
        Args:
            constraints: 白名单/黑名单约束
            max_indegree: 每个节点的最大父节点数（None表示不限）
            max_iter: 最大迭代次数
            tolerance: 评分下降小于该值即视为没有改进
            show_progress: 是否显示进度条
            
        Returns:
            SearchResult对象
        """
        constraints = constraints or EdgeConstraints()
        constraints.validate(self.variables)
        
        structure = BayesianNetworkStructure.from_edges(self.scorer.variables, constraints.whitelist)
        if max_indegree is not None:
            crowded = [n for n in structure.nodes if len(structure.get_parents(n)) > max_indegree]
            if crowded:
                raise StructuralConflictError(
                    f"白名单使以下节点的父节点数超过上限 {max_indegree}: {crowded}"
                )
        
        local = self.scorer.local_scores(structure)
        initial_score = current_score = sum(local.values())
        logger.info(f"初始结构: {len(structure.edges)} 条白名单边, 评分 {initial_score:.4f}")
        
        history = []
        converged = True
        
        progress = tqdm(range(max_iter), desc="爬山搜索", disable=not show_progress)
        for iteration in progress:
            candidates = list(self._legal_moves(structure, constraints, max_indegree))
            if not candidates:
                if iteration == 0:
                    logger.warning("初始结构没有任何合法操作，返回受约束的初始图")
                break
            
            best_move, best_delta = None, 0.0
            for move in candidates:
                delta = self._score_delta(structure, local, move)
                if best_move is None or _precedes(move, delta, best_move, best_delta):
                    best_move, best_delta = move, delta
            
            if best_delta >= -tolerance:
                logger.info(f"第 {iteration} 步后无改进操作，到达局部最优")
                break
            
            self._apply(structure, best_move)
            for node in (best_move.parent, best_move.child):
                local[node] = self.scorer.local_score(node, structure.get_parents(node))
            current_score += best_delta
            
            history.append(SearchStep(iteration, best_move, best_delta, current_score))
            logger.debug(f"第 {iteration + 1} 步: {best_move}, Δ={best_delta:.4f}, 评分={current_score:.4f}")
        else:
            converged = False
            logger.warning(f"达到最大迭代次数 {max_iter}，搜索未收敛")
        
        logger.info(f"结构搜索完成: {len(history)} 步, {len(structure.edges)} 条边, "
                    f"评分 {initial_score:.4f} -> {current_score:.4f}")
        
        return SearchResult(
            structure=structure,
            score=current_score,
            initial_score=initial_score,
            n_iterations=len(history),
            history=history,
            converged=converged
        )
    
    def _legal_moves(
        self,
        structure: BayesianNetworkStructure,
        constraints: EdgeConstraints,
        max_indegree: Optional[int]
    ) -> Iterator[Move]:
        """按字典序枚举所有合法的单边操作"""
        def has_room(node: str) -> bool:
            return max_indegree is None or len(structure.get_parents(node)) < max_indegree
        
        for u in self.variables:
            for v in self.variables:
                if u == v:
                    continue
                if structure.has_edge(u, v):
                    if (u, v) in constraints.whitelist:
                        continue
                    yield Move(REMOVE, u, v)
                    if ((v, u) not in constraints.blacklist and has_room(u)
                            and not structure.reversal_creates_cycle(u, v)):
                        yield Move(REVERSE, u, v)
                elif not structure.has_edge(v, u):
                    if ((u, v) not in constraints.blacklist and has_room(v)
                            and not structure.creates_cycle(u, v)):
                        yield Move(ADD, u, v)
    
    def _score_delta(
        self,
        structure: BayesianNetworkStructure,
        local: Dict[str, float],
        move: Move
    ) -> float:
        """只重新计算父节点集合改变的节点的局部评分"""
        u, v = move.parent, move.child
        parents_v = set(structure.get_parents(v))
        
        if move.operation == ADD:
            return self.scorer.local_score(v, parents_v | {u}) - local[v]
        
        delta_v = self.scorer.local_score(v, parents_v - {u}) - local[v]
        if move.operation == REMOVE:
            return delta_v
        
        parents_u = set(structure.get_parents(u))
        return delta_v + self.scorer.local_score(u, parents_u | {v}) - local[u]
    
    @staticmethod
    def _apply(structure: BayesianNetworkStructure, move: Move) -> None:
        if move.operation == ADD:
            structure.add_edge(move.parent, move.child)
        elif move.operation == REMOVE:
            structure.remove_edge(move.parent, move.child)
        else:
            structure.reverse_edge(move.parent, move.child)


def _precedes(move: Move, delta: float, best_move: Move, best_delta: float) -> bool:
    """move 是否优于当前最佳操作：评分差更小，或评分差相等时字典序更靠前"""
    if math.isclose(delta, best_delta, rel_tol=TIE_TOLERANCE, abs_tol=TIE_TOLERANCE):
        return move.sort_key() < best_move.sort_key()
    return delta < best_delta

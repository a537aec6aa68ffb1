"""Same-period dependency graph over rules.

Only references at offset ``+0`` constrain the order of rules within a period:
lagged references read periods that are already complete. The graph is a
validation and reordering aid; the model keeps the declared order unless asked
otherwise.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Sequence

import networkx as nx

from finmodel.core.errors import CircularDependencyError
from finmodel.core.formula import RefKind, Rule

logger = logging.getLogger(__name__)


def same_period_inputs(rule: Rule) -> List[str]:
    return [
        ref.name
        for ref in rule.references()
        if ref.kind is RefKind.VARIABLE and ref.offset == 0
    ]


def build_dependency_graph(rules: Sequence[Rule]) -> nx.DiGraph:
    """Edges run from the account read to the account written."""
    graph = nx.DiGraph()
    for index, rule in enumerate(rules):
        if rule.target not in graph:
            graph.add_node(rule.target, first_rule=index)
    for rule in rules:
        for name in same_period_inputs(rule):
            if name in graph:
                graph.add_edge(name, rule.target)
    return graph


def find_cycle(graph: nx.DiGraph) -> List[str]:
    try:
        edges = nx.find_cycle(graph)
    except nx.NetworkXNoCycle:
        return []
    return [edge[0] for edge in edges] + [edges[-1][1]]


def dependency_order(rules: Sequence[Rule]) -> List[Rule]:
    """Reorder rules so every same-period input is computed before it is read.

    Ties are broken by declaration order, and rules sharing a target keep their
    relative order.
    """
    graph = build_dependency_graph(rules)
    cycle = find_cycle(graph)
    if cycle:
        raise CircularDependencyError(cycle)

    order = nx.lexicographical_topological_sort(
        graph, key=lambda name: graph.nodes[name]["first_rule"]
    )
    by_target: Dict[str, List[Rule]] = {}
    for rule in rules:
        by_target.setdefault(rule.target, []).append(rule)

    ordered = [rule for target in order for rule in by_target[target]]
    if [rule.target for rule in ordered] != [rule.target for rule in rules]:
        logger.info("Rules reordered by dependency: %s", [rule.target for rule in ordered])
    return ordered


def check_declared_order(rules: Sequence[Rule]) -> List[str]:
    """Describe same-period reads of accounts whose rule has not run yet."""
    warnings: List[str] = []
    computed: set = set()
    targets = {rule.target for rule in rules}

    for index, rule in enumerate(rules):
        for name in same_period_inputs(rule):
            if name in targets and name not in computed:
                warnings.append(
                    f"rule {index + 1} for '{rule.target}' reads ':{name}[+0]' "
                    f"before any rule for '{name}' has run in that period"
                )
        computed.add(rule.target)
    return warnings

"""
Structural validation of a workflow graph before it is allowed to run.

``validate_workflow`` never raises for a badly built workflow: every problem
is reported as a message in ``ValidationResult.errors``, in the order the
checks run (role presence, per-node connectivity, reachability of outputs,
branch conditions). Only an empty workflow stops the checks early.
"""

import logging
from typing import Dict, Iterable, List, Set, Union, Any

from .conditions import ConditionValidationError, validate_condition
from .models import Edge, Node, NodeRole, ValidationResult
from .schema import coerce_edge, coerce_node

logger = logging.getLogger(__name__)

BRANCH_OUTCOMES = ("true", "false")


def validate_workflow(
    nodes: Iterable[Union[Node, Dict[str, Any]]],
    edges: Iterable[Union[Edge, Dict[str, Any]]],
    *,
    require_branch_outcomes: bool = False,
    single_input: bool = False,
    sequential: bool = False,
    forbid_cycles: bool = False,
    require_terminal_outputs: bool = False,
) -> ValidationResult:
    """
    Check a nodes/edges snapshot for structural correctness.

    Raw mappings are accepted for nodes and edges (extra editor fields are
    ignored).

    The keyword flags switch on stricter checks, reported after the default
    ones in this order:

    * ``require_branch_outcomes``: every branch node has an outgoing "true"
      edge and an outgoing "false" edge.
    * ``single_input``: at most one input node.
    * ``sequential``: only branch nodes may have more than one outgoing edge.
    * ``forbid_cycles``: no cycle is reachable from an input node.
    * ``require_terminal_outputs``: every path from an input ends at an
      output node.
    """
    nodes = [coerce_node(n) for n in nodes]
    edges = [coerce_edge(e) for e in edges]

    if not nodes:
        return ValidationResult(is_valid=False, errors=["Workflow must have at least one node"])

    errors: List[str] = []
    errors.extend(_check_roles(nodes))
    errors.extend(_check_connections(nodes, edges))
    errors.extend(_check_reachability(nodes, edges))
    errors.extend(_check_branch_conditions(nodes))
    if require_branch_outcomes:
        errors.extend(_check_branch_outcomes(nodes, edges))
    if single_input:
        errors.extend(_check_single_input(nodes))
    if sequential:
        errors.extend(_check_sequential(nodes, edges))
    if forbid_cycles:
        errors.extend(_check_cycles(nodes, edges))
    if require_terminal_outputs:
        errors.extend(_check_terminal_outputs(nodes, edges))

    logger.debug("Validated workflow with %d nodes, %d edges: %d error(s)", len(nodes), len(edges), len(errors))
    return ValidationResult(is_valid=not errors, errors=errors)


def _check_roles(nodes: List[Node]) -> List[str]:
    errors = []
    if not any(n.role == NodeRole.INPUT for n in nodes):
        errors.append("Workflow must have at least one input node")
    if not any(n.role == NodeRole.OUTPUT for n in nodes):
        errors.append("Workflow must have at least one output node")
    return errors


def _check_connections(nodes: List[Node], edges: List[Edge]) -> List[str]:
    errors = []
    targets = {e.target for e in edges}
    sources = {e.source for e in edges}

    for node in nodes:
        has_incoming = node.id in targets
        has_outgoing = node.id in sources

        if node.role == NodeRole.INPUT and has_incoming:
            errors.append(f"Input node {node.display_name} cannot have incoming connections")
        if node.role == NodeRole.OUTPUT and has_outgoing:
            errors.append(f"Output node {node.display_name} cannot have outgoing connections")
        if node.role != NodeRole.INPUT and not has_incoming:
            errors.append(f"Node {node.display_name} has no incoming connections")
        if node.role != NodeRole.OUTPUT and not has_outgoing:
            errors.append(f"Node {node.display_name} has no outgoing connections")
    return errors


def _check_reachability(nodes: List[Node], edges: List[Edge]) -> List[str]:
    adjacency = _adjacency(edges)
    inputs = [n for n in nodes if n.role == NodeRole.INPUT]
    errors = []
    for output in (n for n in nodes if n.role == NodeRole.OUTPUT):
        if not any(is_reachable(adjacency, i.id, output.id) for i in inputs):
            errors.append(f"Output node {output.display_name} is not reachable from any input node")
    return errors


def is_reachable(adjacency: Dict[str, List[str]], source: str, target: str) -> bool:
    """Depth-first search along edges; each call starts with a fresh visited set."""
    visited: Set[str] = set()
    stack = [source]
    while stack:
        current = stack.pop()
        if current == target:
            return True
        if current in visited:
            continue
        visited.add(current)
        # reversed so neighbours are explored in edge order
        stack.extend(reversed(adjacency.get(current, [])))
    return False


def _check_branch_conditions(nodes: List[Node]) -> List[str]:
    errors = []
    for node in nodes:
        if node.role != NodeRole.BRANCH:
            continue
        if node.condition is None:
            errors.append(f"Condition node {node.display_name} is missing a condition")
            continue
        try:
            validate_condition(node.condition)
        except ConditionValidationError as e:
            errors.append(f"Condition node {node.display_name} has an invalid condition: {e}")
    return errors


def _check_branch_outcomes(nodes: List[Node], edges: List[Edge]) -> List[str]:
    errors = []
    for node in nodes:
        if node.role != NodeRole.BRANCH:
            continue
        handles = {e.source_handle for e in edges if e.source == node.id}
        for outcome in BRANCH_OUTCOMES:
            if outcome not in handles:
                errors.append(f"Condition node {node.display_name} has no '{outcome}' path")
    return errors


def _adjacency(edges: List[Edge]) -> Dict[str, List[str]]:
    adjacency: Dict[str, List[str]] = {}
    for edge in edges:
        adjacency.setdefault(edge.source, []).append(edge.target)
    return adjacency


def _check_single_input(nodes: List[Node]) -> List[str]:
    # zero inputs is already reported by the role check
    if sum(1 for n in nodes if n.role == NodeRole.INPUT) > 1:
        return ["Workflow must have exactly one input node"]
    return []


def _check_sequential(nodes: List[Node], edges: List[Edge]) -> List[str]:
    errors = []
    for node in nodes:
        if node.role == NodeRole.BRANCH:
            continue
        if sum(1 for e in edges if e.source == node.id) > 1:
            errors.append(
                f"Node {node.display_name} has multiple outgoing connections; only condition nodes may branch"
            )
    return errors


def has_cycle(adjacency: Dict[str, List[str]], start: str) -> bool:
    """True if a cycle is reachable from ``start`` (iterative three-colour DFS)."""
    on_path: Set[str] = set()
    done: Set[str] = set()
    stack = [(start, iter(adjacency.get(start, [])))]
    on_path.add(start)
    while stack:
        current, neighbours = stack[-1]
        for neighbour in neighbours:
            if neighbour in on_path:
                return True
            if neighbour not in done:
                on_path.add(neighbour)
                stack.append((neighbour, iter(adjacency.get(neighbour, []))))
                break
        else:
            stack.pop()
            on_path.discard(current)
            done.add(current)
    return False


def _check_cycles(nodes: List[Node], edges: List[Edge]) -> List[str]:
    adjacency = _adjacency(edges)
    if any(has_cycle(adjacency, n.id) for n in nodes if n.role == NodeRole.INPUT):
        return ["Workflow contains cycles, which are not allowed"]
    return []


def _check_terminal_outputs(nodes: List[Node], edges: List[Edge]) -> List[str]:
    adjacency = _adjacency(edges)
    outputs = {n.id for n in nodes if n.role == NodeRole.OUTPUT}
    queue = [n.id for n in nodes if n.role == NodeRole.INPUT]
    visited: Set[str] = set()

    while queue:
        current = queue.pop(0)
        if current in visited:
            continue
        visited.add(current)
        if current in outputs:
            continue
        successors = adjacency.get(current, [])
        if not successors:
            return ["All paths in the workflow must lead to an output node"]
        queue.extend(successors)
    return []

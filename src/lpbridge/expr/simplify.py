from __future__ import annotations

from typing import List, Set, Tuple

from ..errors import NonlinearExpression, UnsupportedExpression
from .arena import CompExpr, ExpressionArena, ExprNode, LitVal, VarRef


def simplify(arena: ExpressionArena) -> ExpressionArena:
    """
    Rewrite ``arena`` in place into canonical form and return it.

    Post-order over an explicit stack. A node whose rewrite changed it is
    pushed back and examined again until it is stable; stable nodes are
    never revisited, which keeps shared and distributed subtrees cheap.
    After the call every ``mul`` under the root has a literal left child,
    literal arithmetic is folded and multiplication is distributed over
    ``add``/``sub``.
    """

    root = arena.root_index()
    done: Set[int] = set()
    stack: List[Tuple[int, bool]] = [(root, False)]

    while stack:
        idx, expanded = stack.pop()
        if idx in done:
            continue
        node = arena.node_at(idx)
        if isinstance(node, (LitVal, VarRef)):
            done.add(idx)
            continue
        if not isinstance(node, CompExpr):
            raise UnsupportedExpression(f"Unsupported expression node: {node!r}")
        if not expanded:
            stack.append((idx, True))
            stack.append((node.rhs, False))
            stack.append((node.lhs, False))
            continue
        if _rewrite(arena, idx, node):
            stack.append((idx, False))
        else:
            done.add(idx)

    # new nodes were appended; the root itself never moves
    arena.set_root(root)
    return arena


def _is_literal(node: ExprNode, value: float) -> bool:
    return isinstance(node, LitVal) and node.value == value


def _fold(op: str, lhs: float, rhs: float) -> float:
    if op == "add":
        return lhs + rhs
    if op == "sub":
        return lhs - rhs
    return lhs * rhs


def _rewrite(arena: ExpressionArena, idx: int, node: CompExpr) -> bool:
    """Apply one rewrite to the node at ``idx``. Returns whether it changed."""
    lhs = arena.node_at(node.lhs)
    rhs = arena.node_at(node.rhs)

    if node.op not in ("add", "sub", "mul"):
        raise UnsupportedExpression(f"Unsupported operator {node.op!r}")

    if isinstance(lhs, LitVal) and isinstance(rhs, LitVal):
        arena.replace(idx, LitVal(value=_fold(node.op, lhs.value, rhs.value)))
        return True

    if node.op == "add":
        if _is_literal(lhs, 0.0):
            arena.replace(idx, rhs)
            return True
        if _is_literal(rhs, 0.0):
            arena.replace(idx, lhs)
            return True
        return False

    if node.op == "sub":
        if _is_literal(rhs, 0.0):
            arena.replace(idx, lhs)
            return True
        return False

    if isinstance(rhs, LitVal):
        arena.replace(idx, CompExpr(op="mul", lhs=node.rhs, rhs=node.lhs))
        return True
    if not isinstance(lhs, LitVal):
        raise NonlinearExpression(
            f"Product of two non-constant terms is not linear: {_describe(arena, idx)}"
        )

    factor = lhs.value
    if factor == 1.0:
        arena.replace(idx, rhs)
        return True
    if factor == 0.0:
        arena.replace(idx, LitVal(value=0.0))
        return True
    if isinstance(rhs, CompExpr):
        if rhs.op == "mul":
            inner = arena.node_at(rhs.lhs)
            merged = arena.add_literal(factor * inner.value)
            arena.replace(idx, CompExpr(op="mul", lhs=merged, rhs=rhs.rhs))
            return True
        left = arena.add_op("mul", node.lhs, rhs.lhs)
        right = arena.add_op("mul", node.lhs, rhs.rhs)
        arena.replace(idx, CompExpr(op=rhs.op, lhs=left, rhs=right))
        return True
    return False


def _describe(arena: ExpressionArena, idx: int) -> str:
    view = ExpressionArena(arena.nodes, idx)
    return view.to_string()

"""Constraint parser: turn expressions like ``abs(F - B) == 1`` into Constraint objects.

Supported syntax is a small, safe subset of Python expressions:
- variable names (identifiers) and integer literals
- arithmetic ``+ - * // %`` and unary minus
- ``abs(x)``, ``min(x, y, ...)``, ``max(x, y, ...)``
- comparisons (chains allowed) and ``and`` / ``or`` / ``not``

The whole expression, and every operand of ``and`` / ``or`` / ``not``, must be
a condition (a comparison or a boolean combination of comparisons).
"""

from __future__ import annotations

import ast
import operator
from typing import Any, Callable, Iterable, List

from .constraints import Assignment, Constraint

_BIN_OPS = {
    ast.Add: operator.add,
    ast.Sub: operator.sub,
    ast.Mult: operator.mul,
    ast.FloorDiv: operator.floordiv,
    ast.Mod: operator.mod,
}

_CMP_OPS = {
    ast.Eq: operator.eq,
    ast.NotEq: operator.ne,
    ast.Lt: operator.lt,
    ast.LtE: operator.le,
    ast.Gt: operator.gt,
    ast.GtE: operator.ge,
}

# name -> (function, minimum args, maximum args or None)
_FUNCTIONS = {
    "abs": (abs, 1, 1),
    "min": (min, 2, None),
    "max": (max, 2, None),
}

Evaluator = Callable[[Assignment], Any]


def parse_constraint(text: str) -> Constraint:
    source = text.strip()
    if not source:
        raise ValueError("Empty constraint expression")
    try:
        tree = ast.parse(source, mode="eval")
    except SyntaxError as exc:
        raise ValueError(f"Cannot parse constraint '{source}': {exc.msg}") from exc

    _require_condition(tree.body, source)
    names: List[str] = []
    compiled = _compile(tree.body, names, source)

    def _predicate(assignment: Assignment) -> bool:
        return bool(compiled(assignment))

    return Constraint(description=source, scope=sorted(set(names)), predicate=_predicate)


def parse_constraints(lines: Iterable[str]) -> List[Constraint]:
    return [parse_constraint(line) for line in lines]


def _is_condition(node: ast.AST) -> bool:
    return (
        isinstance(node, (ast.Compare, ast.BoolOp))
        or (isinstance(node, ast.UnaryOp) and isinstance(node.op, ast.Not))
    )


def _require_condition(node: ast.AST, source: str) -> None:
    if not _is_condition(node):
        raise ValueError(
            f"Constraint '{source}' must be a comparison, "
            f"found '{ast.get_source_segment(source, node) or type(node).__name__}'"
        )


def _compile(node: ast.AST, names: List[str], source: str) -> Evaluator:
    if isinstance(node, ast.Name):
        letter = node.id
        names.append(letter)
        return lambda a: a[letter]

    if isinstance(node, ast.Constant):
        if isinstance(node.value, bool) or not isinstance(node.value, int):
            raise ValueError(f"Only integer literals are allowed in '{source}'")
        value = node.value
        return lambda a: value

    if isinstance(node, ast.UnaryOp):
        if isinstance(node.op, ast.Not):
            _require_condition(node.operand, source)
        operand = _compile(node.operand, names, source)
        if isinstance(node.op, ast.USub):
            return lambda a: -operand(a)
        if isinstance(node.op, ast.Not):
            return lambda a: not operand(a)

    if isinstance(node, ast.BinOp) and type(node.op) in _BIN_OPS:
        fn = _BIN_OPS[type(node.op)]
        left = _compile(node.left, names, source)
        right = _compile(node.right, names, source)
        return lambda a: fn(left(a), right(a))

    if isinstance(node, ast.BoolOp):
        for value in node.values:
            _require_condition(value, source)
        parts = [_compile(v, names, source) for v in node.values]
        if isinstance(node.op, ast.And):
            return lambda a: all(p(a) for p in parts)
        return lambda a: any(p(a) for p in parts)

    if isinstance(node, ast.Compare):
        if not all(type(op) in _CMP_OPS for op in node.ops):
            raise ValueError(f"Unsupported comparison in '{source}'")
        ops = [_CMP_OPS[type(op)] for op in node.ops]
        operands = [_compile(node.left, names, source)] + [
            _compile(c, names, source) for c in node.comparators
        ]

        def _compare(a: Assignment) -> bool:
            values = [operand(a) for operand in operands]
            return all(op(values[i], values[i + 1]) for i, op in enumerate(ops))

        return _compare

    if (
        isinstance(node, ast.Call)
        and isinstance(node.func, ast.Name)
        and node.func.id in _FUNCTIONS
        and not node.keywords
    ):
        fn, min_args, max_args = _FUNCTIONS[node.func.id]
        count = len(node.args)
        if count < min_args or (max_args is not None and count > max_args):
            expected = str(min_args) if min_args == max_args else f"at least {min_args}"
            raise ValueError(
                f"{node.func.id}() takes {expected} argument(s), got {count} in '{source}'"
            )
        args = [_compile(arg, names, source) for arg in node.args]
        return lambda a: fn(*(arg(a) for arg in args))

    raise ValueError(f"Unsupported syntax '{ast.dump(node)}' in constraint '{source}'")

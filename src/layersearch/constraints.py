"""Partial constraints and the per-depth evaluator that checks them against tree paths."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from .ordering import Ordering

Assignment = Mapping  # letter -> value
Predicate = Callable[[Assignment], bool]


@dataclass
class Constraint:
    """
    A constraint is defined by a scope (the variables it touches) and a predicate
    over an assignment mapping. The predicate is only ever called once every
    variable in the scope is bound, so it never has to cope with gaps.
    """

    description: str
    scope: List[str]
    predicate: Predicate

    def __post_init__(self) -> None:
        self.scope = list(dict.fromkeys(self.scope))
        if not self.scope:
            raise ValueError(f"Constraint '{self.description}' references no variables")

    @classmethod
    def not_equal(cls, a: str, b: str) -> "Constraint":
        return cls(
            description=f"{a} != {b}",
            scope=[a, b],
            predicate=lambda assignment: assignment[a] != assignment[b],
        )

    @classmethod
    def all_diff(cls, variables: Iterable[str]) -> "Constraint":
        vars_list = list(variables)

        def _predicate(assignment: Assignment) -> bool:
            values = [assignment[var] for var in vars_list]
            return len(values) == len(set(values))

        return cls(description=f"AllDiff: {', '.join(vars_list)}", scope=vars_list, predicate=_predicate)

    def involves(self, variable: str) -> bool:
        return variable in self.scope

    def is_satisfied(self, assignment: Assignment) -> bool:
        return bool(self.predicate(assignment))

    def check_depth(self, ordering: Ordering) -> int:
        """Depth at which the last variable of the scope gets bound under `ordering`."""
        missing = [var for var in self.scope if var not in ordering]
        if missing:
            raise ValueError(
                f"Constraint '{self.description}' uses {', '.join(missing)} "
                f"which ordering '{ordering.name}' never binds"
            )
        return max(ordering.depth_of(var) for var in self.scope)


class BoundAssignment(Mapping):
    """
    Read-only view of a path prefix as `letter -> value`. Asking for a letter
    that is not bound yet is a bug in the check table, not a failed check.
    """

    def __init__(self, ordering: Ordering, values: Sequence[int]):
        assert 0 < len(values) <= len(ordering), (
            f"Path of length {len(values)} does not fit ordering '{ordering.name}'"
        )
        self._ordering = ordering
        self._values = tuple(values)

    def __getitem__(self, letter: str) -> int:
        position = self._ordering.position(letter)
        assert position < len(self._values), (
            f"Variable {letter} is read at path length {len(self._values)} "
            f"but is only bound at depth {position + 1}"
        )
        return self._values[position]

    def __iter__(self) -> Iterator[str]:
        return iter(self._ordering.letters[: len(self._values)])

    def __len__(self) -> int:
        return len(self._values)

    def __contains__(self, letter: object) -> bool:
        return letter in self._ordering.letters[: len(self._values)]


@dataclass
class LayeredEvaluator:
    """
    Checks a path against the constraints that become checkable at its length.

    `checks` maps a path length to the constraints whose last variable is bound
    at that length. Every constraint is therefore evaluated exactly once per
    path, at the earliest depth where it can be decided.
    """

    ordering: Ordering
    checks: Dict[int, List[Constraint]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        for depth, constraints in self.checks.items():
            if not 1 <= depth <= len(self.ordering):
                raise ValueError(f"Check table entry at depth {depth} is outside ordering '{self.ordering.name}'")
            for constraint in constraints:
                # Hand-written tables may schedule a check too early.
                if constraint.check_depth(self.ordering) > depth:
                    raise ValueError(
                        f"Constraint '{constraint.description}' is scheduled at depth {depth} "
                        f"before all of its variables are bound"
                    )

    @classmethod
    def from_constraints(cls, constraints: Iterable[Constraint], ordering: Ordering) -> "LayeredEvaluator":
        """Derive the per-length check table of a constraint set for one ordering."""
        checks: Dict[int, List[Constraint]] = {}
        for constraint in constraints:
            checks.setdefault(constraint.check_depth(ordering), []).append(constraint)
        return cls(ordering=ordering, checks=dict(sorted(checks.items())))

    @property
    def constraints(self) -> List[Constraint]:
        return [c for depth in sorted(self.checks) for c in self.checks[depth]]

    def checks_at(self, depth: int) -> List[Constraint]:
        return self.checks.get(depth, [])

    def failing_constraint(self, values: Sequence[int]) -> Optional[Constraint]:
        """Return the first constraint checked at this path length that fails, or None."""
        assignment = BoundAssignment(self.ordering, values)
        for constraint in self.checks_at(len(values)):
            if not constraint.is_satisfied(assignment):
                return constraint
        return None

    def evaluate(self, values: Sequence[int]) -> bool:
        return self.failing_constraint(values) is None

    def __call__(self, values: Sequence[int]) -> bool:
        return self.evaluate(values)

    def table(self) -> Dict[int, List[str]]:
        return {depth: [c.description for c in cs] for depth, cs in sorted(self.checks.items())}

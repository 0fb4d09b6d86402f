"""Puzzle definitions: variables, constraint expressions and named orderings."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

from .constraints import Constraint, LayeredEvaluator
from .model import SearchConfig
from .ordering import Ordering, most_constrained_ordering, natural_ordering
from .parser import parse_constraints

NATURAL = "natural"
MOST_CONSTRAINED = "most-constrained"


@dataclass
class PuzzleDefinition:
    name: str
    letters: List[str]
    constraints: List[Constraint]
    domain_size: int = 4
    orderings: Dict[str, Ordering] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(set(self.letters)) != len(self.letters):
            raise ValueError(f"Puzzle '{self.name}' repeats a variable name")
        unknown = sorted({v for c in self.constraints for v in c.scope} - set(self.letters))
        if unknown:
            raise ValueError(f"Puzzle '{self.name}' constrains undeclared variables: {', '.join(unknown)}")

        # Every puzzle can always be searched in declaration order and by the
        # most-constrained-first heuristic.
        self.orderings.setdefault(NATURAL, natural_ordering(self.letters))
        self.orderings.setdefault(
            MOST_CONSTRAINED, most_constrained_ordering(self.letters, self.constraints)
        )
        for ordering in self.orderings.values():
            if sorted(ordering.letters) != sorted(self.letters):
                raise ValueError(
                    f"Ordering '{ordering.name}' of puzzle '{self.name}' must bind each variable exactly once"
                )

    def ordering(self, name: str) -> Ordering:
        try:
            return self.orderings[name]
        except KeyError:
            raise ValueError(
                f"Unknown ordering '{name}' for puzzle '{self.name}'; "
                f"choose from {', '.join(sorted(self.orderings))}"
            ) from None

    def config_for(self, ordering_name: str = NATURAL) -> SearchConfig:
        return SearchConfig(ordering=self.ordering(ordering_name), domain_size=self.domain_size)

    def evaluator_for(self, ordering_name: str = NATURAL) -> LayeredEvaluator:
        return LayeredEvaluator.from_constraints(self.constraints, self.ordering(ordering_name))


def build_puzzle(
    name: str,
    letters: Sequence[str],
    constraints: Sequence[str],
    domain_size: int = 4,
    orderings: Optional[Dict[str, Sequence[str]]] = None,
) -> PuzzleDefinition:
    """Build a puzzle from constraint expression strings and letter orderings."""
    return PuzzleDefinition(
        name=name,
        letters=list(letters),
        constraints=parse_constraints(constraints),
        domain_size=domain_size,
        orderings={
            key: Ordering(name=key, letters=tuple(value))
            for key, value in (orderings or {}).items()
        },
    )


EIGHT_VARIABLE_LETTERS = list("ABCDEFGH")

# Eight variables over 1..4.
EIGHT_VARIABLE_CONSTRAINTS = [
    "A != B",
    "C != D",
    "C != E",
    "E < D - 1",
    "abs(F - B) == 1",
    "C != F",
    "D != F",
    "abs(E - F) % 2 == 1",
    "A > G",
    "abs(G - C) == 1",
    "D > G",
    "G != F",
    "A <= H",
    "G < H",
    "abs(H - C) % 2 == 0",
    "H != D",
    "E != H - 2",
    "H != F",
]

# Hand-picked by how many constraints each variable appears in.
HEURISTIC_ORDER = list("HFGDECAB")


def default_puzzle() -> PuzzleDefinition:
    return build_puzzle(
        name="eight-variable",
        letters=EIGHT_VARIABLE_LETTERS,
        constraints=EIGHT_VARIABLE_CONSTRAINTS,
        orderings={"heuristic": HEURISTIC_ORDER},
    )

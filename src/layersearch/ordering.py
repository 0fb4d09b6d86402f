"""Variable orderings: which variable is bound at which tree depth."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, Iterable, Iterator, Sequence, Tuple

if TYPE_CHECKING:
    from .constraints import Constraint


@dataclass(frozen=True)
class Ordering:
    name: str
    letters: Tuple[str, ...]

    def __post_init__(self) -> None:
        letters = tuple(self.letters)
        object.__setattr__(self, "letters", letters)
        if not letters:
            raise ValueError(f"Ordering '{self.name}' is empty")
        if len(set(letters)) != len(letters):
            raise ValueError(f"Ordering '{self.name}' repeats a variable: {letters}")

    def __len__(self) -> int:
        return len(self.letters)

    def __iter__(self) -> Iterator[str]:
        return iter(self.letters)

    def __contains__(self, letter: object) -> bool:
        return letter in self.letters

    def letter_at(self, depth: int) -> str:
        """Letter bound at a 1-based tree depth."""
        if not 1 <= depth <= len(self.letters):
            raise IndexError(f"Depth {depth} outside ordering '{self.name}'")
        return self.letters[depth - 1]

    def position(self, letter: str) -> int:
        """0-based index of `letter` within a path."""
        try:
            return self.letters.index(letter)
        except ValueError:
            raise KeyError(f"Variable {letter} is not in ordering '{self.name}'") from None

    def depth_of(self, letter: str) -> int:
        return self.position(letter) + 1


def natural_ordering(letters: Iterable[str], name: str = "natural") -> Ordering:
    return Ordering(name=name, letters=tuple(letters))


def constraint_counts(letters: Sequence[str], constraints: Iterable["Constraint"]) -> Dict[str, int]:
    constraints = list(constraints)
    return {
        letter: sum(1 for constraint in constraints if constraint.involves(letter))
        for letter in letters
    }


def most_constrained_ordering(
    letters: Sequence[str],
    constraints: Iterable["Constraint"],
    name: str = "most-constrained",
) -> Ordering:
    """
    Bind the variable that participates in the most constraints first, so that
    failing prefixes are detected as shallow in the tree as possible. Ties keep
    the natural order.
    """
    counts = constraint_counts(letters, constraints)
    index = {letter: i for i, letter in enumerate(letters)}
    ordered = sorted(letters, key=lambda letter: (-counts[letter], index[letter]))
    return Ordering(name=name, letters=tuple(ordered))

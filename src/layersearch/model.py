"""Search tree data structures: variables, nodes with tombstones, and the root."""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from .ordering import Ordering


@dataclass(frozen=True)
class Variable:
    letter: str
    value: int

    def __str__(self) -> str:
        return f"{self.letter}:{self.value}"


@dataclass(eq=False)
class Node:
    """
    A partial assignment step. A node owns its children exclusively; `dead`
    is a tombstone marking a proven-invalid prefix that stays in the tree for
    reporting but is never expanded.
    """

    variable: Variable
    children: List["Node"] = field(default_factory=list, repr=False)
    dead: bool = False

    @property
    def letter(self) -> str:
        return self.variable.letter

    @property
    def value(self) -> int:
        return self.variable.value

    def create_child(self, letter: str, value: int) -> "Node":
        child = Node(Variable(letter, value))
        self.children.append(child)
        return child

    def add_variable_layer(self, letter: str, domain_size: int) -> List["Node"]:
        """Give this node one child per domain value, in order 1..domain_size."""
        return [self.create_child(letter, value) for value in range(1, domain_size + 1)]

    def mark_dead(self) -> None:
        self.dead = True

    def is_frontier(self) -> bool:
        return not self.children and not self.dead

    def walk(self) -> Iterator["Node"]:
        yield self
        for child in self.children:
            yield from child.walk()

    def __str__(self) -> str:
        return str(self.variable)


@dataclass
class SearchConfig:
    """Per-run search settings. Validated up front so a bad run never starts."""

    ordering: Ordering
    domain_size: int = 4
    max_depth: Optional[int] = None

    def __post_init__(self) -> None:
        if self.max_depth is None:
            self.max_depth = len(self.ordering)
        if self.domain_size < 1:
            raise ValueError(f"Domain size must be positive, got {self.domain_size}")
        if self.max_depth < 1:
            raise ValueError(f"Maximum depth must be positive, got {self.max_depth}")
        if len(self.ordering) != self.max_depth:
            raise ValueError(
                f"Ordering '{self.ordering.name}' covers {len(self.ordering)} variables "
                f"but maximum depth is {self.max_depth}"
            )

    def letter_at(self, depth: int) -> str:
        return self.ordering.letter_at(depth)


@dataclass
class Root:
    """Synthetic container for the top-level choices of the first variable."""

    config: SearchConfig
    children: List[Node] = field(default_factory=list, repr=False)
    depth: int = 1

    @classmethod
    def create(cls, config: SearchConfig) -> "Root":
        root = cls(config=config)
        root.populate()
        return root

    def populate(self) -> None:
        if self.children:
            raise ValueError("Root is already populated")
        letter = self.config.letter_at(1)
        self.children = [
            Node(Variable(letter, value)) for value in range(1, self.config.domain_size + 1)
        ]
        self.depth = 1

    @property
    def max_depth(self) -> int:
        return self.config.max_depth

    @property
    def at_max_depth(self) -> bool:
        return self.depth >= self.config.max_depth

    def walk(self) -> Iterator[Node]:
        for child in self.children:
            yield from child.walk()

    def node_count(self) -> int:
        return sum(1 for _ in self.walk())

    def nodes_at_depth(self, depth: int) -> List[Node]:
        layer = list(self.children)
        for _ in range(depth - 1):
            layer = [child for node in layer for child in node.children]
        return layer

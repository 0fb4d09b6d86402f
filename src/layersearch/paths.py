"""Path enumeration over the search tree, plus the predicates report code builds on."""

from typing import Dict, Iterator, List

from .model import Node, Root

Path = List[Node]


def iter_paths(root: Root) -> Iterator[Path]:
    """
    Yield every root-to-leaf path, left to right in domain-value order.
    Leaves are yielded whether or not they are dead, so callers can count
    failures as well as successes.
    """
    stack = [(child, []) for child in reversed(root.children)]
    while stack:
        node, prefix = stack.pop()
        path = prefix + [node]
        if not node.children:
            yield path
            continue
        for child in reversed(node.children):
            stack.append((child, path))


def enumerate_paths(root: Root) -> List[Path]:
    return list(iter_paths(root))


def frontier(root: Root) -> List[Path]:
    """Paths whose terminal node is still eligible for expansion."""
    return [path for path in iter_paths(root) if path[-1].is_frontier()]


def is_complete(path: Path, max_depth: int) -> bool:
    return len(path) == max_depth


def is_live(node: Node) -> bool:
    return not node.dead


def path_values(path: Path) -> List[int]:
    return [node.value for node in path]


def path_assignment(path: Path) -> Dict[str, int]:
    return {node.letter: node.value for node in path}


def format_path(path: Path) -> str:
    return "[" + " ".join(str(node) for node in path) + "]"

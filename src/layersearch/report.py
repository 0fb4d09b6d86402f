"""Reporting helpers built on path enumeration (no reaching into tree internals)."""

from typing import Dict, List

import pandas as pd

from .model import Root
from .paths import Path, format_path, is_complete, is_live, iter_paths, path_assignment


def valid_paths(root: Root) -> List[Path]:
    return [
        path for path in iter_paths(root)
        if is_complete(path, root.max_depth) and is_live(path[-1])
    ]


def invalid_path_count(root: Root) -> int:
    return sum(1 for path in iter_paths(root) if not is_live(path[-1]))


def solutions(root: Root) -> List[Dict[str, int]]:
    """Complete valid assignments, keys in alphabetical variable order."""
    return [dict(sorted(path_assignment(path).items())) for path in valid_paths(root)]


def paths_frame(root: Root) -> pd.DataFrame:
    """One row per path; unbound variables of shorter (dead) paths are <NA>."""
    letters = list(root.config.ordering.letters)
    rows = []
    for path in iter_paths(root):
        row = path_assignment(path)
        row["depth"] = len(path)
        row["live"] = is_live(path[-1])
        row["complete"] = is_complete(path, root.max_depth)
        rows.append(row)

    frame = pd.DataFrame(rows, columns=letters + ["depth", "live", "complete"])
    return frame.astype({letter: "Int64" for letter in letters})


def summary_lines(root: Root) -> List[str]:
    lines = ["Valid paths:"]
    lines.extend(format_path(path) for path in valid_paths(root))
    lines.append(f"Total invalid paths: {invalid_path_count(root)}")
    return lines

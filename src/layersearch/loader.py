import json
import os
from pathlib import Path
from typing import Any, Dict, List

from .puzzle import PuzzleDefinition, build_puzzle
from src.utils.io import iter_jsonl, load_json


def load_puzzles(file_path: str) -> List[PuzzleDefinition]:
    """
    Reads puzzle definitions from a file. Handles .json (one object or a list)
    and .jsonl formats.
    """
    if not os.path.exists(file_path):
        raise FileNotFoundError(f"File not found: {file_path}")

    path = Path(file_path)
    if path.suffix == ".jsonl":
        records = list(iter_jsonl(path))
    else:
        try:
            payload = load_json(path)
        except json.JSONDecodeError as exc:
            raise ValueError(f"{file_path}: invalid JSON ({exc.msg})") from exc
        records = payload if isinstance(payload, list) else [payload]

    return [parse_record(record, default_name=f"{path.stem}-{i}") for i, record in enumerate(records)]


def parse_record(record: Dict[str, Any], default_name: str = "puzzle") -> PuzzleDefinition:
    if not isinstance(record, dict):
        raise ValueError(f"Puzzle record must be an object, got {type(record).__name__}")

    letters = record.get("variables")
    if not isinstance(letters, list) or not letters or not all(isinstance(v, str) for v in letters):
        raise ValueError("Puzzle record needs a non-empty 'variables' list of names")

    constraints = record.get("constraints", [])
    if not isinstance(constraints, list) or not all(isinstance(c, str) for c in constraints):
        raise ValueError("'constraints' must be a list of expression strings")

    domain_size = record.get("domain_size", 4)
    if isinstance(domain_size, bool) or not isinstance(domain_size, int):
        raise ValueError(f"'domain_size' must be an integer, got {domain_size!r}")

    orderings = record.get("orderings") or {}
    if not isinstance(orderings, dict):
        raise ValueError("'orderings' must map ordering names to variable lists")
    for key, value in orderings.items():
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            raise ValueError(f"Ordering '{key}' must be a list of variable names, got {value!r}")

    return build_puzzle(
        name=str(record.get("name") or default_name),
        letters=letters,
        constraints=constraints,
        domain_size=domain_size,
        orderings=orderings,
    )

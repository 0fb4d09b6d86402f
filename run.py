"""CLI entrypoint: load puzzle(s), run the layered search, and report results."""

import argparse
import csv
import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from tqdm import tqdm

from src.layersearch import search_core
from src.layersearch.loader import load_puzzles
from src.layersearch.model import Root
from src.layersearch.puzzle import NATURAL, PuzzleDefinition, default_puzzle
from src.layersearch.report import paths_frame, solutions, summary_lines
from src.utils.io import save_json
from src.utils.trace import get_tracer, reset_tracer


def parse_args(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="Run the layered tombstone search on constraint puzzles")
    parser.add_argument(
        "input",
        type=Path,
        nargs="?",
        default=None,
        help="Puzzle JSON/JSONL file or directory of them (default: built-in eight-variable puzzle)",
    )
    parser.add_argument(
        "--ordering",
        default=os.environ.get("LAYERSEARCH_ORDERING", NATURAL),
        help="Variable ordering to search with: natural, most-constrained, or one defined by the puzzle.",
    )
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Optional path to write results: JSON when it ends in .json, CSV otherwise",
    )
    parser.add_argument("--trace", type=Path, default=None, help="Optional path to write the search trace CSV")
    parser.add_argument(
        "--paths",
        type=Path,
        default=None,
        help="Optional path to dump every explored path (dead or live) as CSV; one file per puzzle.",
    )
    parser.add_argument("--no-progress", action="store_true", help="Disable the per-layer progress bar")
    return parser.parse_args(argv)


def input_files(input_path: Path) -> List[Path]:
    if input_path.is_file():
        return [input_path]
    if input_path.is_dir():
        return [p for p in sorted(input_path.iterdir()) if p.suffix in [".json", ".jsonl"]]
    raise ValueError(f"Input path {input_path} is neither file nor directory")


def collect_puzzles(input_path: Optional[Path]) -> List[PuzzleDefinition]:
    if input_path is None:
        return [default_puzzle()]
    puzzles = []
    for file_path in input_files(input_path):
        puzzles.extend(load_puzzles(str(file_path)))
    return puzzles


def run_puzzle(puzzle: PuzzleDefinition, ordering: str, progress: bool = True) -> Root:
    config = puzzle.config_for(ordering)
    evaluator = puzzle.evaluator_for(ordering)
    layers = search_core.iter_search(config, evaluator)
    if progress:
        layers = tqdm(layers, total=config.max_depth, desc=puzzle.name, unit="layer")
    root = None
    for root in layers:
        pass
    return root


def write_results_csv(results: List[Dict[str, Any]], output_path: Path):
    with open(output_path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["id", "ordering", "solutions", "total_nodes", "invalid_paths", "dead_by_depth"])

        for r in results:
            writer.writerow([
                r["id"],
                r["ordering"],
                json.dumps(r["solutions"], separators=(",", ":")),
                r["total_nodes"],
                r["invalid_paths"],
                json.dumps(r["dead_by_depth"], separators=(",", ":")),
            ])


def _paths_file(base: Path, puzzle_name: str, multiple: bool) -> Path:
    if not multiple:
        return base
    return base.with_name(f"{base.stem}-{puzzle_name}{base.suffix}")


def _failed_row(puzzle_id: str, ordering: str) -> Dict[str, Any]:
    return {
        "id": puzzle_id,
        "ordering": ordering,
        "solutions": [],
        "total_nodes": -1,
        "invalid_paths": -1,
        "dead_by_depth": {},
    }


def main(argv: Optional[List[str]] = None):
    args = parse_args(argv)
    results = []
    reset_tracer()
    tracer = get_tracer()

    # A file that fails to load gets an error row; the other files still run.
    puzzles: List[PuzzleDefinition] = []
    sources = [None] if args.input is None else input_files(args.input)
    for source in sources:
        try:
            puzzles.extend(collect_puzzles(source))
        except Exception as e:
            print(f"ERROR: Failed to load puzzles from {source}: {e}")
            results.append(_failed_row(source.stem, args.ordering))

    for puzzle in puzzles:
        try:
            root = run_puzzle(puzzle, args.ordering, progress=not args.no_progress)
            stats = search_core.collect_stats(root)

            print(f"Puzzle {puzzle.name} (ordering: {args.ordering})")
            for line in summary_lines(root):
                print(line)

            if args.paths:
                paths_frame(root).to_csv(_paths_file(args.paths, puzzle.name, len(puzzles) > 1), index=False)

            results.append({
                "id": puzzle.name,
                "ordering": args.ordering,
                "solutions": solutions(root),
                "total_nodes": stats.total_nodes,
                "invalid_paths": stats.dead_nodes,
                "dead_by_depth": stats.dead_by_depth,
            })
        except Exception as e:
            print(f"ERROR: Failed to search puzzle {puzzle.name}: {e}")
            results.append(_failed_row(puzzle.name, args.ordering))

    if args.trace:
        tracer.to_csv(args.trace)

    if args.output:
        if args.output.suffix == ".json":
            save_json(args.output, results)
        else:
            write_results_csv(results, args.output)

    return results


if __name__ == "__main__":
    main()

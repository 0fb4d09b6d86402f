import csv
import json
from pathlib import Path

import pytest

from run import collect_puzzles, main, write_results_csv


def _write_puzzle(path: Path, name: str):
    path.write_text(json.dumps({
        "name": name,
        "variables": ["A", "B"],
        "constraints": ["A != B"],
    }))


def test_main_builtin_puzzle(capsys):
    results = main(["--no-progress"])

    out = capsys.readouterr().out
    assert "Puzzle eight-variable (ordering: natural)" in out
    assert "[A:2 B:3 C:2 D:3 E:1 F:4 G:1 H:2]" in out
    assert len(results) == 1
    assert len(results[0]["solutions"]) == 2


def test_main_single_file(tmp_path):
    puzzle_file = tmp_path / "pair.json"
    _write_puzzle(puzzle_file, "pair")

    results = main([str(puzzle_file), "--no-progress"])
    assert results[0]["id"] == "pair"
    assert results[0]["invalid_paths"] == 4
    assert results[0]["dead_by_depth"] == {2: 4}


def test_main_directory_input(tmp_path):
    for i in range(3):
        _write_puzzle(tmp_path / f"puzzle{i}.json", f"puzzle{i}")
    (tmp_path / "notes.txt").write_text("ignored")

    results = main([str(tmp_path), "--no-progress"])
    assert [r["id"] for r in results] == ["puzzle0", "puzzle1", "puzzle2"]


def test_main_reports_bad_ordering_per_puzzle(tmp_path, capsys):
    puzzle_file = tmp_path / "pair.json"
    _write_puzzle(puzzle_file, "pair")

    results = main([str(puzzle_file), "--ordering", "sideways", "--no-progress"])
    assert "ERROR: Failed to search puzzle pair" in capsys.readouterr().out
    assert results[0]["total_nodes"] == -1


def test_main_ordering_from_environment(monkeypatch):
    monkeypatch.setenv("LAYERSEARCH_ORDERING", "heuristic")
    results = main(["--no-progress"])
    assert results[0]["ordering"] == "heuristic"
    assert len(results[0]["solutions"]) == 2


def test_main_writes_output_trace_and_paths(tmp_path):
    output = tmp_path / "results.csv"
    trace = tmp_path / "trace.csv"
    paths = tmp_path / "paths.csv"

    main(["--no-progress", "--output", str(output), "--trace", str(trace), "--paths", str(paths)])

    content = output.read_text()
    assert "id,ordering,solutions,total_nodes,invalid_paths,dead_by_depth" in content
    assert "eight-variable" in content

    with open(trace, newline="") as f:
        actions = {row["action_type"] for row in csv.DictReader(f)}
    assert {"prune", "expand", "constraint_fail", "search_complete"} <= actions

    header = paths.read_text().splitlines()[0]
    assert header == "A,B,C,D,E,F,G,H,depth,live,complete"


def test_collect_puzzles_rejects_missing_path(tmp_path):
    with pytest.raises(ValueError):
        collect_puzzles(tmp_path / "missing.json")


def test_write_results_csv(tmp_path):
    output = tmp_path / "out.csv"
    write_results_csv(
        [{
            "id": "p",
            "ordering": "natural",
            "solutions": [{"A": 1}],
            "total_nodes": 4,
            "invalid_paths": 0,
            "dead_by_depth": {},
        }],
        output,
    )
    rows = list(csv.reader(output.open(newline="")))
    assert rows[1] == ["p", "natural", '[{"A":1}]', "4", "0", "{}"]


def test_main_keeps_going_when_one_file_is_malformed(tmp_path):
    _write_puzzle(tmp_path / "a_good.json", "good")
    (tmp_path / "b_broken.json").write_text("{invalid json")
    (tmp_path / "c_bad_constraint.json").write_text(json.dumps({
        "variables": ["A", "B"],
        "constraints": ["abs(A, B) == 1"],
    }))
    output = tmp_path / "results.csv"

    results = main([str(tmp_path), "--no-progress", "--output", str(output)])

    by_id = {r["id"]: r for r in results}
    assert by_id["b_broken"]["total_nodes"] == -1
    assert by_id["c_bad_constraint"]["total_nodes"] == -1
    assert len(by_id["good"]["solutions"]) == 12
    assert "good" in output.read_text()


def test_main_writes_json_output(tmp_path):
    output = tmp_path / "results.json"
    main(["--no-progress", "--output", str(output)])

    [row] = json.loads(output.read_text())
    assert row["id"] == "eight-variable"
    assert len(row["solutions"]) == 2
    assert row["dead_by_depth"]["2"] == 4

"""Tracing module: logs search tree prune/expand steps and writes to CSV."""

import csv
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class TraceStep:
    """A single step in the search."""

    timestamp: float
    step_number: int
    action_type: str  # 'prune', 'constraint_fail', 'expand', 'search_complete'
    depth: Optional[int] = None
    variable: Optional[str] = None
    path: Optional[str] = None
    nodes_checked: Optional[int] = None
    nodes_changed: Optional[int] = None  # marked dead on prune, created on expand
    constraint_checked: Optional[str] = None
    reason: Optional[str] = None


class Tracer:
    """Records search steps for logging and analysis."""

    def __init__(self, enabled: bool = True, record_failures: bool = True):
        self.enabled = enabled
        # Per-path failure rows dominate the trace on large trees.
        self.record_failures = record_failures
        self.steps: List[TraceStep] = []
        self.start_time = datetime.now().timestamp()
        self.step_counter = 0

    def _get_timestamp(self) -> float:
        """Get elapsed time in seconds since tracer creation."""
        return datetime.now().timestamp() - self.start_time

    def _append(self, **fields: Any) -> None:
        self.step_counter += 1
        self.steps.append(TraceStep(
            timestamp=self._get_timestamp(),
            step_number=self.step_counter,
            **fields,
        ))

    def log_constraint_fail(self, depth: int, path: str, constraint_desc: str):
        """Log a path whose terminal node was tombstoned."""
        if not self.enabled or not self.record_failures:
            return
        self._append(
            action_type='constraint_fail',
            depth=depth,
            path=path,
            constraint_checked=constraint_desc,
        )

    def log_prune(self, depth: int, nodes_checked: int, nodes_marked: int):
        """Log a completed prune pass over the frontier."""
        if not self.enabled:
            return
        self._append(
            action_type='prune',
            depth=depth,
            nodes_checked=nodes_checked,
            nodes_changed=nodes_marked,
        )

    def log_expand(self, depth: int, variable: str, nodes_expanded: int, nodes_added: int):
        """Log a new variable layer being added to the tree."""
        if not self.enabled:
            return
        self._append(
            action_type='expand',
            depth=depth,
            variable=variable,
            nodes_checked=nodes_expanded,
            nodes_changed=nodes_added,
        )

    def log_search_complete(self, depth: int, live_paths: int, reason: str = ""):
        """Log when the tree reaches its maximum depth."""
        if not self.enabled:
            return
        self._append(
            action_type='search_complete',
            depth=depth,
            nodes_checked=live_paths,
            reason=reason,
        )

    def to_csv(self, filepath: Path) -> None:
        """Write trace to CSV file."""
        if not self.steps:
            print("No trace steps to write")
            return

        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)

        fieldnames = [
            'timestamp', 'step_number', 'action_type', 'depth', 'variable', 'path',
            'nodes_checked', 'nodes_changed', 'constraint_checked', 'reason'
        ]

        with open(filepath, 'w', newline='', encoding='utf-8') as f:
            writer = csv.DictWriter(f, fieldnames=fieldnames)
            writer.writeheader()
            for step in self.steps:
                writer.writerow(asdict(step))

        print(f"Trace written to {filepath} ({len(self.steps)} steps)")

    def summary(self) -> Dict[str, Any]:
        """Get a summary of the trace."""
        action_counts = {}
        for step in self.steps:
            action_counts[step.action_type] = action_counts.get(step.action_type, 0) + 1

        return {
            'total_steps': len(self.steps),
            'elapsed_time_seconds': self._get_timestamp(),
            'action_counts': action_counts,
            'nodes_pruned': sum(s.nodes_changed or 0 for s in self.steps if s.action_type == 'prune'),
            'nodes_created': sum(s.nodes_changed or 0 for s in self.steps if s.action_type == 'expand'),
            'num_layers': action_counts.get('expand', 0),
        }


# Global tracer instance
_global_tracer: Optional[Tracer] = None


def get_tracer() -> Tracer:
    """Get or create the global tracer."""
    global _global_tracer
    if _global_tracer is None:
        _global_tracer = Tracer(enabled=True)
    return _global_tracer


def reset_tracer() -> None:
    """Reset the global tracer."""
    global _global_tracer
    _global_tracer = None


def enable_tracing(enabled: bool = True) -> None:
    """Enable or disable tracing."""
    get_tracer().enabled = enabled

"""
Operation statistics.

Records a count and a total duration per (entity, action) pair so that long
running commands such as an import can print a profile when they finish.
Observability only: nothing here may affect the result of an operation.
"""

import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Dict, Iterator, Tuple


@dataclass
class StatItem:
    count: int = 0
    duration: float = 0.0

    @property
    def average(self) -> float:
        return self.duration / self.count if self.count else 0.0


class Stats:
    """Process-wide statistics table keyed by (entity, action)."""

    def __init__(self):
        self._items: Dict[Tuple[str, str], StatItem] = {}
        self._lock = threading.Lock()

    def log(self, name: str, action: str, duration: float):
        with self._lock:
            item = self._items.setdefault((name, action), StatItem())
            item.count += 1
            item.duration += duration

    @contextmanager
    def timed(self, name: str, action: str) -> Iterator[None]:
        """Time the enclosed block, whether or not it raises."""
        start = time.perf_counter()
        try:
            yield
        finally:
            self.log(name, action, time.perf_counter() - start)

    def snapshot(self) -> Dict[Tuple[str, str], StatItem]:
        with self._lock:
            return {key: StatItem(item.count, item.duration) for key, item in self._items.items()}

    def __str__(self):
        lines = []
        for (name, action), item in sorted(self.snapshot().items()):
            lines.append(
                f"{item.count}  {name} '{action}' actions took {item.duration:.4f}s total, "
                f"{item.average:.6f}s avg"
            )
        return "\n".join(lines)

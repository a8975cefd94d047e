"""
Opt-in timing of the lexer and binder hot paths.

Set ``JBIND_PROFILE`` in the environment to collect per-path call counts and
timings; without it ``ProfileContext`` is an empty context manager and
``get_hot_path_stats`` always returns an empty dict.
"""

import os
import time
from dataclasses import dataclass
from typing import Any

# Never enabled under -O
PROFILE_HOT_PATHS = __debug__ and "JBIND_PROFILE" in os.environ


@dataclass
class HotPathStats:
    """Accumulated timings of one named hot path."""

    function_name: str
    call_count: int = 0
    total_time_ns: int = 0
    slowest_ns: int = 0

    @property
    def mean_time_ns(self) -> float:
        return self.total_time_ns / self.call_count if self.call_count else 0.0

    def record_call(self, duration_ns: int) -> None:
        self.call_count += 1
        self.total_time_ns += duration_ns
        self.slowest_ns = max(self.slowest_ns, duration_ns)


if PROFILE_HOT_PATHS:
    _stats: dict[str, HotPathStats] = {}

    class ProfileContext:
        """Times the enclosed block and files it under ``name``."""

        __slots__ = ("name", "started_ns")

        def __init__(self, name: str) -> None:
            self.name = name
            self.started_ns = 0

        def __enter__(self) -> "ProfileContext":
            self.started_ns = time.perf_counter_ns()
            return self

        def __exit__(self, *exc_info: Any) -> None:
            elapsed = time.perf_counter_ns() - self.started_ns
            stats = _stats.get(self.name)
            if stats is None:
                stats = _stats[self.name] = HotPathStats(self.name)
            stats.record_call(elapsed)

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        """Returns a snapshot of the collected statistics."""
        return dict(_stats)

    def clear_hot_path_stats() -> None:
        _stats.clear()

else:

    class ProfileContext:  # type: ignore[no-redef]
        __slots__ = ()

        def __init__(self, name: str) -> None:
            pass

        def __enter__(self) -> "ProfileContext":
            return self

        def __exit__(self, *exc_info: Any) -> None:
            pass

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        return {}

    def clear_hot_path_stats() -> None:
        pass

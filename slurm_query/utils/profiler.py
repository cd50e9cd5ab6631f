"""
Timing utilities for pipeline stages.

Usage:
    from slurm_query.utils.profiler import stage_timer

    with stage_timer("compile") as timing:
        sql = compile_query(text)

    print(timing.label, timing.duration_ms)
"""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass, field
from typing import Any, Generator, Optional


@dataclass
class StageTiming:
    """
    Wall-clock measurement of one pipeline stage.
    """

    label: str
    start_ts: float = field(default=0.0)
    end_ts: float = field(default=0.0)
    duration_seconds: float = field(default=0.0)
    failed: bool = field(default=False)
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def duration_ms(self) -> float:
        return round(self.duration_seconds * 1000, 2)


@contextlib.contextmanager
def stage_timer(label: str, sink: Optional[list[StageTiming]] = None) -> Generator[StageTiming, None, None]:
    """
    Context manager timing a block with `time.perf_counter`.

    Parameters
    ----------
    label : str
        Stage name recorded on the timing.
    sink : list[StageTiming], optional
        When given, the finished timing is appended to it (also on failure).
    """
    timing = StageTiming(label=label)
    timing.start_ts = time.perf_counter()
    try:
        yield timing
    except BaseException:
        timing.failed = True
        raise
    finally:
        timing.end_ts = time.perf_counter()
        timing.duration_seconds = timing.end_ts - timing.start_ts
        if sink is not None:
            sink.append(timing)


__all__ = ["StageTiming", "stage_timer"]

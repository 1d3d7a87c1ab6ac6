"""Per-run stage timing."""

import time
from collections.abc import Iterator
from contextlib import contextmanager

from pydantic import BaseModel


class TimingLedger(BaseModel, frozen=True):
    """
    Ordered stage -> elapsed seconds record for one ingestion run.

    The ledger is immutable: ``with_stage`` returns a new ledger with one more
    entry, so stages thread it through the pipeline instead of mutating shared
    timing state.
    """

    stages: tuple[tuple[str, float], ...] = ()

    def with_stage(self, name: str, seconds: float) -> "TimingLedger":
        return TimingLedger(stages=self.stages + ((name, round(seconds, 6)),))

    def skipped(self, name: str) -> "TimingLedger":
        return self.with_stage(name, 0.0)

    @property
    def total(self) -> float:
        return sum(seconds for _, seconds in self.stages)

    def as_dict(self) -> dict[str, float]:
        return dict(self.stages)


class Stopwatch:
    """Measures one stage; read ``elapsed`` after the block exits."""

    def __init__(self) -> None:
        self._started = time.perf_counter()
        self.elapsed = 0.0

    def stop(self) -> float:
        self.elapsed = time.perf_counter() - self._started
        return self.elapsed


@contextmanager
def stopwatch() -> Iterator[Stopwatch]:
    watch = Stopwatch()
    try:
        yield watch
    finally:
        watch.stop()

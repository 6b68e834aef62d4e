from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Iterator
from typing import Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ProgressLogger:
    """Log throughput of a long loop every ``step_every`` items or ``secs_every`` seconds.

    With ``enable_tqdm`` a tqdm bar is shown instead of the periodic log lines.
    """

    def __init__(
        self,
        total: Optional[int],
        label: str,
        step_every: int = 100_000,
        secs_every: float = 5.0,
        enable_tqdm: bool = False,
        unit: str = "lines",
    ) -> None:
        self.total = total
        self.label = label
        self.step_every = step_every
        self.secs_every = secs_every
        self.unit = unit
        self.count = 0
        self._last_log_count = 0
        self._last_log_time = time.time()
        self._start = self._last_log_time

        self._tqdm = None
        if enable_tqdm:
            try:
                from tqdm import tqdm  # type: ignore[import-untyped]
            except ImportError:
                logger.warning("tqdm not available, falling back to log lines")
            else:
                self._tqdm = tqdm(total=total, desc=label, unit=unit)

    def _should_log(self, i: int) -> bool:
        if i - self._last_log_count >= self.step_every:
            return True
        return time.time() - self._last_log_time >= self.secs_every

    def _fmt(self, i: int) -> str:
        elapsed = time.time() - self._start
        rate = i / elapsed if elapsed > 0 else 0.0
        eta = ""
        if self.total is not None and rate > 0:
            remaining = max(self.total - i, 0)
            eta = f" | eta={remaining / rate:,.0f}s"
        total = self.total if self.total is not None else "?"
        return (
            f"{self.label}: {i:,}/{total} {self.unit} | {rate:,.0f} {self.unit}/s"
            f" | elapsed={elapsed:,.0f}s{eta}"
        )

    def wrap(self, it: Iterable[T]) -> Iterator[T]:
        for item in it:
            self.count += 1
            if self._tqdm is not None:
                self._tqdm.update(1)
            elif self._should_log(self.count):
                logger.info(self._fmt(self.count))
                self._last_log_count = self.count
                self._last_log_time = time.time()
            yield item

        if self._tqdm is None:
            logger.info(self._fmt(self.count))
        else:
            self._tqdm.close()

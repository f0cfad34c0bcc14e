from dataclasses import dataclass
from typing import Optional, Protocol

import logging

from .constants import ONE_KIBIBYTE, TICK_INTERVAL_SECONDS, RATE_WINDOW_SECONDS, RETENTION_SECONDS
from .samplequeue import SampleQueue


class ProgressSource(Protocol):
    def elapsed(self) -> float: ...
    def downloaded_bytes(self) -> float: ...
    def speed(self) -> float: ...


@dataclass(frozen=True, eq=False)
class RawProgressSample:
    time: float
    cumulative_bytes: float


@dataclass(frozen=True)
class Sample:
    time: float
    cumulative_kb: float
    instant_rate_kbs: float
    window_rate_kbs: float


class RateEstimator:
    """
    Turns transport progress notifications into one Sample per tick.

    Lives on the producer thread: created when the transfer starts and called
    synchronously from the transport's progress callback, so it is never
    re-entered. Only `output_queue` is shared with the render loop.
    """

    def __init__(
            self,
            output_queue: SampleQueue,
            tick_interval_seconds: float = TICK_INTERVAL_SECONDS,
            window_seconds: float = RATE_WINDOW_SECONDS,
            retention_seconds: float = RETENTION_SECONDS
        ) -> None:

        self.output_queue = output_queue
        self.buffer = SampleQueue()
        self.last_emit = 0.0

        self._tick_interval_seconds = tick_interval_seconds
        self._window_seconds = window_seconds
        self._retention_seconds = retention_seconds

    def on_progress(self, transport: ProgressSource) -> Optional[Sample]:
        """
        Record the transport's current progress and emit a Sample when a tick has elapsed.

        - Buffers (elapsed time, downloaded bytes) on every call
        - Throttles output to one Sample per tick interval of transfer time
        - Evicts buffered samples older than the retention horizon

        Returns:
            Sample | None: the emitted sample, or None when throttled.
        """

        now = transport.elapsed()
        raw = RawProgressSample(time=now, cumulative_bytes=transport.downloaded_bytes())
        self.buffer.push(raw)

        if now - self.last_emit < self._tick_interval_seconds:
            return None

        instant_rate_kbs = transport.speed() / ONE_KIBIBYTE
        window_rate_kbs = self._window_rate_and_evict(now)

        sample = Sample(
            time=now,
            cumulative_kb=raw.cumulative_bytes / ONE_KIBIBYTE,
            instant_rate_kbs=instant_rate_kbs,
            window_rate_kbs=window_rate_kbs
        )
        self.output_queue.push(sample)
        self.last_emit = now

        logging.debug(f"Emitted {sample}, buffered={len(self.buffer)}")
        return sample

    def _window_rate_and_evict(self, now: float) -> float:
        """
        Secant slope over the trailing window: bytes of the last windowed sample
        minus bytes of the first one, in KB. The first sample is the baseline.
        """

        first_bytes = None
        last_bytes = None
        clear_queue = []

        for raw in self.buffer.snapshot():
            if now - self._window_seconds <= raw.time <= now:
                if first_bytes is None:
                    first_bytes = raw.cumulative_bytes
                last_bytes = raw.cumulative_bytes
            elif raw.time < now - self._retention_seconds:
                clear_queue.append(raw)

        for raw in clear_queue:
            self.buffer.remove(raw)

        if clear_queue:
            logging.debug(f"Evicted {len(clear_queue)} samples older than {now - self._retention_seconds:.2f}s")

        if first_bytes is None:
            return 0.0
        return (last_bytes - first_bytes) / ONE_KIBIBYTE


__all__ = ["RateEstimator", "RawProgressSample", "Sample"]

"""Interval boundary bookkeeping for monotonic (count) metrics"""
import time
from typing import Callable, Dict, Hashable, Optional, Set


class TimeTracker:
    """Tracks where the next reporting interval starts.

    The shared boundary is set at construction and moved forward once per
    export cycle. A stream exported in the cycle that just ended keeps its own
    boundary (the end of its last interval) so that counters reported with
    different timestamps in the same cycle do not share one start time.
    Streams that skip a cycle fall back to the shared boundary and are no
    longer tracked.

    Not thread safe: callers must run one export cycle at a time.
    """

    def __init__(self, clock: Callable[[], int] = time.time_ns):
        self._clock = clock
        self._previous_time = clock()
        self._stream_times: Dict[Hashable, int] = {}
        self._recorded: Set[Hashable] = set()

    def get_previous_time(self, stream_key: Optional[Hashable] = None) -> int:
        """Start of the next interval in nanoseconds"""
        if stream_key is not None and stream_key in self._stream_times:
            return self._stream_times[stream_key]
        return self._previous_time

    def update_time(self, nanos: int) -> None:
        """Record the shared boundary used for streams without their own"""
        self._previous_time = nanos

    def tick(self) -> None:
        """Close the cycle: move the shared boundary to now and drop idle streams"""
        self.update_time(self._clock())
        self._stream_times = {key: self._stream_times[key] for key in self._recorded}
        self._recorded = set()

    def record_stream(self, stream_key: Hashable, nanos: int) -> None:
        """Remember where the last exported interval of a stream ended"""
        self._stream_times[stream_key] = nanos
        self._recorded.add(stream_key)

    def forget_stream(self, stream_key: Hashable) -> None:
        self._stream_times.pop(stream_key, None)
        self._recorded.discard(stream_key)

    def reset(self) -> None:
        """Drop per-stream boundaries and restart from the current time"""
        self._stream_times.clear()
        self._recorded.clear()
        self._previous_time = self._clock()

    @property
    def tracked_streams(self) -> int:
        return len(self._stream_times)

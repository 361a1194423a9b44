# Authors: Thor Lemke, Sally Hyun Hahm, Matteo Corrado
# Last Update: 10/17/2026
# Course: COSC 69.15/169.15 at Dartmouth College in 25F with Professor Alberto Quattrini Li
# Purpose: Thread-safe single-slot channel handing the newest frame or status from the capture
# worker to the UI thread, dropping values the consumer never picked up
# Acknowledgements: Python queue module documentation

"""Latest-value hand-off between the capture worker and the UI."""
import queue
from typing import Any, Optional


class LatestSlot:
    """Bounded single-slot queue; put() replaces any unread value."""

    def __init__(self):
        self._queue: queue.Queue = queue.Queue(maxsize=1)
        self.dropped = 0

    def put(self, value: Any):
        while True:
            try:
                self._queue.put_nowait(value)
                return
            except queue.Full:
                # Drop the stale value and retry
                try:
                    self._queue.get_nowait()
                    self.dropped += 1
                except queue.Empty:
                    pass

    def take(self) -> Optional[Any]:
        """Return the pending value, or None if nothing new was published."""
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def clear(self):
        self.take()

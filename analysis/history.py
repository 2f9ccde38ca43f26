# history.py
import logging
from collections import deque
from typing import Deque, Iterator, Optional

from analysis.models import Sample

logger = logging.getLogger(__name__)


class HistoryBuffer:
    """
    Fixed-capacity rolling history of samples, one per block.

    Capacity is ``window_blocks + 2``: enough for the look-back sample, the
    previous sample and the current one. Oldest samples are evicted first.
    """

    def __init__(self, window_blocks: int) -> None:
        if window_blocks < 1:
            raise ValueError("window_blocks must be >= 1")
        self.window_blocks = window_blocks
        self.capacity = window_blocks + 2
        self._samples: Deque[Sample] = deque()

    def append(self, sample: Sample) -> bool:
        """Stores a sample; returns False when its block is not newer than the last one."""
        last = self.latest()
        if last is not None and sample.block <= last.block:
            logger.warning(
                "Rejecting sample for block %s; last stored block is %s",
                sample.block,
                last.block,
            )
            return False

        self._samples.append(sample)
        while len(self._samples) > self.capacity:
            self._samples.popleft()
        return True

    def look_back(self, n: int) -> Optional[Sample]:
        """Returns the sample ``n`` positions before the most recent one."""
        if n < 0 or len(self._samples) < n + 1:
            return None
        return self._samples[-1 - n]

    def previous(self) -> Optional[Sample]:
        return self.look_back(1)

    def latest(self) -> Optional[Sample]:
        return self.look_back(0)

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self._samples)

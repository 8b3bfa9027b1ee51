"""Sample buffer with rolling or accumulating retention."""

import logging
from collections import deque
from typing import Callable, Deque, Iterable, Optional, Sequence, Tuple

from tgraph.models.display import Accumulate, RetentionPolicy, Rolling
from tgraph.models.sample import Sample

logger = logging.getLogger(__name__)


class SampleBuffer:
    """
    Ordered, append-only collection of samples.

    Rolling(max_size) evicts exactly the oldest sample whenever an append
    would exceed max_size; Accumulate never evicts. Not thread-safe: callers
    serialize appends and snapshots.
    """

    def __init__(self, policy: RetentionPolicy) -> None:
        """
        Initialize the buffer.

        Args:
            policy: Retention policy (Rolling or Accumulate).
        """
        self.policy = policy
        self._samples: Deque[Sample] = self._new_storage(policy)

    @staticmethod
    def _new_storage(policy: RetentionPolicy) -> Deque[Sample]:
        if isinstance(policy, Rolling):
            return deque(maxlen=policy.max_size)
        if isinstance(policy, Accumulate):
            return deque()
        raise TypeError(f"Unknown retention policy: {policy!r}")

    def append(self, sample: Sample) -> None:
        """Append a sample, evicting the oldest one under rolling retention."""
        self._samples.append(sample)

    def snapshot(self) -> Tuple[Sample, ...]:
        """Return an immutable, ordered view of the current samples."""
        return tuple(self._samples)

    def size(self) -> int:
        return len(self._samples)

    def __len__(self) -> int:
        return len(self._samples)

    def clear(self) -> None:
        self._samples.clear()

    def reset(self, policy: RetentionPolicy) -> None:
        """Drop all samples and switch to a new retention policy."""
        self.policy = policy
        self._samples = self._new_storage(policy)

    def bulk_load(
        self,
        lines: Sequence[str],
        extract_fn: Callable[[str], Optional[Sample]],
    ) -> int:
        """
        Load historical lines according to the retention policy.

        Rolling mode only considers the last max_size lines; Accumulate
        mode replays every line in order.

        Args:
            lines: Historical raw lines, oldest first.
            extract_fn: Parser returning a sample or None for a raw line.

        Returns:
            Number of samples accepted.
        """
        loaded = 0
        for line in tail_lines(lines, self.policy):
            sample = extract_fn(line)
            if sample is not None:
                self.append(sample)
                loaded += 1
        logger.debug(f"Bulk-loaded {loaded} samples ({self.policy.name})")
        return loaded


def tail_lines(lines: Sequence[str], policy: RetentionPolicy) -> Iterable[str]:
    """
    Select the historical lines a policy ingests.

    Args:
        lines: Non-blank raw lines, oldest first.
        policy: Retention policy.

    Returns:
        The last max_size lines for Rolling, all lines for Accumulate.
    """
    if isinstance(policy, Rolling):
        start = max(0, len(lines) - policy.max_size)
        return lines[start:]
    return lines

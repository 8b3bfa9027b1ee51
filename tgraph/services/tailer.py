"""
Polling file tailer for metric logs.

Producers append JSON lines to a log file; the tailer reads historical
content once and then returns only new complete lines on each poll.

Design Decisions:
    - Polls file size instead of using OS notifications (portable, no handles
      held between polls)
    - Handles truncation/replacement by restarting from the beginning
    - Buffers a trailing partial line until its newline arrives
    - A missing file is a valid "no data yet" state, not an error
"""

import codecs
import logging
from pathlib import Path
from typing import List, Union

from tgraph.core.exceptions import SourceError

logger = logging.getLogger(__name__)


class FileTail:
    """
    Tail a single metric log file.

    Attributes:
        path: Path to the log file.
        offset: Byte offset up to which content has been consumed.
        partial: Incomplete trailing line held until its newline arrives.
        decoder: Incremental UTF-8 decoder holding bytes of a character
            split across reads.

    Example:
        >>> tail = FileTail("heap.log")
        >>> history = tail.read_history()
        >>> new_lines = tail.poll()
    """

    def __init__(self, path: Union[str, Path]) -> None:
        """
        Initialize a tail for a log file.

        Args:
            path: Path to the JSONL metric log.
        """
        self.path = Path(path)
        self.offset = 0
        self.partial = ""
        self.decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self.closed = False

    def exists(self) -> bool:
        return self.path.exists()

    def reset(self) -> None:
        """Forget the read position so the next read starts at byte 0."""
        self.offset = 0
        self.partial = ""
        self.decoder.reset()

    def _read_new_lines(self) -> List[str]:
        """Read new complete lines since the last read."""
        try:
            size = self.path.stat().st_size
        except FileNotFoundError:
            return []
        except OSError as e:
            raise SourceError(f"Cannot stat {self.path}: {e}") from e

        if size < self.offset:
            logger.info(f"{self.path} was truncated, restarting from the beginning")
            self.reset()

        if size == self.offset:
            return []

        try:
            with self.path.open("rb") as f:
                f.seek(self.offset)
                data = f.read(size - self.offset)
        except FileNotFoundError:
            return []
        except OSError as e:
            raise SourceError(f"Cannot read {self.path}: {e}") from e

        self.offset += len(data)
        text = self.partial + self.decoder.decode(data)
        lines = text.splitlines()

        # Keep an unterminated last line for the next read.
        if text and not text.endswith("\n"):
            self.partial = lines.pop() if lines else ""
        else:
            self.partial = ""

        return [line for line in lines if line.strip()]

    def read_history(self) -> List[str]:
        """
        Read all complete lines currently in the file, from the beginning.

        Subsequent polls continue from the end of what was read here, so
        no line is returned twice.

        Returns:
            Non-blank lines, oldest first; empty if the file is missing.

        Raises:
            SourceError: If the file exists but cannot be read.
        """
        self.reset()
        return self._read_new_lines()

    def poll(self) -> List[str]:
        """
        Return new complete lines appended since the last read.

        Raises:
            SourceError: If the file exists but cannot be read.
        """
        if self.closed:
            return []
        return self._read_new_lines()

    def close(self) -> None:
        """Stop tailing; later polls return nothing."""
        self.closed = True
        self.reset()

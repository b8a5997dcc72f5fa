"""Incremental tool call extraction for streamed model output."""

from typing import List, Optional, Set, Tuple

from ..logger import get_logger
from ..tools.models import ToolCallRecord
from .extractor import ToolCallExtractor

logger = get_logger(__name__)


class StreamingExtractor:
    """
    Accumulates streamed chunks and reports tool calls as soon as they become parseable.

    Every chunk triggers a re-parse of the whole buffer, because a call split across
    chunks only becomes extractable once enough of it has arrived. Cost per chunk
    therefore grows with the buffer; one extractor is meant to live for a single
    response.

    Example:
        >>> stream = StreamingExtractor()
        >>> stream.add_chunk('{"tool_call":{"tool":"add"')
        >>> stream.add_chunk(',"args":{"x":1,"y":2}}}')
        [ToolCallRecord(tool='add', args={'x': 1, 'y': 2})]
    """

    def __init__(self, extractor: Optional[ToolCallExtractor] = None) -> None:
        self.extractor = extractor or ToolCallExtractor()
        self._buffer = ""
        self._found: List[ToolCallRecord] = []
        self._seen: Set[Tuple[str, str]] = set()

    def add_chunk(self, chunk: str) -> Optional[List[ToolCallRecord]]:
        """Append a chunk and return tool calls that were not reported before.

        Args:
            chunk: The next piece of text. Non-string chunks are ignored.

        Returns:
            The newly discovered records, or None if there are none.
        """
        if not isinstance(chunk, str):
            return None

        self._buffer += chunk
        calls = self.extractor.extract(self._buffer)
        if not calls:
            return None

        new_calls: List[ToolCallRecord] = []
        for call in calls:
            key = call.key()
            if key in self._seen:
                continue
            self._seen.add(key)
            new_calls.append(call)

        if not new_calls:
            return None

        logger.debug("Streaming buffer (%d chars) yielded %d new tool call(s).", len(self._buffer), len(new_calls))
        self._found.extend(new_calls)
        return new_calls

    def get_all_calls(self) -> List[ToolCallRecord]:
        """All tool calls reported so far, in discovery order."""
        return list(self._found)

    def get_buffer(self) -> str:
        return self._buffer

    def reset(self) -> None:
        """Discard the buffer and every reported call."""
        self._buffer = ""
        self._found = []
        self._seen = set()

# mcp_host_oauth/sse.py
"""Server-Sent Events (SSE) framing for MCP streams."""

import json
import logging
from typing import Any, AsyncIterable, AsyncIterator, Dict, Iterable, List, Optional, cast

from pydantic import BaseModel

logger = logging.getLogger(__name__)

DATA_PREFIX = "data: "
EVENT_PREFIX = "event: "
ID_PREFIX = "id: "


class SseEvent(BaseModel):
    """One blank-line delimited block of an event stream."""

    event_type: Optional[str] = None
    data: str = ""
    event_id: Optional[str] = None


class SseDecoder:
    """
    Incremental line decoder for ``text/event-stream`` bodies.

    Feed lines one at a time (without their line terminator); a complete
    event is returned when a blank line closes it::

        decoder = SseDecoder()
        for line in lines:
            event = decoder.decode(line)
            if event is not None:
                handle(event)
    """

    def __init__(self) -> None:
        self._event_type: Optional[str] = None
        self._event_id: Optional[str] = None
        self._data: List[str] = []

    @property
    def pending(self) -> bool:
        """True if lines of an unterminated event are buffered."""
        return bool(self._data) or self._event_type is not None

    def reset(self) -> None:
        self._event_type = None
        self._event_id = None
        self._data = []

    def decode(self, line: str) -> Optional[SseEvent]:
        """
        Consume one line.

        Args:
            line: A line of the stream, trailing ``\\r``/``\\n`` allowed

        Returns:
            The completed event on a blank line that closes buffered data,
            otherwise None
        """
        line = line.rstrip("\r\n")

        if not line:
            if not self._data:
                # Nothing to dispatch (e.g. keep-alive or a lone event: line)
                self.reset()
                return None
            event = SseEvent(
                event_type=self._event_type,
                data="\n".join(self._data),
                event_id=self._event_id,
            )
            self.reset()
            return event

        if line.startswith(DATA_PREFIX):
            self._data.append(line[len(DATA_PREFIX) :])
        elif line.startswith(EVENT_PREFIX):
            self._event_type = line[len(EVENT_PREFIX) :]
        elif line.startswith(ID_PREFIX):
            self._event_id = line[len(ID_PREFIX) :]
        # Comments (":") and unknown fields are ignored
        return None


def parse_sse_events(lines: Iterable[str]) -> List[SseEvent]:
    """
    Split already-received SSE lines into events.

    Example:
        >>> parse_sse_events(["event: message", 'data: {"id":1}', ""])
        [SseEvent(event_type='message', data='{"id":1}', event_id=None)]
    """
    decoder = SseDecoder()
    events = []
    for line in lines:
        event = decoder.decode(line)
        if event is not None:
            events.append(event)
    return events


async def aiter_sse_events(lines: AsyncIterable[str]) -> AsyncIterator[SseEvent]:
    """
    Turn an async stream of lines into SSE events.

    A trailing event that never received its closing blank line is dropped
    when the stream ends.

    Args:
        lines: Lines of the response body (e.g. ``response.aiter_lines()``)

    Yields:
        SseEvent for each completed block
    """
    decoder = SseDecoder()
    async for line in lines:
        event = decoder.decode(line)
        if event is not None:
            yield event
    if decoder.pending:
        logger.debug("Dropping unterminated event at end of stream")


def parse_sse_json(lines: Iterable[str]) -> Dict[str, Any]:
    """
    Parse a buffered Server-Sent Events response into JSON.

    Many MCP servers answer a POST with a single SSE event:
        event: message
        data: {"jsonrpc":"2.0","result":{...}}

    Args:
        lines: Lines from SSE response (typically response.text.strip().splitlines())

    Returns:
        Parsed JSON object from the data lines

    Raises:
        ValueError: If no data lines found in SSE response
        json.JSONDecodeError: If data is not valid JSON
    """
    data = "\n".join(
        line[len(DATA_PREFIX) :] for line in lines if line.startswith(DATA_PREFIX)
    )
    if not data:
        raise ValueError("No data lines in SSE response")
    return cast(Dict[str, Any], json.loads(data))

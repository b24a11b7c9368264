"""Split a streamed annotation into speech segments on the [SEP] marker."""

from collections.abc import AsyncIterable, AsyncIterator

MARKER = "[SEP]"


async def parse_marker_stream(tokens: AsyncIterable[str]) -> AsyncIterator[str]:
    """Yield speech segments from a stream of text tokens.

    The buffer, not the token, is searched for the marker, so a marker split
    across several tokens is still found. Segments before a marker are
    stripped and dropped when empty. Whatever remains when the stream ends is
    yielded as-is, without stripping.

    Args:
        tokens: Async iterable of text fragments, e.g. an LLM token stream

    Yields:
        Speech segments in stream order
    """
    buffer = ""

    async for token in tokens:
        buffer += token

        marker_idx = buffer.find(MARKER)
        while marker_idx != -1:
            segment = buffer[:marker_idx].strip()
            if segment:
                yield segment
            buffer = buffer[marker_idx + len(MARKER) :]
            marker_idx = buffer.find(MARKER)

    if buffer:
        yield buffer

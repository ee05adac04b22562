"""
MCP Transport layer.

StdioTransport speaks the MCP stdio framing: one JSON-RPC message per
line on stdin/stdout. Input framed with Content-Length headers is also
accepted.
"""

import sys
import json
from abc import ABC, abstractmethod
from typing import Optional


class Transport(ABC):
    """Abstract base class for MCP transports."""

    @abstractmethod
    async def send(self, message: dict) -> None:
        """Send a message."""
        pass

    @abstractmethod
    async def receive(self) -> Optional[dict]:
        """Receive a message. Returns None on EOF/close."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Close the transport."""
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()


class StdioTransport(Transport):
    """
    Transport using stdin/stdout for communication.

    Reads block the event loop; requests are handled one at a time.
    """

    def __init__(
        self,
        input_stream=None,
        output_stream=None,
    ):
        self.input = input_stream or sys.stdin
        self.output = output_stream or sys.stdout
        self._closed = False

    async def send(self, message: dict) -> None:
        """Write one message as a single line of JSON."""
        if self._closed:
            raise RuntimeError("Transport is closed")

        # ensure_ascii keeps the line free of raw newlines and non-ASCII
        content = json.dumps(message, ensure_ascii=True)

        try:
            self.output.write(content + "\n")
            self.output.flush()
        except (OSError, ValueError) as e:
            raise RuntimeError(f"Failed to send: {e}")

    def _read_framed(self, first_line: str) -> Optional[str]:
        """Read the body of a Content-Length framed message."""
        content_length = int(first_line.split(":", 1)[1].strip())

        # Skip remaining headers up to the blank separator line
        while True:
            line = self.input.readline()
            if not line:
                return None
            if not line.strip():
                break

        content = self.input.read(content_length)
        return content or None

    async def receive(self) -> Optional[dict]:
        """Receive the next message from stdin."""
        if self._closed:
            return None

        while True:
            line = self.input.readline()
            if not line:
                return None  # EOF

            stripped = line.strip()
            if not stripped:
                continue

            if stripped.lower().startswith("content-length:"):
                try:
                    content = self._read_framed(stripped)
                except ValueError as e:
                    raise ValueError(f"Invalid Content-Length header: {e}")
                if content is None:
                    return None
            else:
                content = stripped

            try:
                return json.loads(content)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON: {e}")

    async def close(self) -> None:
        """Close the transport."""
        self._closed = True

"""STDIO transport layer for MCP communication.

Handles reading/writing JSON-RPC messages over stdin/stdout, one message
per line.
"""

from __future__ import annotations

import sys
from abc import ABC, abstractmethod
from typing import TextIO


class TransportError(Exception):
    """Raised when the output side of a transport is broken."""

    pass


class Transport(ABC):
    """Line-oriented duplex channel carrying one JSON-RPC message per unit."""

    @abstractmethod
    def read_message(self) -> str | None:
        """Return the next message, or None at end of stream."""

    @abstractmethod
    def write_message(self, message: str) -> None:
        """Write one message.

        Raises:
            TransportError: If the message cannot be written.
        """

    def log(self, message: str) -> None:
        """Write a diagnostic line outside the protocol stream."""

    def close(self) -> None:
        """Release the underlying streams."""


class StdioTransport(Transport):
    """STDIO transport for MCP communication.

    Reads JSON-RPC messages from stdin and writes responses to stdout.
    Logging goes to stderr to avoid corrupting the protocol stream.
    """

    def __init__(
        self,
        stdin: TextIO | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ) -> None:
        """Initialize the transport.

        Args:
            stdin: Input stream (defaults to sys.stdin).
            stdout: Output stream (defaults to sys.stdout).
            stderr: Log stream (defaults to sys.stderr).
        """
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout
        self._stderr = stderr or sys.stderr
        self._closed = False

    def read_message(self) -> str | None:
        """Read a message from stdin.

        Reads lines until a non-empty line is found. A read failure is
        reported as end of stream.

        Returns:
            Message string (stripped), or None on EOF.
        """
        while True:
            try:
                line = self._stdin.readline()
            except (OSError, ValueError):
                return None

            if not line:  # EOF
                return None

            line = line.strip()
            if line:  # Skip empty lines
                return line

    def write_message(self, message: str) -> None:
        """Write a message to stdout and flush it.

        Args:
            message: JSON string to write.

        Raises:
            TransportError: If stdout is closed or the pipe is broken.
        """
        try:
            self._stdout.write(message + "\n")
            self._stdout.flush()
        except (OSError, ValueError) as e:
            raise TransportError(f"Failed to write message: {e}") from e

    def log(self, message: str) -> None:
        """Write a log message to stderr.

        Args:
            message: Log message.
        """
        try:
            self._stderr.write(f"[MCP] {message}\n")
            self._stderr.flush()
        except (OSError, ValueError):
            pass  # stderr is best effort

    def close(self) -> None:
        """Close stdin/stdout unless they are the process streams."""
        if self._closed:
            return
        self._closed = True
        for stream in (self._stdin, self._stdout):
            if stream not in (sys.stdin, sys.stdout, sys.__stdin__, sys.__stdout__):
                stream.close()

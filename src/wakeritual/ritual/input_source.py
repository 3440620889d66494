"""
Operator input for the interactive ritual.

The ritual reads through an InputSource so interactivity can be checked as
a capability, and tests can script both live and piped input.
"""

import sys
from abc import ABC, abstractmethod
from typing import Optional, TextIO


class InputSource(ABC):
    """A source of single lines of operator input."""

    @abstractmethod
    def is_interactive(self) -> bool:
        """Whether the source is a live terminal."""

    @abstractmethod
    def read_line(self, prompt: str = "") -> str:
        """
        Block until one line is available and return it without the newline.

        Raises:
            KeyboardInterrupt: the operator interrupted the wait
            EOFError: the input stream closed
        """


class TerminalInputSource(InputSource):
    """Reads from a text stream, standard input by default."""

    def __init__(self, stream: Optional[TextIO] = None, output: Optional[TextIO] = None):
        self.stream = stream or sys.stdin
        self.output = output or sys.stdout

    def is_interactive(self) -> bool:
        isatty = getattr(self.stream, "isatty", None)
        return bool(isatty and isatty())

    def read_line(self, prompt: str = "") -> str:
        if prompt:
            self.output.write(prompt)
            self.output.flush()
        line = self.stream.readline()
        if line == "":
            raise EOFError("input stream closed")
        return line.rstrip("\r\n")

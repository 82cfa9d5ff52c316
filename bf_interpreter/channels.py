"""
I/O channels used by the engine.

Program input (','), program output ('.') and operator keypresses
(step-through and breakpoint pauses) are three separate channels, so the
engine can run under a test harness without a terminal.

Console implementations talk to the real process streams. The buffered
variants hold everything in memory for inspection:

    BufferedInput("A")   → ',' reads 'A', then EOF
    CapturedOutput()     → '.' output collected, read back with getvalue()
    ScriptedKeypress()   → every wait() returns at once and is counted
"""

import sys
from collections import deque
from typing import List, Optional, TextIO


class ConsoleInput:
    """Reads program input one character at a time (blocking)."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdin

    def read_char(self) -> Optional[str]:
        """Next character, or None at end of input."""
        ch = self.stream.read(1)
        return ch or None


class ConsoleOutput:
    """Writes program output, flushing after every write (interactive)."""

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdout

    def write(self, text: str):
        self.stream.write(text)
        self.stream.flush()


class ConsoleKeypress:
    """Blocks until the operator presses a key. The key is not echoed.

    When stdin is not a terminal (piped program input, CI) there is no
    operator to wait for, so wait() returns immediately instead of
    consuming program input.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        return self._stream or sys.stdin

    @property
    def interactive(self) -> bool:
        isatty = getattr(self.stream, 'isatty', None)
        return bool(isatty and isatty())

    def wait(self) -> Optional[str]:
        if not self.interactive:
            return None
        ch = self._getch()
        if ch == '\x03':
            raise KeyboardInterrupt
        return ch

    def _getch(self) -> str:
        if sys.platform == 'win32':
            import msvcrt
            return msvcrt.getwch()

        import termios
        import tty
        fd = self.stream.fileno()
        old_settings = termios.tcgetattr(fd)
        try:
            tty.setraw(fd)
            return self.stream.read(1)
        finally:
            termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


# ══════════════════════════════════════════════
# In-memory channels
# ══════════════════════════════════════════════

class BufferedInput:
    """Program input from a fixed string. Returns None once exhausted."""

    def __init__(self, text: str = ""):
        self._queue: deque = deque(text)
        self.reads = 0

    def feed(self, text: str):
        """Append more input, as if the user typed it."""
        self._queue.extend(text)

    def read_char(self) -> Optional[str]:
        self.reads += 1
        if not self._queue:
            return None
        return self._queue.popleft()

    @property
    def remaining(self) -> int:
        return len(self._queue)


class CapturedOutput:
    """Collects program output in memory."""

    def __init__(self):
        self._chunks: List[str] = []

    def write(self, text: str):
        self._chunks.append(text)

    def getvalue(self) -> str:
        return ''.join(self._chunks)


class ScriptedKeypress:
    """Keypress channel that never blocks. Records how often it was asked."""

    def __init__(self, keys: str = ""):
        self._keys: deque = deque(keys)
        self.waits = 0

    def wait(self) -> Optional[str]:
        self.waits += 1
        return self._keys.popleft() if self._keys else None

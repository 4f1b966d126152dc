import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple

from .errors import FormatError, TruncatedInputError, UnknownStateError

# This module intentionally has no external dependencies so it can be used in tests
# without requiring the MCP runtime libraries.

logger = logging.getLogger(__name__)

# "pool-1-thread-3" - Thread t@15
THREAD_HEADER_RE = re.compile(r'"(?P<name>[a-zA-Z0-9_\-.() \[\]]+)" - Thread (?P<id>t@[a-zA-Z0-9_-]+)')
#    java.lang.Thread.State: TIMED_WAITING
THREAD_STATE_RE = re.compile(r'java\.lang\.Thread\.State: (?P<state>[_A-Z]+)')


class ThreadState(str, Enum):
    RUNNABLE = "RUNNABLE"
    WAITING = "WAITING"
    TIMED_WAITING = "TIMED_WAITING"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class DumpHeader:
    timestamp: str
    description: str


@dataclass(frozen=True)
class ThreadRecord:
    name: str
    id: str
    state: ThreadState
    stack_trace: str


@dataclass(frozen=True)
class DumpDocument:
    header: DumpHeader
    threads: Tuple[ThreadRecord, ...]


def parse_thread_header(line: str) -> Tuple[str, str]:
    """Extract ``(name, id)`` from a ``"<name>" - Thread t@<token>`` line."""
    m = THREAD_HEADER_RE.search(line)
    if m is None:
        raise FormatError(f"Unknown format: {{{line}}}", line=line)
    name = m.group("name")
    thread_id = m.group("id")
    if name is None:
        raise FormatError(f"Thread name can not be null {{{line}}}", line=line)
    if thread_id is None:
        raise FormatError(f"Thread id can not be null {{{line}}}", line=line)
    return name, thread_id


def parse_thread_state(line: str) -> str:
    """Extract the raw state token; validation against ThreadState is the caller's job."""
    m = THREAD_STATE_RE.search(line)
    if m is None or m.group("state") is None:
        raise FormatError(f"Unknown format: {{{line}}}", line=line)
    return m.group("state")


def _to_state(token: str, line: str, line_number: int) -> ThreadState:
    try:
        return ThreadState(token)
    except ValueError:
        raise UnknownStateError(token, line=line, line_number=line_number) from None


class _LineCursor:
    def __init__(self, lines: Sequence[str]):
        self.lines = lines
        self.pos = 0
        # index just past the last non-blank line
        self.content_end = len(lines)
        while self.content_end > 0 and not lines[self.content_end - 1].strip():
            self.content_end -= 1

    def exhausted(self) -> bool:
        return self.pos >= len(self.lines)

    def peek(self) -> Optional[str]:
        if self.exhausted():
            return None
        return self.lines[self.pos]

    def take(self, what: str) -> str:
        if self.exhausted():
            last = self.lines[-1] if self.lines else None
            raise TruncatedInputError(
                f"Unexpected end of input, expected {what}", line=last, line_number=len(self.lines)
            )
        line = self.lines[self.pos]
        self.pos += 1
        return line

    def only_blank_left(self) -> bool:
        return self.pos >= self.content_end


def _read_thread(cursor: _LineCursor) -> Optional[ThreadRecord]:
    header_line = cursor.take("thread header line")
    header_no = cursor.pos
    try:
        name, thread_id = parse_thread_header(header_line)
    except FormatError as e:
        raise FormatError(str(e), line=header_line, line_number=header_no) from None

    state_line = cursor.take("thread state line")
    state_no = cursor.pos
    try:
        token = parse_thread_state(state_line)
    except FormatError as e:
        raise FormatError(str(e), line=state_line, line_number=state_no) from None
    state = _to_state(token, state_line, state_no)

    frames: List[str] = []
    while True:
        frame = cursor.take(f"end of stack trace for thread {thread_id}").lstrip()
        if not frame:
            break
        frames.append(frame)

    # Locked ownable synchronizers: skipped, lock ownership is not modelled
    while not cursor.exhausted() and cursor.peek().strip():
        cursor.pos += 1

    if not frames:
        logger.debug("Skipping thread %s (%s): empty stack trace", thread_id, name)
        return None
    return ThreadRecord(name=name, id=thread_id, state=state, stack_trace="\n".join(frames))


def read_dump(lines: Sequence[str]) -> DumpDocument:
    """Split a thread dump into its two header lines and its thread blocks.

    Each block is a separator line, a ``"<name>" - Thread t@<id>`` line, a
    ``java.lang.Thread.State:`` line, the stack frames up to the next blank
    line and an optional run of lock lines. Threads without stack frames are
    dropped. Any malformed or truncated block raises a DumpParseError.
    """
    if len(lines) < 2:
        raise TruncatedInputError(
            f"Thread dump needs at least 2 header lines, got {len(lines)}",
            line=lines[0] if lines else None,
            line_number=len(lines) or None,
        )
    header = DumpHeader(timestamp=lines[0], description=lines[1])

    cursor = _LineCursor(lines)
    cursor.pos = 2
    threads: List[ThreadRecord] = []
    while not cursor.exhausted():
        cursor.pos += 1  # separator
        if cursor.only_blank_left():
            break
        record = _read_thread(cursor)
        if record is not None:
            threads.append(record)

    logger.info("Parsed %d threads", len(threads))
    return DumpDocument(header=header, threads=tuple(threads))


def read_dump_file(path: str, encoding: str = "utf-8") -> DumpDocument:
    with open(path, "r", encoding=encoding, errors="replace") as f:
        text = f.read()
    return read_dump(text.splitlines())

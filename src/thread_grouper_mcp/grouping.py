import re
import textwrap
from typing import Dict, Iterable, Iterator, List

from .parser import ThreadRecord

# Monitor and lock addresses change on every run; replace them so that threads
# blocked the same way produce the same key.
LOCK_REFERENCE_PATTERNS = (
    (re.compile(r'waiting on <[0-9a-zA-Z]+>'), 'waiting on <X>'),
    (re.compile(r'locked <[0-9a-zA-Z]+>'), 'locked <X>'),
    (re.compile(r'wait for <[0-9a-zA-Z]+>'), 'wait for <X>'),
)


def _trim_indent(text: str) -> str:
    lines = text.split("\n")
    start, end = 0, len(lines)
    while start < end and not lines[start].strip():
        start += 1
    while end > start and not lines[end - 1].strip():
        end -= 1
    lines = lines[start:end]
    return textwrap.dedent("\n".join(lines))


def normalize_stack(stack_trace: str) -> str:
    for pattern, placeholder in LOCK_REFERENCE_PATTERNS:
        stack_trace = pattern.sub(placeholder, stack_trace)
    return _trim_indent(stack_trace)


class ThreadGroup:
    """Threads sharing one normalized stack trace.

    Members are deduplicated by value and kept in first-seen order.
    """

    def __init__(self, key: str):
        self.key = key
        self._members: Dict[ThreadRecord, None] = {}

    def add(self, record: ThreadRecord) -> None:
        self._members[record] = None

    @property
    def members(self) -> List[ThreadRecord]:
        return list(self._members)

    def __len__(self) -> int:
        return len(self._members)

    def __iter__(self) -> Iterator[ThreadRecord]:
        return iter(self._members)

    def __contains__(self, record: object) -> bool:
        return record in self._members

    def __repr__(self) -> str:
        first_frame = self.key.split("\n", 1)[0]
        return f"ThreadGroup(size={len(self)}, key={first_frame!r})"


GroupIndex = Dict[str, ThreadGroup]


def group_threads(threads: Iterable[ThreadRecord]) -> GroupIndex:
    index: GroupIndex = {}
    for record in threads:
        key = normalize_stack(record.stack_trace)
        group = index.get(key)
        if group is None:
            group = index[key] = ThreadGroup(key)
        group.add(record)
    return index

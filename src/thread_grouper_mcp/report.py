from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .grouping import GroupIndex, ThreadGroup
from .parser import DumpDocument, ThreadRecord, ThreadState

GROUP_BANNER = "================= Total threads : {size} ================="


@dataclass(frozen=True)
class GroupFilter:
    max_size: Optional[int] = None
    min_size: Optional[int] = None
    keywords: Tuple[str, ...] = ()

    def accepts(self, group: ThreadGroup) -> bool:
        size = len(group)
        if self.max_size is not None and size > self.max_size:
            return False
        if self.min_size is not None and size < self.min_size:
            return False
        if self.keywords and not any(k in group.key for k in self.keywords):
            return False
        return True


def parse_keywords(raw: Optional[str]) -> Tuple[str, ...]:
    """Split a comma separated keyword list.

    Empty items are kept; an empty keyword matches every stack.
    """
    if raw is None:
        return ()
    return tuple(k.strip() for k in raw.split(","))


def filter_groups(index: GroupIndex, group_filter: Optional[GroupFilter] = None) -> Iterator[ThreadGroup]:
    group_filter = group_filter or GroupFilter()
    for group in index.values():
        if group_filter.accepts(group):
            yield group


def format_group(group: ThreadGroup) -> List[str]:
    lines = [GROUP_BANNER.format(size=len(group)), group.key, ""]
    lines.extend(f"Thread {t.id} - {t.name} : {t.state}" for t in group)
    lines.append("")
    return lines


def format_groups(groups: Iterable[ThreadGroup]) -> str:
    out: List[str] = []
    for group in groups:
        out.extend(format_group(group))
    return "\n".join(out) + "\n" if out else ""


def state_counts(threads: Sequence[ThreadRecord]) -> Dict[str, int]:
    counts: Dict[str, int] = {s.value: 0 for s in ThreadState}
    for t in threads:
        counts[t.state.value] += 1
    return counts


def summarize(document: DumpDocument, index: GroupIndex) -> str:
    counts = state_counts(document.threads)
    states = ", ".join(f"{k}={v}" for k, v in counts.items() if v)
    return (
        f"Parsed {len(document.threads)} threads in {len(index)} groups. "
        f"States: {states or 'none'}"
    )

import json
import logging
import os
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Union

from .config import get_settings
from .errors import DumpParseError
from .grouping import GroupIndex, group_threads
from .parser import DumpDocument, read_dump_file
from .report import GroupFilter, filter_groups, parse_keywords, state_counts, summarize

logger = logging.getLogger(__name__)


@dataclass
class Result:
    ok: bool
    text: Optional[str] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @staticmethod
    def ok_json(payload: Dict) -> "Result":
        return Result(ok=True, text=json.dumps(payload))

    @staticmethod
    def err(code: str, message: str) -> "Result":
        return Result(ok=False, error_code=code, error_message=message)

    def describe(self) -> str:
        """Text shown to the tool caller: the JSON payload, or "<CODE>: <message>"."""
        if self.ok:
            return self.text or ""
        return f"{self.error_code}: {self.error_message}"


def _check_path(path: object, arg: str) -> Optional[Result]:
    if not isinstance(path, str) or not path:
        return Result.err("INVALID_PARAMS", f"'{arg}' must be a non-empty string")
    if not os.path.exists(path):
        return Result.err("INVALID_PARAMS", f"File not found: {path}")
    if os.path.isdir(path):
        return Result.err("INVALID_PARAMS", f"Path is a directory: {path}")
    limit = get_settings().max_file_bytes
    if os.path.getsize(path) > limit:
        return Result.err("INTERNAL_ERROR", f"File too large (>{limit} bytes): {path}")
    return None


def _check_size(value: object, arg: str) -> Optional[Result]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return Result.err("INVALID_PARAMS", f"'{arg}' must be a non-negative integer")
    return None


def _load(path: str) -> DumpDocument:
    return read_dump_file(path, encoding=get_settings().encoding)


def _group_payload(index: GroupIndex, group_filter: GroupFilter) -> List[Dict[str, object]]:
    return [
        {
            "size": len(group),
            "stack": group.key,
            "threads": [{"id": t.id, "name": t.name, "state": t.state.value} for t in group],
        }
        for group in filter_groups(index, group_filter)
    ]


# Tool logic behind group_thread_dump in server.py, without MCP types

def group_tool_call(
    path: str,
    max_size: Optional[int] = None,
    min_size: Optional[int] = None,
    keywords: Union[str, Sequence[str], None] = None,
) -> Result:
    bad = _check_path(path, "path") or _check_size(max_size, "max_size") or _check_size(min_size, "min_size")
    if bad:
        return bad
    if isinstance(keywords, str):
        words = parse_keywords(keywords)
    elif keywords is None:
        words = ()
    elif isinstance(keywords, (list, tuple)) and all(isinstance(k, str) for k in keywords):
        words = tuple(keywords)
    else:
        return Result.err("INVALID_PARAMS", "'keywords' must be a string or a list of strings")

    try:
        document = _load(path)
        index = group_threads(document.threads)
        group_filter = GroupFilter(max_size=max_size, min_size=min_size, keywords=words)
        payload = {
            "summary": summarize(document, index),
            "counts": state_counts(document.threads),
            "groups": _group_payload(index, group_filter),
        }
        return Result.ok_json(payload)
    except DumpParseError as e:
        logger.warning("Failed to parse %s: %s", path, e)
        return Result.err("PARSE_ERROR", str(e))
    except Exception as e:
        logger.error("Unexpected error grouping %s", path, exc_info=True)
        return Result.err("INTERNAL_ERROR", f"Exception: {e}")


# Tool logic behind compare_thread_dumps in server.py, without MCP types

def compare_tool_call(path_a: str, path_b: str, diff_mode: str = "full") -> Result:
    bad = _check_path(path_a, "path_a") or _check_path(path_b, "path_b")
    if bad:
        return bad
    if diff_mode not in ("summary", "states", "full"):
        return Result.err("INVALID_PARAMS", "'diff_mode' must be one of: summary|states|full")

    try:
        a = _load(path_a)
        b = _load(path_b)
        groups_a = group_threads(a.threads)
        groups_b = group_threads(b.threads)

        counts_a = state_counts(a.threads)
        counts_b = state_counts(b.threads)
        deltas = {s: counts_b[s] - counts_a[s] for s in counts_a}

        group_deltas = []
        for key in list(groups_a) + [k for k in groups_b if k not in groups_a]:
            size_a = len(groups_a[key]) if key in groups_a else 0
            size_b = len(groups_b[key]) if key in groups_b else 0
            group_deltas.append({"stack": key, "size_a": size_a, "size_b": size_b, "delta": size_b - size_a})

        only_a = sum(1 for k in groups_a if k not in groups_b)
        only_b = sum(1 for k in groups_b if k not in groups_a)
        notes = f"{only_a} groups only in A, {only_b} groups only in B"

        changes = ", ".join(f"{s}={d:+d}" for s, d in deltas.items() if d != 0) or "no changes"
        summary = f"State deltas: {changes}; {notes}"

        payload: Dict[str, object] = {
            "summary": summary,
            "counts_a": counts_a,
            "counts_b": counts_b,
            "deltas": deltas,
            "groups": group_deltas,
            "notes": notes,
        }

        if diff_mode == "summary":
            payload = {"summary": summary, "notes": notes}
        elif diff_mode == "states":
            payload = {"summary": summary, "counts_a": counts_a, "counts_b": counts_b, "deltas": deltas}

        return Result.ok_json(payload)
    except DumpParseError as e:
        logger.warning("Failed to parse dump: %s", e)
        return Result.err("PARSE_ERROR", str(e))
    except Exception as e:
        logger.error("Unexpected error comparing %s and %s", path_a, path_b, exc_info=True)
        return Result.err("INTERNAL_ERROR", f"Exception: {e}")

import pytest

from conftest import dump_lines, thread_block
from thread_grouper_mcp.grouping import group_threads
from thread_grouper_mcp.parser import read_dump, read_dump_file
from thread_grouper_mcp.report import (
    GroupFilter,
    filter_groups,
    format_groups,
    parse_keywords,
    state_counts,
    summarize,
)


@pytest.fixture
def sample_index(sample_dump_path):
    return group_threads(read_dump_file(str(sample_dump_path)).threads)


def _sizes(index, group_filter):
    return [len(g) for g in filter_groups(index, group_filter)]


def test_no_filter_keeps_every_group(sample_index):
    assert _sizes(sample_index, None) == [2, 1, 1]
    assert _sizes(sample_index, GroupFilter()) == [2, 1, 1]


def test_size_filters(sample_index):
    assert _sizes(sample_index, GroupFilter(max_size=1)) == [1, 1]
    assert _sizes(sample_index, GroupFilter(min_size=2)) == [2]
    assert _sizes(sample_index, GroupFilter(min_size=1, max_size=2)) == [2, 1, 1]


def test_max_below_min_emits_nothing(sample_index):
    assert _sizes(sample_index, GroupFilter(max_size=1, min_size=2)) == []


def test_keyword_filter_matches_normalized_key(sample_index):
    # raw lock ids are gone from the key
    assert _sizes(sample_index, GroupFilter(keywords=("6d06d69c",))) == []
    assert _sizes(sample_index, GroupFilter(keywords=("waiting on <X>",))) == [2]


def test_keyword_filter_is_case_sensitive(sample_index):
    assert _sizes(sample_index, GroupFilter(keywords=("filEInputStream",))) == []
    assert _sizes(sample_index, GroupFilter(keywords=("FileInputStream",))) == [1]


def test_keywords_are_or_but_filters_are_and(sample_index):
    both = GroupFilter(keywords=("FileInputStream", "Unsafe.park"))
    assert _sizes(sample_index, both) == [1, 1]
    assert _sizes(sample_index, GroupFilter(keywords=("Queue.take", "Unsafe.park"), min_size=2)) == [2]


def test_parse_keywords():
    assert parse_keywords(None) == ()
    assert parse_keywords("Queue.take, Unsafe.park") == ("Queue.take", "Unsafe.park")
    assert parse_keywords("Queue.take,") == ("Queue.take", "")


def test_empty_keyword_matches_every_group(sample_index):
    assert _sizes(sample_index, GroupFilter(keywords=parse_keywords("Unsafe.park,"))) == [2, 1, 1]
    assert _sizes(sample_index, GroupFilter(keywords=parse_keywords(""))) == [2, 1, 1]


def test_format_groups_layout():
    dump = read_dump(dump_lines(
        thread_block("worker-1", "t@11", "WAITING", ["at a.B.c(B.java:1)", "- locked <abc123> (a X)"]),
        thread_block("worker-2", "t@12", "TIMED_WAITING", ["at a.B.c(B.java:1)", "- locked <def456> (a X)"]),
    ))
    text = format_groups(filter_groups(group_threads(dump.threads)))
    assert text == (
        "================= Total threads : 2 =================\n"
        "at a.B.c(B.java:1)\n"
        "- locked <X> (a X)\n"
        "\n"
        "Thread t@11 - worker-1 : WAITING\n"
        "Thread t@12 - worker-2 : TIMED_WAITING\n"
        "\n"
    )


def test_format_groups_nothing_to_print(sample_index):
    assert format_groups(filter_groups(sample_index, GroupFilter(max_size=0))) == ""


def test_state_counts_and_summary(sample_dump_path, sample_index):
    dump = read_dump_file(str(sample_dump_path))
    assert state_counts(dump.threads) == {"RUNNABLE": 1, "WAITING": 2, "TIMED_WAITING": 1}
    assert summarize(dump, sample_index) == (
        "Parsed 4 threads in 3 groups. States: RUNNABLE=1, WAITING=2, TIMED_WAITING=1"
    )

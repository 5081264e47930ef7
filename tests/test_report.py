from __future__ import annotations

import pytest

from diskusage.errors import InvalidArgument
from diskusage.models import AggregateStat
from diskusage.report import process_results, share, totals, validate_report_args


def _stats(**sizes):
    return {k: AggregateStat(group=k, size=v, files=1) for k, v in sizes.items()}


def _groups(rows):
    return [r.group for r in rows]


@pytest.fixture
def abc():
    return _stats(A=300, B=100, C=200)


def test_largest_first_truncated(abc):
    assert _groups(process_results(abc, "size", 2)) == ["A", "C"]


def test_reverse_flips_truncated_rows(abc):
    assert _groups(process_results(abc, "size", 2, reverse=True)) == ["C", "A"]


def test_reverse_without_truncation(abc):
    assert _groups(process_results(abc, "size", None, reverse=True)) == ["B", "C", "A"]


def test_count_zero_is_empty(abc):
    assert process_results(abc, "size", 0) == []


def test_ties_come_out_in_reverse_mapping_order():
    stats = _stats(X=10, Y=10, Z=10)
    assert _groups(process_results(stats, "size", 10)) == ["Z", "Y", "X"]


def test_sort_by_files_and_directories():
    stats = {
        "a": AggregateStat(group="a", files=1, directories=9),
        "b": AggregateStat(group="b", files=5, directories=0),
    }
    assert _groups(process_results(stats, "files")) == ["b", "a"]
    assert _groups(process_results(stats, "directories")) == ["a", "b"]


def test_filter_applies_before_truncation():
    stats = {
        "big.iso": AggregateStat(group="big.iso", size=900, files=1),
        "src": AggregateStat(group="src", size=500, files=3, directories=2, is_directory=True),
        "lib": AggregateStat(group="lib", size=100, files=1, directories=1, is_directory=True),
        "a.txt": AggregateStat(group="a.txt", size=50, files=1),
    }
    assert _groups(process_results(stats, "size", 2, only="dirs")) == ["src", "lib"]
    assert _groups(process_results(stats, "size", 1, only="files")) == ["big.iso"]
    assert _groups(process_results(stats, "size", 1, only="files", reverse=True)) == ["big.iso"]


def test_input_mapping_is_untouched(abc):
    process_results(abc, "size", 1, reverse=True)
    assert list(abc) == ["A", "B", "C"]
    assert abc["B"].size == 100


@pytest.mark.parametrize("sort,count,only", [
    ("name", 5, None),
    ("size", -2, None),
    ("size", 5, "symlinks"),
])
def test_invalid_report_args(sort, count, only):
    with pytest.raises(InvalidArgument):
        validate_report_args(sort, count, only)


def test_invalid_sort_fails_before_sorting():
    with pytest.raises(InvalidArgument, match="possible values are 'files, size, directories'"):
        process_results({}, "owner")


def test_totals_cover_whole_scan(abc):
    assert totals(abc, "size") == 600
    assert totals(abc, "files") == 3
    assert len(process_results(abc, "size", 1)) == 1
    assert totals(abc, "size") == 600


def test_totals_of_empty_scan():
    assert totals({}, "size") == 0
    assert totals({}, "directories") == 0


def test_totals_rejects_unknown_field(abc):
    with pytest.raises(InvalidArgument):
        totals(abc, "group")


def test_share(abc):
    assert share(abc["A"], 600) == pytest.approx(50.0)
    assert share(abc["A"], 0) == 0.0
    assert share(abc["A"], 3, "files") == pytest.approx(100 / 3)

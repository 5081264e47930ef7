from __future__ import annotations

import os
from datetime import datetime
from types import SimpleNamespace

import pytest

from diskusage.grouping import birth_time, get_group, is_directory_group
from diskusage.models import INVALID_DATE, NO_EXTENSION, ROOT_GROUP

TS = 1_600_000_000.0


def _st(**kw):
    base = {"st_mtime": TS, "st_ctime": TS + 86400 * 3, "st_size": 0}
    base.update(kw)
    return SimpleNamespace(**base)


def _day(ts):
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d")


def test_tld_is_first_segment():
    segs = ("a", "b", "c.txt")
    assert get_group("tld", os.path.join("root", *segs), _st(), segs) == "a"


@pytest.mark.parametrize("name,expected", [
    ("c.txt", ".txt"),
    ("archive.tar.gz", ".gz"),
    ("README", NO_EXTENSION),
    (".bashrc", NO_EXTENSION),
    ("Photo.JPG", ".JPG"),
])
def test_extension(name, expected):
    assert get_group("extension", os.path.join("root", "a", name), _st(), ("a", name)) == expected


def test_path_joins_all_but_last_segment():
    segs = ("a", "b", "c.txt")
    assert get_group("path", "x", _st(), segs) == os.path.join("a", "b")
    assert get_group("directory", "x", _st(), segs) == os.path.join("a", "b")


def test_path_of_entry_directly_below_root_is_root():
    assert get_group("path", "x", _st(), ("c.txt",)) == ROOT_GROUP


def test_path_does_not_mutate_segments():
    segs = ["a", "b", "c.txt"]
    get_group("path", "x", _st(), segs)
    assert segs == ["a", "b", "c.txt"]


def test_modified_formats_calendar_day():
    assert get_group("modified", "x", _st(), ("f",)) == _day(TS)


def test_created_prefers_birthtime():
    st = _st(st_birthtime=TS - 86400 * 10)
    assert birth_time(st) == TS - 86400 * 10
    assert get_group("created", "x", st, ("f",)) == _day(TS - 86400 * 10)


def test_created_falls_back_to_ctime():
    st = _st()
    assert get_group("created", "x", st, ("f",)) == _day(TS + 86400 * 3)


@pytest.mark.parametrize("ts", [1e14, -1e14, float("inf")])
def test_out_of_range_times_get_invalid_date(ts):
    assert get_group("modified", "x", _st(st_mtime=ts), ("f",)) == INVALID_DATE
    assert get_group("created", "x", _st(st_birthtime=ts), ("f",)) == INVALID_DATE
    assert get_group("created", "x", _st(st_ctime=ts), ("f",)) == INVALID_DATE


def test_is_directory_group():
    assert is_directory_group("tld", ("a",), True) is True
    assert is_directory_group("tld", ("a.txt",), False) is False
    assert is_directory_group("path", ("a", "b.txt"), False) is True
    assert is_directory_group("directory", ("b.txt",), False) is True
    assert is_directory_group("extension", ("a",), True) is False
    assert is_directory_group("modified", ("a",), True) is False

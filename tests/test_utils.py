from __future__ import annotations

import pytest

from diskusage.utils import format_bytes, format_count, truncate_path


@pytest.mark.parametrize("num,expected", [
    (0, "0 B"),
    (512, "512 B"),
    (1023, "1023 B"),
    (1024, "1.00 KB"),
    (1536, "1.50 KB"),
    (5 * 1024 ** 3, "5.00 GB"),
    (3 * 1024 ** 6, "3072.00 PB"),
    (-5, "-5"),
])
def test_format_bytes(num, expected):
    assert format_bytes(num) == expected


def test_format_count():
    assert format_count(1234567) == "1,234,567"


def test_truncate_path_keeps_short_text():
    assert truncate_path("a/b", 60) == "a/b"


def test_truncate_path_keeps_tail():
    text = "x" * 10 + "/tail/end"
    out = truncate_path(text, 9)
    assert out == ".../tail/end"

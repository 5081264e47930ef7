"""Sorting, filtering, truncation and totals over a finished scan.

Nothing here touches the filesystem; every function works on the mapping
returned by ``scanner.scan``.
"""
from __future__ import annotations
from typing import List, Mapping, Optional

from .errors import InvalidArgument
from .models import AggregateStat, DEFAULT_COUNT, DEFAULT_SORT, ONLY_FILTERS, SORT_FIELDS


def _check_field(field: str):
    if field not in SORT_FIELDS:
        raise InvalidArgument.choice("sort field", field, SORT_FIELDS)


def validate_report_args(sort: str, count: Optional[int], only: Optional[str]):
    _check_field(sort)
    if count is not None and count < 0:
        raise InvalidArgument(f"Invalid count '{count}', must be zero or more",
                              details={"argument": "count"})
    if only is not None and only not in ONLY_FILTERS:
        raise InvalidArgument.choice("filter", only, ONLY_FILTERS)


def _keep(stat: AggregateStat, only: Optional[str]) -> bool:
    if only == "dirs":
        return stat.is_directory
    if only == "files":
        return not stat.is_directory
    return True


def process_results(aggregates: Mapping[str, AggregateStat],
                    sort: str = DEFAULT_SORT,
                    count: Optional[int] = DEFAULT_COUNT,
                    reverse: bool = False,
                    only: Optional[str] = None) -> List[AggregateStat]:
    """Return the rows to display, largest ``sort`` value first.

    The order of steps matters: ascending stable sort, reverse, filter,
    take ``count``, then reverse once more when ``reverse`` is set. Ties
    therefore come out in the opposite of their mapping order, and
    ``reverse`` flips the already truncated rows rather than picking the
    smallest ones.
    """
    validate_report_args(sort, count, only)
    rows = sorted(aggregates.values(), key=lambda s: s.get(sort))
    rows.reverse()
    rows = [s for s in rows if _keep(s, only)]
    if count is not None:
        rows = rows[:count]
    if reverse:
        rows.reverse()
    return rows


def totals(aggregates: Mapping[str, AggregateStat], field: str) -> int:
    _check_field(field)
    return sum(s.get(field) for s in aggregates.values())


def share(stat: AggregateStat, total: int, field: str = "size") -> float:
    if total <= 0:
        return 0.0
    return stat.get(field) * 100.0 / total

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Tuple

SORT_FIELDS: Tuple[str, ...] = ("files", "size", "directories")
GROUP_FIELDS: Tuple[str, ...] = ("tld", "extension", "path", "directory", "modified", "created")
# Modes whose groups can stand for a directory.
FOLDER_GROUPS: Tuple[str, ...] = ("tld", "path", "directory")
ONLY_FILTERS: Tuple[str, ...] = ("dirs", "files")

NO_EXTENSION = "<none>"
INVALID_DATE = "<invalid date>"
ROOT_GROUP = "."

DEFAULT_GROUP = "tld"
DEFAULT_SORT = "size"
DEFAULT_COUNT = 15


@dataclass(frozen=True)
class AggregateStat:
    """Totals for one group. Frozen: the scanner replaces a record on every update."""

    group: str
    size: int = 0
    files: int = 0
    directories: int = 0
    is_directory: bool = False

    def get(self, field: str) -> int:
        return getattr(self, field)


@dataclass
class ScanOptions:
    path: str
    group: str = DEFAULT_GROUP
    sort: str = DEFAULT_SORT
    count: Optional[int] = DEFAULT_COUNT
    reverse: bool = False
    only: Optional[str] = None  # None | "dirs" | "files"

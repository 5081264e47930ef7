from __future__ import annotations
import os
from datetime import datetime
from typing import Sequence

from .models import FOLDER_GROUPS, INVALID_DATE, NO_EXTENSION, ROOT_GROUP


def _day(ts: float) -> str:
    try:
        return datetime.fromtimestamp(ts).strftime("%Y-%m-%d")
    except (ValueError, OverflowError, OSError):
        # timestamps outside what datetime or the platform clock can represent
        return INVALID_DATE


def birth_time(st: os.stat_result) -> float:
    # st_birthtime only exists on macOS/BSD and recent Windows builds.
    bt = getattr(st, "st_birthtime", None)
    if bt is None:
        return st.st_ctime
    return bt


def get_group(group: str, path: str, st: os.stat_result, segments: Sequence[str]) -> str:
    """Derive the group key of one entry.

    ``segments`` are the path components from the scan root down to the
    entry (never empty). The sequence is not modified.
    """
    if group == "extension":
        return os.path.splitext(os.path.basename(path))[1] or NO_EXTENSION
    if group == "modified":
        return _day(st.st_mtime)
    if group == "created":
        return _day(birth_time(st))
    if group in ("path", "directory"):
        if len(segments) == 1:
            return ROOT_GROUP
        return os.path.join(*segments[:-1])
    return segments[0]


def is_directory_group(group: str, segments: Sequence[str], is_dir: bool) -> bool:
    if group not in FOLDER_GROUPS:
        return False
    if group == "tld":
        # the key names the top-level entry itself only when it is that entry
        return is_dir and len(segments) == 1
    return True

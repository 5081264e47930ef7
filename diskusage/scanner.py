from __future__ import annotations
import logging
import os
import stat as statmod
import time
from dataclasses import replace
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from .errors import EntryAccessError, InvalidArgument
from .grouping import get_group, is_directory_group
from .models import (
    AggregateStat, DEFAULT_GROUP, GROUP_FIELDS, ONLY_FILTERS, SORT_FIELDS, ScanOptions
)

logger = logging.getLogger(__name__)

ProgressCb = Callable[[str, Mapping[str, AggregateStat]], None]  # (relative_path, read-only snapshot)
ErrorCb = Callable[[str], None]

# (path, segments below the root, DirEntry or None for the root)
_Item = Tuple[str, Tuple[str, ...], Optional[os.DirEntry]]


class CancelFlag:
    def __init__(self):
        self._cancel = False

    def cancel(self):
        self._cancel = True

    def __call__(self):
        return self._cancel


class ScanObserver:
    """Receives traversal events.

    ``progress`` is called before each directory is listed, ``error`` once per
    entry that could not be stat'd or listed. Both do nothing by default.
    """

    def progress(self, path: str, snapshot: Mapping[str, AggregateStat]) -> None:
        pass

    def error(self, message: str) -> None:
        pass


class _CallbackObserver(ScanObserver):
    def __init__(self, progress: Optional[ProgressCb], on_error: Optional[ErrorCb]):
        self._progress = progress
        self._on_error = on_error

    def progress(self, path, snapshot):
        if self._progress:
            self._progress(path, snapshot)

    def error(self, message):
        if self._on_error:
            self._on_error(message)


def validate_group(group: str):
    if group not in GROUP_FIELDS:
        raise InvalidArgument.choice("group field", group, GROUP_FIELDS)


def validate_args(options: ScanOptions):
    """Check every option without touching the filesystem."""
    if options.sort not in SORT_FIELDS:
        raise InvalidArgument.choice("sort field", options.sort, SORT_FIELDS)
    validate_group(options.group)
    if options.count is not None and options.count < 0:
        raise InvalidArgument(f"Invalid count '{options.count}', must be zero or more",
                              details={"argument": "count"})
    if options.only is not None and options.only not in ONLY_FILTERS:
        raise InvalidArgument.choice("filter", options.only, ONLY_FILTERS)
    if not options.path:
        raise InvalidArgument("Missing path to scan", details={"argument": "path"})


def _relative(path: str) -> str:
    try:
        return os.path.relpath(path)
    except ValueError:
        # different drive on Windows
        return os.path.abspath(path)


def _notify(hook, *args):
    try:
        hook(*args)
    except Exception:
        logger.warning("scan observer %s failed", getattr(hook, "__name__", hook), exc_info=True)


def scan(path: str,
         group: str = DEFAULT_GROUP,
         progress: Optional[ProgressCb] = None,
         on_error: Optional[ErrorCb] = None,
         cancel_flag: Optional[Callable[[], bool]] = None,
         observer: Optional[ScanObserver] = None) -> Dict[str, AggregateStat]:
    """Walk ``path`` depth-first and aggregate every entry beneath it by ``group``.

    Symbolic links are skipped and the root itself is never counted. Entries
    that cannot be stat'd or listed are reported to the error sink and skipped.
    When ``cancel_flag`` returns true at a directory boundary the walk stops
    and the mapping accumulated so far is returned.
    """
    validate_group(group)
    if not path:
        raise InvalidArgument("Missing path to scan", details={"argument": "path"})
    if not os.path.lexists(path):
        raise InvalidArgument(f"Path does not exist: {path}", details={"argument": "path"})
    if observer is not None and (progress or on_error):
        raise InvalidArgument("Pass either an observer or progress/on_error callbacks, not both")
    obs = observer or _CallbackObserver(progress, on_error)

    t0 = time.time()
    accumulator: Dict[str, AggregateStat] = {}
    snapshot = MappingProxyType(accumulator)
    errors = 0
    cancelled = False

    def report(entry_path: str, exc: OSError):
        nonlocal errors
        errors += 1
        err = EntryAccessError(entry_path, exc)
        logger.debug("skipping entry: %s", err)
        _notify(obs.error, err.message)

    logger.info("scanning %s (group=%s)", path, group)

    # Children are pushed in reverse so they pop in listing order, which keeps
    # the visiting order identical to a recursive pre-order walk.
    stack: List[_Item] = [(path, (), None)]
    while stack:
        cur, segments, entry = stack.pop()
        try:
            st = os.lstat(cur) if entry is None else entry.stat(follow_symlinks=False)
        except OSError as e:
            report(cur, e)
            continue

        mode = st.st_mode
        if statmod.S_ISLNK(mode):
            continue
        is_dir = statmod.S_ISDIR(mode)

        if segments:
            key = get_group(group, cur, st, segments)
            stats = accumulator.get(key)
            if stats is None:
                stats = AggregateStat(group=key, is_directory=is_directory_group(group, segments, is_dir))
            if is_dir:
                stats = replace(stats, directories=stats.directories + 1)
            else:
                stats = replace(stats, files=stats.files + 1, size=stats.size + st.st_size)
            accumulator[key] = stats

        if not is_dir:
            continue

        if cancel_flag and cancel_flag():
            cancelled = True
            break

        _notify(obs.progress, _relative(cur), snapshot)
        try:
            with os.scandir(cur) as it:
                children = [(e.path, segments + (e.name,), e) for e in it]
        except OSError as e:
            report(cur, e)
            continue
        stack.extend(reversed(children))

    logger.info("scan of %s %s in %.2fs: %d groups, %d errors",
                path, "cancelled" if cancelled else "finished",
                time.time() - t0, len(accumulator), errors)
    return accumulator

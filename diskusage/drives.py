from __future__ import annotations
import logging
import os
from typing import Dict, List, Optional

import psutil

logger = logging.getLogger(__name__)


def _usage(path: str) -> Optional[Dict]:
    try:
        u = psutil.disk_usage(path)
    except (OSError, psutil.Error) as e:
        logger.debug("disk_usage(%s) failed: %s", path, e)
        return None
    return {
        "total": int(u.total),
        "used": int(u.used),
        "free": int(u.free),
        "percent": float(u.percent),
    }


def list_drives() -> List[Dict]:
    drives = []
    seen = set()
    for p in psutil.disk_partitions(all=False):
        if not p.mountpoint:
            continue
        mp = os.path.abspath(p.mountpoint)
        if mp in seen:
            continue
        seen.add(mp)
        u = _usage(mp)
        if u is None:
            continue
        drives.append({"mountpoint": mp, "fstype": p.fstype, **u})
    drives.sort(key=lambda d: d["mountpoint"].lower())
    return drives


def usage_for(path: str) -> Optional[Dict]:
    """Capacity of the filesystem holding ``path``."""
    return _usage(os.path.abspath(path))


def estimate_total_bytes(path: str) -> int:
    # Used space of the containing filesystem: an upper bound for a folder,
    # exact for a mount point. Only drives the GUI progress bar.
    u = usage_for(path)
    return u["used"] if u else 0

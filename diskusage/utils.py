from __future__ import annotations

_UNITS = ("B", "KB", "MB", "GB", "TB", "PB")


def format_bytes(num: int) -> str:
    if num < 0:
        return str(num)
    if num < 1024:
        return f"{num} B"
    x = float(num)
    for u in _UNITS[1:]:
        x /= 1024.0
        if x < 1024.0 or u == _UNITS[-1]:
            break
    return f"{x:.2f} {u}"


def format_count(num: int) -> str:
    return f"{num:,}"


def truncate_path(text: str, length: int) -> str:
    """Keep the tail of a long path, which is the part that changes while scanning."""
    if len(text) <= length:
        return text
    return "..." + text[len(text) - length:]

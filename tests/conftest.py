from __future__ import annotations

import pytest
from pathlib import Path


def _write(path: Path, size: int):
    path.write_bytes(b"x" * size)


@pytest.fixture
def tree(tmp_path: Path) -> Path:
    """
    root/
        alpha/docs/guide.txt   100 bytes
        alpha/README            20 bytes
        beta/data.csv           50 bytes
        notes.txt                5 bytes
        empty/
    """
    root = tmp_path / "root"
    (root / "alpha" / "docs").mkdir(parents=True)
    (root / "beta").mkdir()
    (root / "empty").mkdir()
    _write(root / "alpha" / "docs" / "guide.txt", 100)
    _write(root / "alpha" / "README", 20)
    _write(root / "beta" / "data.csv", 50)
    _write(root / "notes.txt", 5)
    return root

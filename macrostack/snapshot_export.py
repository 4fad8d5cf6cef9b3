"""Atomic JSON export of the macro snapshot.

Writes through a tempfile → rename so the static file server never sees
a partially-written document, and the previous snapshot survives a
failed write untouched.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from typing import Any

from .common_types import MacroSnapshot
from .error_taxonomy import SnapshotWriteError

logger = logging.getLogger(__name__)


def _atomic_write_json(path: str, payload: dict[str, Any]) -> None:
    dest_dir = os.path.dirname(path) or "."
    os.makedirs(dest_dir, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=dest_dir, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2, allow_nan=False)
            f.write("\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        # Clean up temp file on any failure
        try:
            os.unlink(tmp)
        except OSError:
            pass
        raise


def export_snapshot(path: str, snapshot: MacroSnapshot) -> None:
    """Atomically replace *path* with the pretty-printed *snapshot*.

    Raises :class:`SnapshotWriteError` when the directory cannot be
    created, the document cannot be serialised or the disk write fails.
    """
    try:
        _atomic_write_json(path, snapshot.to_dict())
    except (OSError, ValueError, TypeError) as exc:
        raise SnapshotWriteError(f"cannot write {path}: {exc}", path=path) from exc
    logger.info("Snapshot written to %s", path)

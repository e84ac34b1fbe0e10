"""Persistent distinct identifier for analytics attribution."""

from __future__ import annotations

import hashlib
import os
import re
import tempfile
import threading
import uuid
from pathlib import Path
from typing import Optional

from eventlog.config import get_config_dir

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")

# Serialises first-use generation within this process; the hard-link publish
# in _store_distinct_id does the same across processes.
_distinct_id_lock = threading.Lock()


def get_container_dir(shared_container_identifier: Optional[str] = None) -> Path:
    """Get the directory holding persisted state for a shared container.

    Processes configured with the same shared container identifier resolve to
    the same directory and therefore share one distinct identifier. The
    directory name is the sanitised identifier plus a short hash of the raw
    one, so identifiers that sanitise alike still get separate directories.

    Args:
        shared_container_identifier: Grouping key, or None for the default

    Returns:
        ~/.eventlog/containers/<name>-<hash>, or ~/.eventlog when unset
    """
    base = get_config_dir()
    if not shared_container_identifier:
        return base

    name = _UNSAFE_CHARS.sub("_", shared_container_identifier).strip(".") or "_"
    digest = hashlib.sha256(shared_container_identifier.encode("utf-8")).hexdigest()[:8]
    container_dir = base / "containers" / f"{name}-{digest}"
    container_dir.mkdir(parents=True, exist_ok=True)
    return container_dir


def _read_distinct_id(path: Path) -> Optional[str]:
    try:
        distinct_id = path.read_text().strip()
    except FileNotFoundError:
        return None
    return distinct_id or None


def _store_distinct_id(path: Path) -> str:
    """Publish a new UUID unless another writer got there first.

    The UUID is written to a temp file and hard-linked into place, so the
    identifier file never exists without its content.
    """
    new_id = str(uuid.uuid4())
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=".distinct_id-")
    try:
        with os.fdopen(fd, "w") as f:
            f.write(new_id)
        try:
            os.link(tmp_name, path)
        except FileExistsError:
            stored = _read_distinct_id(path)
            if stored:
                return stored
            # Empty file left by an older, non-atomic write
            os.replace(tmp_name, path)
    finally:
        Path(tmp_name).unlink(missing_ok=True)

    return _read_distinct_id(path) or new_id


def get_distinct_id(shared_container_identifier: Optional[str] = None) -> str:
    """Get or create the distinct identifier for this installation.

    This is a random UUID, not tied to any personal information. When several
    threads or processes race on first use, one UUID is stored and every
    caller returns it.

    Args:
        shared_container_identifier: Grouping key, or None for the default

    Returns:
        UUID string identifying this installation
    """
    distinct_id_path = get_container_dir(shared_container_identifier) / "distinct_id"

    distinct_id = _read_distinct_id(distinct_id_path)
    if distinct_id:
        return distinct_id

    with _distinct_id_lock:
        distinct_id = _read_distinct_id(distinct_id_path)
        if distinct_id:
            return distinct_id
        return _store_distinct_id(distinct_id_path)


def reset_distinct_id(shared_container_identifier: Optional[str] = None) -> None:
    """Forget the stored identifier so the next read generates a new one."""
    distinct_id_path = get_container_dir(shared_container_identifier) / "distinct_id"
    with _distinct_id_lock:
        distinct_id_path.unlink(missing_ok=True)

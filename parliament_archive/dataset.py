"""The meeting-session dataset file."""

import json
import os
import tempfile
from typing import Iterable, List

from .errors import StateCorruption
from .models import SessionRecord, record_from_dict


def load_sessions(path: str) -> List[SessionRecord]:
    """Previous dataset, or an empty list if there is none yet.

    Its ids are reused, so an unreadable file is fatal rather than replaced.
    """
    if not os.path.exists(path):
        return []
    try:
        with open(path, encoding="utf-8") as f:
            return [record_from_dict(item) for item in json.load(f)]
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise StateCorruption(f"{path}: {e!r}") from e


def write_sessions(path: str, records: Iterable[SessionRecord]):
    """Replace the dataset file in one step; readers never see a partial file."""
    directory = os.path.dirname(os.path.abspath(path))
    os.makedirs(directory, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".sessions-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump([r.to_dict() for r in records], f, ensure_ascii=False, indent=2)
        os.replace(tmp_path, path)
    except BaseException:
        os.unlink(tmp_path)
        raise

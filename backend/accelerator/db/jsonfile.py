"""Flat JSON documents read and written wholesale."""
from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from accelerator.db.errors import PersistenceError

logger = logging.getLogger(__name__)


def read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.error("Error reading %s: %s", path, e)
        raise PersistenceError(f"Failed to read {path.name}: {e}") from e


def write_json(path: Path, data: Any) -> None:
    """Write via a sibling temp file and rename, so readers never see a partial document."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_name, path)
    except (OSError, TypeError, ValueError) as e:
        Path(tmp_name).unlink(missing_ok=True)
        logger.error("Error writing %s: %s", path, e)
        raise PersistenceError(f"Failed to write {path.name}: {e}") from e

"""JSON file helpers for artifacts that must survive between test runs.

Session snapshots and Playwright storage states are written with an atomic
temp-file-and-rename so an interrupted run never leaves a half-written file
that a later run would have to parse.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional, Union

__all__ = [
    'load_json',
    'save_json_atomic',
]


def save_json_atomic(data: Any, filepath: Union[str, Path]) -> None:
    """Write ``data`` as JSON to ``filepath`` using atomic write (temp file + rename).

    Any existing file is replaced wholesale; nothing is merged.

    Args:
        data: JSON-serializable data
        filepath: Destination path (parent directories are created)

    Raises:
        OSError: If the file cannot be written
        TypeError: If ``data`` is not JSON-serializable
    """
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)

    # Temp file in the same directory so os.replace stays on one filesystem
    temp_fd, temp_path = tempfile.mkstemp(
        suffix='.tmp',
        dir=path.parent,
        prefix=path.name + '.'
    )

    try:
        with os.fdopen(temp_fd, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
        os.replace(temp_path, str(path))
    except Exception:
        try:
            Path(temp_path).unlink(missing_ok=True)
        except OSError:
            pass
        raise

    logging.debug(f"Wrote {path}")


def load_json(filepath: Union[str, Path]) -> Optional[Any]:
    """Load JSON from ``filepath``.

    Args:
        filepath: Path to the JSON file

    Returns:
        Parsed data, or None if the file is missing or is not valid JSON
    """
    path = Path(filepath)
    if not path.exists():
        return None

    try:
        with open(path, 'r', encoding='utf-8') as f:
            return json.load(f)
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        logging.warning(f"Failed to load {filepath}: {e}")
        return None

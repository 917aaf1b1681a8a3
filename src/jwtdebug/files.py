"""Size-bounded reads of user-supplied files."""

import os
import stat
from pathlib import Path
from typing import Type, Union

from .constants import MAX_FILE_SIZE_BYTES
from .errors import JWTDebugError


def read_bounded_file(
    path: Union[str, Path],
    *,
    label: str,
    error: Type[JWTDebugError],
    max_size: int = MAX_FILE_SIZE_BYTES,
) -> bytes:
    """Read a regular file of at most ``max_size`` bytes.

    Args:
        path: File to read
        label: Human name used in messages (e.g. "key file")
        error: Exception class raised on any failure
        max_size: Size limit in bytes

    Returns:
        File contents

    Raises:
        error: If the file cannot be stat'ed, is not a regular file, is too
            large or cannot be read
    """
    try:
        info = os.stat(path)
    except OSError as e:
        raise error(f"failed to stat {label}: {e}") from e

    if not stat.S_ISREG(info.st_mode):
        raise error(f"{label} is not a regular file: {path}")
    if info.st_size > max_size:
        raise error(f"{label} too large: {info.st_size} bytes (max {max_size})")

    try:
        with open(path, "rb") as f:
            data = f.read(max_size + 1)
    except OSError as e:
        raise error(f"failed to read {label}: {e}") from e

    # The file may have grown between stat and read
    if len(data) > max_size:
        raise error(f"{label} too large: more than {max_size} bytes")
    return data

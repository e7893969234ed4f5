"""Load Docker-style ``*_FILE`` secrets into the process environment."""

from __future__ import annotations

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

_FILE_SUFFIX = "_FILE"


def load_secret_file_variables() -> None:
    """
    Expose secrets mounted as files through their plain variable names.

    ``DB_MONGO_URI_FILE=/run/secrets/mongo_uri`` makes the file contents
    available as ``DB_MONGO_URI`` unless that variable is already set.
    Unreadable files are logged and skipped.
    """

    for key, file_path in list(os.environ.items()):
        if not key.endswith(_FILE_SUFFIX) or not file_path:
            continue
        target_key = key[: -len(_FILE_SUFFIX)]
        if os.environ.get(target_key):
            continue
        try:
            os.environ[target_key] = Path(file_path).read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning(
                "env.secret_file.unreadable",
                extra={"key": key, "path": file_path, "error": str(exc)},
            )


load_secret_file_variables()

"""Read manifests from and write patched manifests back to disk.

Files are opened with ``newline=""`` so CRLF line endings survive the
round trip byte for byte.
"""

from __future__ import annotations

import logging

from common.errors import ManifestError
from manifest.patcher import apply_patch
from versioning.models import ManifestPatch

logger = logging.getLogger(__name__)


def read_manifest(path: str) -> str:
    """Return the text of path.

    Raises:
        ManifestError: If the file cannot be read or is not UTF-8.
    """
    try:
        with open(path, encoding="utf-8", newline="") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestError(path, f"cannot read file: {exc}") from exc


def write_patch(patch: ManifestPatch) -> bool:
    """Apply patch to its file. Returns True when the file was rewritten.

    Raises:
        ManifestError: If the file cannot be read or written.
    """
    if patch.is_empty:
        return False
    updated = apply_patch(read_manifest(patch.path), patch)
    try:
        with open(patch.path, "w", encoding="utf-8", newline="") as handle:
            handle.write(updated)
    except OSError as exc:
        raise ManifestError(patch.path, f"cannot write file: {exc}") from exc
    logger.info("Updated %s (%d edit(s))", patch.path, len(patch.edits))
    return True

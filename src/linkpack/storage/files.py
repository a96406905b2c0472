"""Reading import files and writing generated outputs to disk."""

from pathlib import Path

from linkpack.core.exceptions import StorageError
from linkpack.detectors.base import Payload


# Media types for declared extensions; anything else is routed by content.
_MEDIA_TYPES = {
    "json": "application/json",
    "csv": "text/csv",
    "tsv": "text/tab-separated-values",
    "txt": "text/plain",
    "html": "text/html",
    "htm": "text/html",
    "url": "application/internet-shortcut",
    "webloc": "application/x-plist",
}


def read_payload(path: Path) -> Payload:
    """Read a file as an import payload tagged with its name and media type.

    Raises:
        StorageError: If the file cannot be read
    """
    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise StorageError(f"Failed to read {path}: {e}") from e

    media_type = _MEDIA_TYPES.get(path.suffix.lower().lstrip("."), "")
    return Payload(text=text, name=path.name, media_type=media_type)


def save_output(path: Path, content: str | bytes) -> Path:
    """Write text or bytes to path, creating parent directories.

    Raises:
        StorageError: If the write fails
    """
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path
    except OSError as e:
        raise StorageError(f"Failed to write {path}: {e}") from e

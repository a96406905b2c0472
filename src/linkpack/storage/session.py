"""Session (batch) files.

A session file is a self-describing JSON object that captures everything
needed to rebuild a batch: the original lines (duplicates included), the
options, the output type and the archive base name. It is recognized only
when both the kind tag and the version match exactly.
"""

import json
from datetime import datetime, timezone
from typing import Any, Optional

from linkpack.core.constants import (
    ARCHIVE_DEFAULT_BASE_NAME,
    OutputType,
    SESSION_KIND,
    SESSION_READ_KINDS,
    SESSION_VERSION,
)
from linkpack.core.exceptions import SessionFormatError
from linkpack.core.models import BatchOptions, Plan, SessionState


def is_valid_session(obj: Any) -> bool:
    """Check the kind/version contract and the presence of input lines."""
    if not isinstance(obj, dict):
        return False
    # bool is an int subclass; True must not pass as version 1
    version = obj.get("version")
    if isinstance(version, bool) or version != SESSION_VERSION:
        return False
    if obj.get("kind") not in SESSION_READ_KINDS:
        return False
    source = obj.get("input")
    return isinstance(source, dict) and isinstance(source.get("lines"), list)


def _timestamp(created_at: Optional[datetime]) -> str:
    moment = created_at or datetime.now(timezone.utc)
    return moment.isoformat()


def build_session(plan: Plan, created_at: Optional[datetime] = None) -> dict[str, Any]:
    """Build the session object for a plan.

    Args:
        plan: Plan whose original lines and settings are captured
        created_at: Timestamp to record (defaults to now, UTC)

    Returns:
        JSON-serializable session dictionary
    """
    return {
        "version": SESSION_VERSION,
        "kind": SESSION_KIND,
        "createdAt": _timestamp(created_at),
        "options": plan.options.to_dict(),
        "outputType": plan.output_type.value,
        "zipBaseName": plan.archive_base_name or ARCHIVE_DEFAULT_BASE_NAME,
        "input": {
            "lines": list(plan.lines),
        },
    }


def session_to_json(plan: Plan, created_at: Optional[datetime] = None) -> str:
    return json.dumps(build_session(plan, created_at), indent=2, ensure_ascii=False) + "\n"


def restore_session(obj: Any) -> SessionState:
    """Turn a session object back into batch state.

    Only well-typed values are taken over; anything else keeps its default.

    Raises:
        SessionFormatError: If the object does not satisfy the session contract
    """
    if not is_valid_session(obj):
        raise SessionFormatError("Invalid batch file.")

    lines = [line for line in obj["input"]["lines"] if isinstance(line, str)]

    output_type = OutputType.HTML
    if isinstance(obj.get("outputType"), str):
        try:
            output_type = OutputType(obj["outputType"])
        except ValueError:
            pass

    base_name = obj.get("zipBaseName")
    if not isinstance(base_name, str):
        base_name = ARCHIVE_DEFAULT_BASE_NAME

    created_at = obj.get("createdAt")

    return SessionState(
        lines=lines,
        output_type=output_type,
        archive_base_name=base_name,
        options=BatchOptions.from_dict(obj.get("options")),
        created_at=created_at if isinstance(created_at, str) else None,
    )


def load_session_json(text: str) -> SessionState:
    """Parse session JSON text and restore it.

    Raises:
        SessionFormatError: If the text is not JSON or not a session object
    """
    try:
        obj = json.loads(text)
    except ValueError as e:
        raise SessionFormatError(f"Batch file is not valid JSON: {e}") from e
    return restore_session(obj)

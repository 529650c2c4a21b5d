import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List

from store.errors import SnapshotValidationError

logger = logging.getLogger(__name__)

MAX_IMPORT_FILE_SIZE = 10 * 1024 * 1024  # 10 MB
MAX_JSON_DEPTH = 10
SUPPORTED_VERSION = "2.0"

DANGEROUS_PATTERNS = [
    re.compile(r"<script", re.IGNORECASE),
    re.compile(r"javascript:", re.IGNORECASE),
    re.compile(r"eval\s*\(", re.IGNORECASE),
    re.compile(r"Function\s*\("),
]


def _has_dangerous_string(value: Any) -> bool:
    # Only values are checked, keys are left alone.
    if isinstance(value, str):
        return any(p.search(value) for p in DANGEROUS_PATTERNS)
    if isinstance(value, list):
        return any(_has_dangerous_string(v) for v in value)
    if isinstance(value, dict):
        return any(_has_dangerous_string(v) for v in value.values())
    return False


def _too_deep(value: Any, depth: int = 0) -> bool:
    if depth > MAX_JSON_DEPTH:
        return True
    if isinstance(value, list):
        return any(_too_deep(v, depth + 1) for v in value)
    if isinstance(value, dict):
        return any(_too_deep(v, depth + 1) for v in value.values())
    return False


def validate_snapshot_payload(data: Any, file_size: int = 0) -> List[str]:
    """
    Structural and safety checks on an imported v2.0 document.
    Returns the list of problems; empty when the document is usable.
    """
    errors: List[str] = []
    if file_size > MAX_IMPORT_FILE_SIZE:
        errors.append("File too large (max 10 MB)")

    if not isinstance(data, dict):
        errors.append("Invalid format")
        return errors

    version = data.get("version")
    if version is not None and version != SUPPORTED_VERSION:
        errors.append(f"Unsupported version: {version}")

    entities = data.get("entities")
    if not isinstance(entities, dict):
        errors.append("Missing entities structure")
    else:
        if entities.get("managers") is not None and not isinstance(entities["managers"], dict):
            errors.append("Invalid managers format")
        if entities.get("seasons") is not None and not isinstance(entities["seasons"], dict):
            errors.append("Invalid seasons format")
        if entities.get("matches") is not None and not isinstance(entities["matches"], list):
            errors.append("Invalid matches format")

    penalties = data.get("penalties")
    if penalties is not None and not isinstance(penalties, dict):
        errors.append("Invalid penalties format")

    if _has_dangerous_string(data):
        errors.append("Forbidden content detected")
    if _too_deep(data):
        errors.append(f"Structure too deep (max {MAX_JSON_DEPTH} levels)")
    return errors


def read_snapshot_file(path: str | Path) -> dict:
    """Load and validate a v2.0 JSON document; raises SnapshotValidationError."""
    path = Path(path)
    size = path.stat().st_size
    if size > MAX_IMPORT_FILE_SIZE:
        raise SnapshotValidationError(["File too large (max 10 MB)"])
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise SnapshotValidationError([f"Invalid JSON: {exc.msg}"]) from exc

    errors = validate_snapshot_payload(data, size)
    if errors:
        raise SnapshotValidationError(errors)
    logger.info("Loaded snapshot %s (%d bytes)", path, size)
    return data


def write_snapshot_file(payload: dict, path: str | Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    document = dict(payload)
    document["exportDate"] = datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
    path.write_text(json.dumps(document, ensure_ascii=False, indent=2), encoding="utf-8")
    logger.info("Saved snapshot to %s", path)
    return path

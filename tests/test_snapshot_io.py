import json

import pytest

from store.errors import SnapshotValidationError
from store.snapshot_io import (
    MAX_IMPORT_FILE_SIZE,
    read_snapshot_file,
    validate_snapshot_payload,
    write_snapshot_file,
)


def _document(**entities):
    base = {"managers": {}, "seasons": {}, "matches": []}
    base.update(entities)
    return {"version": "2.0", "entities": base}


def test_valid_document():
    assert validate_snapshot_payload(_document()) == []


@pytest.mark.parametrize(
    "data, message",
    [
        ([], "Invalid format"),
        ({"version": "1.0", "entities": {}}, "Unsupported version"),
        ({"version": "2.0"}, "Missing entities"),
        (_document(managers=[]), "Invalid managers"),
        (_document(seasons=[]), "Invalid seasons"),
        (_document(matches={}), "Invalid matches"),
        ({**_document(), "penalties": []}, "Invalid penalties"),
        (_document(managers={"x": {"id": "x", "name": "<script>alert(1)</script>"}}), "Forbidden"),
        (_document(managers={"x": {"id": "x", "name": "javascript:void"}}), "Forbidden"),
        (_document(matches=[{"games": [{"homeTeam": "eval (1)"}]}]), "Forbidden"),
    ],
)
def test_invalid_documents(data, message):
    errors = validate_snapshot_payload(data)
    assert any(message in e for e in errors)


def test_nesting_limit():
    nested = {}
    cursor = nested
    for _ in range(12):
        cursor["child"] = {}
        cursor = cursor["child"]
    errors = validate_snapshot_payload({**_document(), "extra": nested})
    assert any("too deep" in e for e in errors)


def test_size_limit():
    errors = validate_snapshot_payload(_document(), MAX_IMPORT_FILE_SIZE + 1)
    assert any("too large" in e for e in errors)


def test_file_round_trip(tmp_path):
    path = write_snapshot_file(_document(), tmp_path / "out" / "snapshot.json")
    written = json.loads(path.read_text(encoding="utf-8"))
    assert written["exportDate"].endswith("Z")
    assert read_snapshot_file(path)["version"] == "2.0"


def test_broken_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SnapshotValidationError) as excinfo:
        read_snapshot_file(path)
    assert excinfo.value.errors[0].startswith("Invalid JSON")

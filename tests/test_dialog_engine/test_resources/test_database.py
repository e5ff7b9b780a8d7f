import pytest
import json
from pathlib import Path
from dialog_engine.resources.database import SequenceDatabase


VALID_SEQUENCE = {
    "blocks": [
        {"type": "dialog", "speaker": "Mother", "text": "Morning."},
        {"type": "cutscene", "name": "breakfast", "duration": 2.0},
    ]
}


@pytest.fixture
def mock_db_path(tmp_path):
    # Setup mock directory structure in tmp_path
    (tmp_path / "dialog" / "day1").mkdir(parents=True)
    return tmp_path


def write_json(path: Path, data) -> None:
    with open(path, "w") as f:
        json.dump(data, f)


def test_load_all(mock_db_path):
    write_json(mock_db_path / "dialog" / "day1" / "seq1.json", VALID_SEQUENCE)

    db = SequenceDatabase(mock_db_path)
    count = db.load_all()

    assert count == 1
    assert db.has_sequence("day1/seq1")
    assert db.get_sequence("day1/seq1")["id"] == "day1/seq1"


def test_explicit_id_is_kept(mock_db_path):
    write_json(mock_db_path / "dialog" / "intro.json", dict(VALID_SEQUENCE, id="intro_custom"))

    db = SequenceDatabase(mock_db_path)
    db.load_all()

    assert db.get_sequence("intro")["id"] == "intro_custom"


def test_validation_error(mock_db_path):
    # Cutscene without duration
    broken = {"blocks": [{"type": "cutscene", "name": "oops"}]}
    write_json(mock_db_path / "dialog" / "broken.json", broken)

    db = SequenceDatabase(mock_db_path)
    db.load_all()

    assert not db.has_sequence("broken")  # Skipped due to validation error


def test_unknown_field_rejected(mock_db_path):
    broken = {"blocks": [{"type": "dialog", "text": "Hi", "portrait": "x"}]}
    write_json(mock_db_path / "dialog" / "broken.json", broken)

    db = SequenceDatabase(mock_db_path)

    assert db.validate(broken) is not None
    db.load_all()
    assert db.get_sequence("broken") is None


def test_invalid_json_skipped(mock_db_path, caplog):
    (mock_db_path / "dialog" / "bad.json").write_text("{not json")
    write_json(mock_db_path / "dialog" / "good.json", VALID_SEQUENCE)

    db = SequenceDatabase(mock_db_path)

    assert db.load_all() == 1
    assert "Failed to load" in caplog.text


def test_missing_dialog_dir(tmp_path):
    db = SequenceDatabase(tmp_path)
    assert db.load_all() == 0


def test_schema_override(mock_db_path):
    schemas = mock_db_path / "schemas"
    schemas.mkdir()
    # Stricter schema: sequences need an explicit id
    write_json(schemas / "sequence.schema.json", {
        "type": "object",
        "required": ["id", "blocks"],
    })
    write_json(mock_db_path / "dialog" / "anon.json", VALID_SEQUENCE)
    write_json(mock_db_path / "dialog" / "named.json", dict(VALID_SEQUENCE, id="named"))

    db = SequenceDatabase(mock_db_path)
    db.load_all()

    assert not db.has_sequence("anon")
    assert db.has_sequence("named")

import json
from pathlib import Path

import pytest

from grind.integrity import (
    IntegrityError,
    generate_integrity_data,
    validate_integrity,
    verify_integrity_data,
    write_integrity_file,
)


@pytest.fixture
def project(tmp_path):
    root = tmp_path / "HelloWorld"
    (root / "src" / "main").mkdir(parents=True)
    (root / "README.md").write_text("# HelloWorld\n")
    (root / "src" / "main" / "App.java").write_text("class App {}\n")
    (root / "empty.txt").write_bytes(b"")
    return root


def test_integrity_on_src_directory(project):
    json_data = generate_integrity_data(project)
    assert verify_integrity_data(project, json_data) is True


def test_generate_lists_relative_paths(project):
    files = json.loads(generate_integrity_data(project))["files"]
    assert set(files) == {
        "README.md",
        "empty.txt",
        str(Path("src") / "main" / "App.java"),
    }


def test_generate_hash_of_empty_file(project):
    files = json.loads(generate_integrity_data(project))["files"]
    assert files["empty.txt"] == "d41d8cd98f00b204e9800998ecf8427e"


def test_generate_skips_integrity_file(project):
    (project / "integrity.json").write_text("{}")
    files = json.loads(generate_integrity_data(project))["files"]
    assert "integrity.json" not in files
    assert len(files) == 3


def test_verify_detects_mismatch(project):
    json_data = generate_integrity_data(project)
    (project / "README.md").write_text("changed\n")
    assert verify_integrity_data(project, json_data) is False


def test_verify_detects_missing_file(project):
    json_data = generate_integrity_data(project)
    (project / "empty.txt").unlink()
    assert verify_integrity_data(project, json_data) is False


def test_verify_rejects_bad_json(project):
    assert verify_integrity_data(project, "not json") is False


def test_verify_rejects_wrong_shape(project):
    assert verify_integrity_data(project, json.dumps({"other": {}})) is False


def test_write_then_validate(project):
    written = write_integrity_file(project)
    assert written == project / "integrity.json"
    assert validate_integrity(project) is True


def test_validate_fails_after_tampering(project):
    write_integrity_file(project)
    (project / "src" / "main" / "App.java").write_text("class Evil {}\n")
    with pytest.raises(IntegrityError):
        validate_integrity(project)


def test_validate_without_manifest(project):
    with pytest.raises(IntegrityError):
        validate_integrity(project)
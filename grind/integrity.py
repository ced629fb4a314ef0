"""Directory integrity manifests (integrity.json) built from MD5 digests."""

from __future__ import annotations

import hashlib
import json
import os
import sys
from pathlib import Path

INTEGRITY_FILE = "integrity.json"


class IntegrityError(Exception):
    """Raised when an integrity manifest is missing or does not match."""


def _md5_of(path: Path) -> str:
    digest = hashlib.md5()
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(65536), b""):
            digest.update(chunk)
    return digest.hexdigest()


def generate_integrity_data(directory: str | Path) -> str:
    """Hash every file below `directory` and return the manifest as pretty JSON.

    Files named integrity.json are skipped; paths are stored relative to `directory`.
    """
    base = Path(directory)
    files: dict[str, str] = {}
    for root, dirs, names in os.walk(base):
        dirs.sort()
        for name in sorted(names):
            if name == INTEGRITY_FILE:
                continue
            path = Path(root) / name
            if not path.is_file():
                continue
            files[str(path.relative_to(base))] = _md5_of(path)
    return json.dumps({"files": files}, indent=2, ensure_ascii=False)


def _parse_manifest(json_data: str) -> dict[str, str]:
    data = json.loads(json_data)
    if not isinstance(data, dict) or "files" not in data:
        raise ValueError("missing field `files`")
    files = data["files"]
    if not isinstance(files, dict) or not all(
        isinstance(k, str) and isinstance(v, str) for k, v in files.items()
    ):
        raise ValueError("`files` must map paths to hashes")
    return files


def verify_integrity_data(directory: str | Path, json_data: str) -> bool:
    """Check every file listed in the manifest against its recorded hash."""
    try:
        files = _parse_manifest(json_data)
    except ValueError as exc:
        print(f"❌ Failed to parse integrity.json: {exc}", file=sys.stderr)
        return False

    base = Path(directory)
    total = missing = mismatched = 0
    print(f"🔍 Verifying files in directory: {base}")

    for relative_path, expected_hash in files.items():
        total += 1
        full_path = base / relative_path
        if not full_path.exists():
            print(f"[MISSING] {relative_path:<60} ⛔ File does not exist")
            missing += 1
            continue
        actual_hash = _md5_of(full_path)
        if actual_hash != expected_hash:
            print(
                f"[MISMATCH] {relative_path:<60}\n"
                f"           Expected: {expected_hash}\n"
                f"           Actual:   {actual_hash}"
            )
            mismatched += 1
        else:
            print(f"[OK] {actual_hash} | {relative_path}")

    all_match = missing == 0 and mismatched == 0
    print("\n📄 Summary:")
    print(f"  Total files checked : {total}")
    print(f"  Missing files       : {missing}")
    print(f"  Hash mismatches     : {mismatched}")
    if all_match:
        print("✅ All files passed integrity check.")
    else:
        print("❌ Some files failed integrity check.")
    return all_match


def write_integrity_file(directory: str | Path) -> Path:
    """Generate the manifest and write it to `directory`/integrity.json."""
    json_data = generate_integrity_data(directory)
    integrity_file = Path(directory) / INTEGRITY_FILE
    integrity_file.write_text(json_data, encoding="utf-8")
    print(f"✅ Integrity data written to {integrity_file}")
    return integrity_file


def validate_integrity(directory: str | Path) -> bool:
    """Validate `directory` against its integrity.json; raise IntegrityError on failure."""
    integrity_file = Path(directory) / INTEGRITY_FILE
    if not integrity_file.exists():
        print(f"❌ integrity.json not found in {directory}", file=sys.stderr)
        raise IntegrityError("missng integrity.json")
    json_data = integrity_file.read_text(encoding="utf-8")
    if not verify_integrity_data(directory, json_data):
        print("❌ Integrity check failed.")
        raise IntegrityError("integrity check failed")
    print("✅ Integrity check passed.")
    return True
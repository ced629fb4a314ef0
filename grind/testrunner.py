"""Running project tests through the TestTube plugin."""

from __future__ import annotations

import os
import sys
import zipfile
from pathlib import Path

import requests

from grind.builder import BuildTarget, execute_build
from grind.config import Grind
from grind.install import DownloadError
from grind.integrity import IntegrityError, validate_integrity
from grind.util import shell, unzip_file

PLUGIN_DIR = "plugins/TestTube"
PLUGIN_ARCHIVE = "TestTube.zip"
PLUGIN_URL_ENV = "GRIND_TEST_PLUGIN_URL"
_CLASSPATH = "target:target/test:libs/*:plugins/TestTube/libs/*:plugins/TestTube/TestTube.jar"


def check_plugin_exists() -> bool:
    """True when the plugin's integrity manifest is present."""
    return (Path(PLUGIN_DIR) / "integrity.json").exists()


def download_test_plugin() -> None:
    """Download the plugin archive named by $GRIND_TEST_PLUGIN_URL and unpack it."""
    url = os.environ.get(PLUGIN_URL_ENV)
    if not url:
        raise DownloadError(f"no TestTube plugin location configured (set {PLUGIN_URL_ENV})")
    print("🌎 Downloading TestTube plugin...")
    try:
        response = requests.get(url, timeout=120)
    except requests.RequestException as exc:
        raise DownloadError(str(exc)) from exc
    if not 200 <= response.status_code < 300:
        raise DownloadError(
            f"⚠️ Unable to download, HTTP Status Code: {response.status_code}"
        )
    try:
        Path(PLUGIN_ARCHIVE).write_bytes(response.content)
    except OSError as exc:
        raise DownloadError(str(exc)) from exc
    unzip_test_plugin(PLUGIN_ARCHIVE)


def unzip_test_plugin(filename: str) -> bool:
    """Extract the archive into plugins/ and delete it; return whether extraction worked."""
    print("🗜️ Extracting TestTube plugin...")
    ok = True
    try:
        unzip_file(filename, "plugins")
        print("✅ Extraction complete!")
    except (zipfile.BadZipFile, OSError) as exc:
        print(f"❌ Error during extraction: {exc}", file=sys.stderr)
        ok = False
    try:
        os.remove(filename)
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
    return ok


def check_plugin_integrity() -> bool:
    """True when the plugin directory matches its integrity manifest."""
    try:
        return validate_integrity(PLUGIN_DIR)
    except (IntegrityError, OSError):
        return False


def run_tests(grind: Grind, tests: list[str]) -> str | None:
    """Compile the project and its tests, then run them; return the test output."""
    if not check_plugin_exists():
        try:
            download_test_plugin()
        except DownloadError as exc:
            print(f"⚠️ {exc}")

    if not check_plugin_integrity():
        print("❌ the TestTube plugin is corrupted, try deleting the `TestTube/` folder")
        return None

    execute_build(grind, BuildTarget.INCLUDE_TEST, "")
    cmd = f'java -cp "{_CLASSPATH}" org.grind.TestTube {" ".join(tests)}'
    out = shell(cmd)
    print(out)
    return out
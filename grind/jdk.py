"""Managing a grind-installed JDK: listing, selecting and removing versions."""

from __future__ import annotations

import json
import platform
import re
import shutil
import tarfile
from pathlib import Path
from typing import Any

import requests

from grind import util
from grind.util import GrindPath

ADOPTIUM_API = "https://api.adoptium.net/v3"
JDKS_DIR = "~/.grind/jdks"
CURRENT_LINK = "~/.grind/jdks/current"
BASHRC = "~/.bashrc"
PATH_MARKER = "# GRIND-JDK-PATH"
_PATH_BLOCK = (
    "\n# GRIND-JDK-PATH\n"
    'export PATH="$HOME/.grind/jdks/current:$PATH"\n'
    "# GRIND-JDK-PATH\n"
    "        "
)
_VERSION_RE = re.compile(r"(\d+\.\d+\.\d+.*\w)")

_KB = 1024.0
_MB = _KB * 1024.0
_GB = _MB * 1024.0
_TB = _GB * 1024.0


class JdkError(Exception):
    """Raised when a JDK cannot be listed, installed, inspected or removed."""


def _expand(path: str) -> Path:
    expanded = util.expand_tilde(path)
    if expanded is None:
        raise JdkError("unable to expand tilde path!")
    return expanded


def _read(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise JdkError(str(exc)) from exc


def _get_json(url: str) -> Any:
    try:
        response = requests.get(url, timeout=30)
        return json.loads(response.text)
    except (requests.RequestException, ValueError) as exc:
        raise JdkError(str(exc)) from exc


def list_releases() -> list[int]:
    """Fetch and print the JDK feature releases that can be installed."""
    print("🌎 Fetching metadata")
    data = _get_json(f"{ADOPTIUM_API}/info/available_releases")
    releases = data.get("available_releases") if isinstance(data, dict) else None
    if not isinstance(releases, list) or not all(
        isinstance(v, int) and not isinstance(v, bool) for v in releases
    ):
        raise JdkError("missing field `available_releases`")
    if releases:
        print(f"\nFound {len(releases)} JDK versions:\n")
    for version in releases:
        print(f" - v{version}")
    return releases


def _is_grind_jdk() -> bool:
    is_jdk = util.dir_exists(JDKS_DIR)
    is_symlink = _expand(CURRENT_LINK).exists()
    bashrc = _read(_expand(BASHRC))
    return is_jdk and is_symlink and PATH_MARKER in bashrc


def current() -> str | None:
    """Print which JDK is active and whether grind manages it.

    Returns the printed line, or None when no Java can be found.
    """
    managed = _is_grind_jdk()
    label = "✅ [Grind Managed JDK]" if managed else "🖥️  [System Installed JDK]"
    try:
        version = get_java_version(managed)
    except JdkError:
        print("❌ Unable to detect any Java on this system")
        return None
    line = f"{label} | v{version}"
    print(line)
    return line


def _parse_java_version(output: str) -> str:
    match = _VERSION_RE.search(output)
    if match is None:
        raise JdkError("Could not determine Java version.")
    return match.group(1)


def get_java_version(include_grind_path: bool) -> str:
    """Run `java --version` with or without the grind JDK on PATH and extract the version."""
    option = GrindPath.INCLUDE if include_grind_path else GrindPath.EXCLUDE
    return _parse_java_version(util.shell_custom_path("java --version", option))


def format_bytes(num_bytes: int) -> str:
    """Human readable size using binary units with two decimals."""
    value = float(num_bytes)
    if value >= _TB:
        return f"{value / _TB:.2f} TB"
    if value >= _GB:
        return f"{value / _GB:.2f} GB"
    if value >= _MB:
        return f"{value / _MB:.2f} MB"
    if value >= _KB:
        return f"{value / _KB:.2f} KB"
    return f"{num_bytes} B"


def map_os(os_name: str) -> str:
    """Translate an OS name to the one the JDK API expects."""
    return os_name.replace("macos", "mac")


def map_arch(arch: str) -> str:
    """Translate an architecture name to the one the JDK API expects."""
    return arch.replace("x86_64", "x64").replace("x86", "x32")


def _detect_os() -> str:
    system = platform.system().lower()
    return "macos" if system == "darwin" else system


def _detect_arch() -> str:
    machine = platform.machine().lower()
    aliases = {
        "amd64": "x86_64",
        "arm64": "aarch64",
        "i386": "x86",
        "i486": "x86",
        "i586": "x86",
        "i686": "x86",
    }
    return aliases.get(machine, machine)


def get_jdk_detail(version: str) -> str:
    """Return the download link of the latest JDK build for `version` on this machine."""
    os_name = map_os(_detect_os())
    arch = map_arch(_detect_arch())
    print(f"Using autodetected: OS ({os_name}) | Architecture ({arch}).")
    url = (
        f"{ADOPTIUM_API}/assets/latest/{version}/hotspot"
        f"?architecture={arch}&image_type=jdk&os={os_name}&vendor=eclipse"
    )
    print(f"🌎 Fetching metadata for version {version}")
    data = _get_json(url)
    if not isinstance(data, list):
        raise JdkError("expected a list of JDK assets")
    if not data:
        raise JdkError(
            f"❌ Could not extract metadata for v{version} , "
            "are you sure this is a valid vesion?"
        )
    try:
        link = data[0]["binary"]["package"]["link"]
    except (KeyError, TypeError, IndexError):
        link = None
    if not isinstance(link, str):
        raise JdkError(f"no download link found for v{version}")
    return link


def _create_jdk_dir() -> None:
    try:
        _expand(JDKS_DIR).mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise JdkError(str(exc)) from exc
    print("✅ valid JDK directory...")


def _download_with_progress(url: str, output_path: Path) -> None:
    try:
        response = requests.get(url, stream=True, timeout=60)
    except requests.RequestException as exc:
        raise JdkError(f"Failed to GET from '{url}'") from exc
    with response:
        length = response.headers.get("Content-Length")
        if length is None or not length.isdigit():
            raise JdkError(f"Failed to get content length from '{url}'")
        total = int(length)
        try:
            handle = open(output_path, "wb")
        except OSError as exc:
            raise JdkError(f"Failed to create file '{output_path}'") from exc
        downloaded = 0
        with handle:
            chunks = response.iter_content(chunk_size=65536)
            while True:
                try:
                    chunk = next(chunks, None)
                except requests.RequestException as exc:
                    raise JdkError("Error while downloading file") from exc
                if chunk is None:
                    break
                try:
                    handle.write(chunk)
                except OSError as exc:
                    raise JdkError("Error while writing to file") from exc
                downloaded = min(downloaded + len(chunk), total)
                percentage = downloaded / total * 100.0 if total else 100.0
                print(
                    f"\rDownloaded: {percentage:.2f}% "
                    f"({format_bytes(downloaded)}/{format_bytes(total)})",
                    end="",
                    flush=True,
                )
    print()
    print(f"✅ Finished! downloaded to {output_path}")


def _download_sdk(version: str, url: str) -> None:
    if util.dir_exists(f"{JDKS_DIR}/v{version}"):
        print("✅ valid JDK package...")
        return
    print(f"==> JDK v{version} not yet installed, downloading...")
    jdks = _expand(JDKS_DIR)
    local_path = jdks / url.rsplit("/", 1)[-1]
    print(f"📥 Downloading: {url}")
    _download_with_progress(url, local_path)
    print("🗜️  Extracting archive, please wait!...")
    try:
        util.extract_tar_gz(local_path, jdks, jdks / f"v{version}")
    except (OSError, tarfile.TarError) as exc:
        raise JdkError(str(exc)) from exc


def _create_symlink(version: str) -> None:
    if not util.create_symlink(f"{JDKS_DIR}/v{version}/bin", CURRENT_LINK):
        raise JdkError("Error, unable to create symlink!")
    print("✅ valid symlink...")


def set_bashrc_path(bashrc_path: str | Path) -> bool:
    """Back up the bashrc and append the grind JDK PATH block if missing.

    Returns True when the block was added, False when it was already there.
    """
    path = Path(bashrc_path)
    text = _read(path)
    try:
        Path(f"{path}.bak").write_text(text, encoding="utf-8")
    except OSError as exc:
        raise JdkError(str(exc)) from exc

    if PATH_MARKER in text:
        print("✅ valid PATH in bashrc...")
        return False
    try:
        with open(path, "a", encoding="utf-8") as handle:
            handle.write(_PATH_BLOCK)
    except OSError as exc:
        raise JdkError(str(exc)) from exc
    print("ℹ️  You will need to reload your shell for new PATH to take affect")
    print("✔ Updated .bashrc — ⚡ WARNING: restart your terminal")
    return True


def strip_bashrc_path(bashrc_path: str | Path) -> str:
    """Back up the bashrc and cut it off at the first grind PATH marker; return the result."""
    path = Path(bashrc_path)
    try:
        shutil.copyfile(path, f"{path}.bak")
    except OSError as exc:
        raise JdkError(str(exc)) from exc
    stripped = _read(path).split(PATH_MARKER, 1)[0]
    try:
        path.write_text(stripped, encoding="utf-8")
    except OSError as exc:
        raise JdkError(str(exc)) from exc
    return stripped


def use(version: str) -> Path:
    """Install (if needed) and activate the given JDK version; return its directory."""
    version = version.lstrip("v")
    try:
        link = get_jdk_detail(version)
    except JdkError as exc:
        raise JdkError(f"Unable to fetch JDK version metadata: {exc}") from exc
    try:
        _create_jdk_dir()
        _download_sdk(version, link)
        _create_symlink(version)
        set_bashrc_path(_expand(BASHRC))
    except JdkError as exc:
        raise JdkError(f"Unable to setup and install JDK: {exc}") from exc
    print(f"✅ JDK v{version} setup is completed!")
    return _expand(JDKS_DIR) / f"v{version}"


def remove() -> None:
    """Take the grind JDK off PATH; downloaded JDKs are kept."""
    strip_bashrc_path(_expand(BASHRC))
    print("💣 Grind Managed JDK Destroyed!")
    print("✔ Updated .bashrc — ⚡ WARNING: restart your terminal")
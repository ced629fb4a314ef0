"""Shell helpers, filesystem helpers and Maven version comparison."""

from __future__ import annotations

import enum
import os
import shutil
import subprocess
import sys
import tarfile
import threading
import zipfile
from pathlib import Path

_ERROR_BANNER = "\n⚠️ Error:\n"
_U64_MAX = 2**64 - 1


class GrindPath(enum.Enum):
    """Whether the grind-managed JDK is placed on PATH or removed from it."""

    INCLUDE = "include"
    EXCLUDE = "exclude"


def _combine_output(stdout: bytes, stderr: bytes) -> str:
    out = stdout.decode("utf-8", "replace")
    err = stderr.decode("utf-8", "replace")
    result = ""
    if out.strip():
        result += out
    if err.strip():
        result += _ERROR_BANNER + err
    return result.strip()


def shell(cmd: str) -> str:
    """Run a command under bash and return stdout plus any stderr, trimmed."""
    proc = subprocess.run(["bash", "-c", cmd], capture_output=True, check=False)
    return _combine_output(proc.stdout, proc.stderr)


def shell_custom_path(cmd: str, grind_path: GrindPath) -> str:
    """Run a command in a login bash with the grind JDK added to or removed from PATH."""
    home = os.environ.get("HOME", "")
    paths = os.environ.get("PATH", "").split(":")
    if grind_path is GrindPath.INCLUDE:
        paths.insert(0, f"{home}/.grind/jdks/current")
    else:
        paths = [p for p in paths if "grind/jdks/current" not in p]
    env = {**os.environ, "PATH": ":".join(paths)}
    proc = subprocess.run(["bash", "-lc", cmd], capture_output=True, env=env, check=False)
    return _combine_output(proc.stdout, proc.stderr)


def shell_result(cmd: str) -> str:
    """Return the command's stdout; raise RuntimeError carrying stderr if there is none."""
    proc = subprocess.run(["bash", "-c", cmd], capture_output=True, check=False)
    out = proc.stdout.decode("utf-8", "replace")
    err = proc.stderr.decode("utf-8", "replace")
    if out.strip():
        return out
    if err.strip():
        raise RuntimeError(err)
    raise RuntimeError("Error: Unable both stdout and stderror failed..")


def shell_stream(cmd: str) -> int:
    """Run a command, echoing its output line by line; return the exit code."""
    proc = subprocess.Popen(
        ["bash", "-c", cmd, "--color=auto"],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
        errors="replace",
    )

    def pump_stderr() -> None:
        for line in proc.stderr:
            print("[stderr] " + line.rstrip("\r\n"), file=sys.stderr)

    reader = threading.Thread(target=pump_stderr, daemon=True)
    reader.start()
    for line in proc.stdout:
        print(line.rstrip("\r\n"))
    code = proc.wait()
    reader.join()
    if code < 0:
        print(f"Process exited with: signal: {-code}")
    else:
        print(f"Process exited with: exit status: {code}")
    return code


def ls_with_ext(directory: str, extension: str) -> list[str]:
    """List files directly inside `directory` whose extension is `extension`."""
    files = []
    with os.scandir(directory) as entries:
        for entry in sorted(entries, key=lambda e: e.name):
            path = os.path.join(directory, entry.name)
            if not os.path.isfile(path):
                continue
            suffix = Path(entry.name).suffix
            if suffix and suffix[1:] == extension:
                files.append(path)
    return files


def unzip_file(zip_path: str | Path, destination: str | Path) -> None:
    """Extract a zip archive into `destination`, keeping Unix permissions."""
    destination = Path(destination)
    with zipfile.ZipFile(zip_path) as archive:
        for info in archive.infolist():
            outpath = destination / info.filename
            if info.is_dir():
                outpath.mkdir(parents=True, exist_ok=True)
            else:
                outpath.parent.mkdir(parents=True, exist_ok=True)
                with archive.open(info) as src, open(outpath, "wb") as dst:
                    shutil.copyfileobj(src, dst)
            mode = info.external_attr >> 16
            if info.create_system == 3 and mode:
                os.chmod(outpath, mode & 0o7777)


def expand_tilde(path: str) -> Path | None:
    """Expand a leading `~` using $HOME; None when HOME is unset."""
    if path.startswith("~"):
        home = os.environ.get("HOME")
        if home is None:
            return None
        return Path(home) / path[1:].lstrip("/")
    return Path(path)


def dir_exists(path: str) -> bool:
    """True when the (tilde-expanded) path is an existing directory."""
    expanded = expand_tilde(path)
    if expanded is None:
        return False
    try:
        return expanded.stat().is_dir()
    except OSError as exc:
        print(f"Error accessing '{expanded}': {exc}", file=sys.stderr)
        return False


def create_symlink(target: str, link_name: str) -> bool:
    """Replace `link_name` with a symlink to `target`; report success."""
    target_path = expand_tilde(target)
    if target_path is None:
        print(f"Failed to expand target path '{target}'", file=sys.stderr)
        return False
    link_path = expand_tilde(link_name)
    if link_path is None:
        print(f"Failed to expand link path '{link_name}'", file=sys.stderr)
        return False
    try:
        os.remove(link_path)
    except OSError:
        pass
    try:
        os.symlink(target_path, link_path)
    except OSError as exc:
        print(f"Failed to create symlink '{link_path}': {exc}", file=sys.stderr)
        return False
    return True


def extract_tar_gz(
    archive_path: str | Path, target_dir: str | Path, rename_dir: str | Path
) -> None:
    """Extract a .tar.gz into `target_dir` and rename the new top-level directory."""
    target = Path(target_dir)
    target.mkdir(parents=True, exist_ok=True)
    before = set(os.listdir(target))
    with tarfile.open(archive_path, "r:gz") as archive:
        if hasattr(tarfile, "tar_filter"):
            archive.extractall(target, filter="tar")
        else:
            archive.extractall(target)
    new_entries = sorted(set(os.listdir(target)) - before)
    if not new_entries:
        raise FileNotFoundError("Unable to find extracted tar file!")
    extracted = target / new_entries[0]
    if extracted.is_dir():
        os.rename(extracted, rename_dir)


def _qualifier_rank(qualifier: str) -> int:
    q = qualifier.lower()
    if q == "snapshot":
        return 1
    if q in ("alpha", "a"):
        return 2
    if q in ("beta", "b"):
        return 3
    if q in ("milestone", "m"):
        return 4
    if q in ("rc", "cr"):
        return 5
    if q in ("", "final", "ga", "release"):
        return 6
    if q == "sp":
        return 7
    return 8


def _parse_u64(digits: str) -> int:
    if not digits:
        return 0
    value = int(digits)
    return value if value <= _U64_MAX else 0


def _split_token(token: str) -> tuple[int, str, int]:
    digits, letters, qualifier_number = [], [], []
    in_letters = False
    for c in token:
        is_digit = c.isascii() and c.isdigit()
        if is_digit and not in_letters:
            digits.append(c)
        elif c.isascii() and c.isalpha():
            in_letters = True
            letters.append(c)
        elif is_digit:
            qualifier_number.append(c)
    return _parse_u64("".join(digits)), "".join(letters), _parse_u64("".join(qualifier_number))


def _tokens(version: str) -> list[tuple[int, str, int]]:
    return [
        _split_token(part)
        for part in version.replace("-", ".").replace("_", ".").split(".")
    ]


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


def compare_maven_versions(v1: str, v2: str) -> int:
    """Compare two Maven version strings; return -1, 0 or 1."""
    tokens1 = _tokens(v1)
    tokens2 = _tokens(v2)
    padding = (0, "", 0)
    for i in range(max(len(tokens1), len(tokens2))):
        n1, q1, qn1 = tokens1[i] if i < len(tokens1) else padding
        n2, q2, qn2 = tokens2[i] if i < len(tokens2) else padding
        if n1 != n2:
            return _cmp(n1, n2)
        r1, r2 = _qualifier_rank(q1), _qualifier_rank(q2)
        if r1 != r2:
            return _cmp(r1, r2)
        if qn1 != qn2:
            return _cmp(qn1, qn2)
        if q1 != q2:
            return _cmp(q1, q2)
    return 0
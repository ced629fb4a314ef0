"""Dependency resolution, version-collision handling and jar downloads."""

from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Iterable

import requests

from grind.config import ConfigError, Dependency, Grind
from grind.lock import Lock, get_lock_file, lock_file
from grind.pom import MAVEN_CENTRAL, PomId, get_effective_dependencies
from grind.util import compare_maven_versions

LIBS_DIR = "libs"
_INVALID_VERSION_CHARS = "{}()$[],"


class DownloadError(Exception):
    """Raised when a dependency jar cannot be downloaded or stored."""


def _read_lock() -> Lock | None:
    try:
        return get_lock_file()
    except ConfigError:
        return None


def _ordered(deps: Iterable[Dependency]) -> list[Dependency]:
    return sorted(
        deps, key=lambda d: (d.group_id, d.artifact_id, d.version, d.scope or "")
    )


def _download_all(deps: Iterable[Dependency]) -> None:
    for dep in deps:
        try:
            download_jar(dep)
        except DownloadError as exc:
            print(f"⚠️ Failed to download [{dep}]: {exc}")


def execute_install(grind: Grind) -> list[Dependency]:
    """Install the project's dependencies and sync grind.lock.

    When the declared dependencies match the lock file, the locked set is
    downloaded as is; otherwise the tree is resolved again. Returns the
    dependencies that were installed.
    """
    locked = _read_lock()
    if locked is not None and grind.project.dependencies == locked.input_deps:
        print("✅ No dependency changes detected, using grind.lock...")
        _download_all(locked.locked_deps)
        return list(locked.locked_deps)

    print("⚙️ need to resolve all dependencies...")
    resolved = resolve_all_deps(grind.project.dependencies)

    locked = _read_lock()
    if locked is not None:
        # keep what was installed before alongside the newly resolved set
        resolved.update(locked.locked_deps)

    ordered = _ordered(fix_collisions(filter_invalid(resolved)))
    _download_all(ordered)
    lock_file(grind.project.dependencies, ordered)
    return ordered


def resolve_all_deps(initial_deps: Iterable[Dependency]) -> set[Dependency]:
    """Walk the transitive dependency tree breadth first, skipping test scope."""
    resolved: set[Dependency] = set()
    to_visit = deque(dep for dep in initial_deps if dep.scope != "test")
    while to_visit:
        dep = to_visit.popleft()
        if dep in resolved:
            continue
        resolved.add(dep)
        to_visit.extend(d for d in fetch_deps(dep) if d not in resolved)
    return resolved


def fetch_deps(dep: Dependency) -> list[Dependency]:
    """Return the compile-scoped direct dependencies declared by `dep`'s POM."""
    root = PomId(dep.group_id, dep.artifact_id, dep.version)
    print(f"ℹ️ Resolving dependencies for {root}...")

    effective = get_effective_dependencies(root, set())
    if effective is None:
        print("⚠️ Could not resolve dependencies.")
        return []

    print(f"\nℹ️ Found {len(effective)} effective dependencies:")
    deps = []
    for rdep in effective:
        print(
            f"  - {rdep.group_id}:{rdep.artifact_id}:{rdep.version} "
            f"(Scope: {rdep.scope or 'compile'})"
        )
        if rdep.scope is not None and "compile" in rdep.scope:
            deps.append(
                Dependency(rdep.group_id, rdep.artifact_id, rdep.version, rdep.scope)
            )
    return deps


def jar_filename(dep: Dependency) -> str:
    """The local file name under libs/ for a dependency jar."""
    return f"{dep.group_id}_{dep.artifact_id}_{dep.version}.jar"


def download_jar(dep: Dependency) -> bool:
    """Download the jar into libs/; return False if it was already present."""
    local_path = Path(LIBS_DIR) / jar_filename(dep)
    if local_path.exists():
        print(f"📦 Already exists, skipping: {local_path}")
        return False

    try:
        Path(LIBS_DIR).mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DownloadError(str(exc)) from exc

    group_path = dep.group_id.replace(".", "/")
    url = (
        f"{MAVEN_CENTRAL}/{group_path}/{dep.artifact_id}/{dep.version}/"
        f"{dep.artifact_id}-{dep.version}.jar"
    )
    print(f"📥 Downloading: {url}")

    try:
        response = requests.get(url, timeout=60)
    except requests.RequestException as exc:
        raise DownloadError(str(exc)) from exc
    if not 200 <= response.status_code < 300:
        raise DownloadError(
            f"⚠️ Unable to download, HTTP Status Code: {response.status_code}"
        )
    try:
        local_path.write_bytes(response.content)
    except OSError as exc:
        raise DownloadError(str(exc)) from exc
    return True


def filter_invalid(deps: Iterable[Dependency]) -> set[Dependency]:
    """Drop dependencies whose version is a placeholder or a version range."""
    return {
        dep
        for dep in deps
        if not any(c in dep.version for c in _INVALID_VERSION_CHARS)
    }


def fix_collisions(deps: Iterable[Dependency]) -> set[Dependency]:
    """Keep only the newest version of each group/artifact pair."""
    latest: dict[tuple[str, str], Dependency] = {}
    for dep in deps:
        key = (dep.group_id, dep.artifact_id)
        existing = latest.get(key)
        if existing is None or is_version_newer(existing.version, dep.version):
            latest[key] = dep
    return set(latest.values())


def is_version_newer(source: str, target: str) -> bool:
    """True when `target` is a newer Maven version than `source`."""
    return compare_maven_versions(source, target) < 0
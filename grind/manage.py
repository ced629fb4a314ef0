"""Adding and removing dependencies in grind.yml."""

from __future__ import annotations

from pathlib import Path

from grind import install
from grind.config import Dependency, Grind, save_grind
from grind.metadata import MetadataError, fetch_maven_metadata


def _group_and_artifact(dep: str) -> tuple[str, str]:
    if "/" in dep:
        tokens = dep.split("/")
        return tokens[0], tokens[1]
    return "", ""


def parse_coordinate(dep: str) -> tuple[str, str, str]:
    """Split `group/artifact[@version]` into its parts; missing parts are empty."""
    group_id, artifact = _group_and_artifact(dep)
    version = ""
    if "@" in artifact:
        artifact, version = artifact.split("@", 1)
    return group_id, artifact, version


def search_deps(group_id: str, artifact: str, version: str) -> Dependency | None:
    """Look the artifact up on Maven Central.

    With a version, it must be one of the published versions; without one,
    the release version is used.
    """
    try:
        release, versions = fetch_maven_metadata(group_id, artifact)
    except MetadataError:
        return None

    if version:
        if version not in versions:
            return None
        chosen = version
    elif release is not None:
        chosen = release
    else:
        return None

    print(f"✅ Match Found: {group_id}/{artifact} v{chosen}")
    return Dependency(group_id, artifact, chosen, "compile")


def _sync(grind: Grind) -> None:
    try:
        save_grind(grind)
    except OSError:
        print("⚠️ Unable to sync grind.yml!")
        return
    print("🔃 grind.yml synced..")
    install.execute_install(grind)


def execute_add(grind: Grind, deps: list[str]) -> list[Dependency]:
    """Add the given coordinates to grind.yml and install; return what was added."""
    candidates = []
    for dep in deps:
        group_id, artifact, version = parse_coordinate(dep)
        matched = search_deps(group_id, artifact, version)
        if matched is None:
            print(f"❌ WARNING: no match found for {group_id}/{artifact} v{version}")
        else:
            candidates.append(matched)
    if candidates:
        update_grind(grind, candidates)
    return candidates


def execute_remove(grind: Grind, deps: list[str]) -> list[Dependency]:
    """Remove coordinates from grind.yml, delete their jars and reinstall."""
    candidates = []
    dependencies = grind.project.dependencies
    for dep in deps:
        group_id, artifact = _group_and_artifact(dep)
        index = next(
            (
                i
                for i, existing in enumerate(dependencies)
                if existing.group_id == group_id and existing.artifact_id == artifact
            ),
            None,
        )
        if index is None:
            print(f"❌ WARNING: no match found for {group_id}/{artifact}")
            continue
        print(f"⚙️ preparing to remove {group_id} {artifact}")
        candidates.append(dependencies.pop(index))

    for dep in install.resolve_all_deps(candidates):
        try:
            delete_jar(dep)
        except OSError as exc:
            print(f"❌ Failed to remove {dep}: {exc}")

    _sync(grind)
    return candidates


def delete_jar(dep: Dependency) -> Path:
    """Delete the dependency's jar from libs/; raises OSError if it cannot."""
    local_path = Path(install.LIBS_DIR) / install.jar_filename(dep)
    local_path.unlink()
    print(f"🗑️ REMOVED: {local_path}")
    return local_path


def update_grind(grind: Grind, candidates: list[Dependency]) -> None:
    """Append new candidates to the project, save grind.yml and install."""
    for dep in candidates:
        if dep not in grind.project.dependencies:
            grind.project.dependencies.append(dep)
    _sync(grind)
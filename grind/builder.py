"""Compiling the project, packaging a jar and compiling tests."""

from __future__ import annotations

import enum
import shlex
from pathlib import Path

from grind.config import Grind
from grind.util import ls_with_ext, shell

MANIFEST_PATH = "src/main/resources/manifest.mf"


class BuildTarget(enum.Enum):
    """What a build produces beyond the compiled classes."""

    BUILD_ONLY = "build_only"
    INCLUDE_JAR = "include_jar"
    INCLUDE_TEST = "include_test"


def _print_if_any(out: str) -> None:
    if out:
        print(out)


def build_manifest(grind: Grind, external_jars: list[str]) -> str:
    """The jar manifest naming the main class and the external class path."""
    manifest = f"Main-Class: {grind.project.group_id}.{grind.project.artifact_id}"
    if external_jars:
        manifest += "\nClass-Path: " + "\n    ".join(external_jars)
    return manifest + "\n"


def _package_jar(grind: Grind) -> None:
    print("==> 🔨 building manifest...")
    try:
        external_jars = ls_with_ext("libs", "jar")
    except OSError as exc:
        print(f"⚠️ Error: unable to list external jars: {exc}")
        external_jars = []

    try:
        Path(MANIFEST_PATH).write_text(build_manifest(grind, external_jars), encoding="utf-8")
    except OSError:
        print("⚠️ Error: unbale to generate the manifest!")
        return

    print(shell("rm -rf build/"))
    print(shell("mkdir -p build/"))
    shell("cp -r src/main/resources/. target/")
    jar_path = shlex.quote(f"build/{grind.project.artifact_id}.jar")
    _print_if_any(shell(f"jar cfm {jar_path} {MANIFEST_PATH} -C target ."))


def execute_build(grind: Grind, target: BuildTarget, build_flags: str = "") -> None:
    """Compile sources into target/, then package or compile tests as asked."""
    artifact_id = grind.project.artifact_id
    print(f"==> 🔨 compiling project [{artifact_id}]...")
    Path(artifact_id, "target").mkdir(parents=True, exist_ok=True)

    shell("rm -rf target/")
    shell("mkdir target")
    _print_if_any(
        shell(
            f'javac {build_flags} -d target -cp "libs/*" '
            '$(find src/main/java -name "*.java")'
        )
    )

    if target is BuildTarget.INCLUDE_JAR:
        _package_jar(grind)

    if target is BuildTarget.INCLUDE_TEST:
        print(f"==> 🔨 compiling tests for [{artifact_id}]...")
        _print_if_any(
            shell(
                'javac -d target/test -cp "target:libs/*" '
                '$(find src/test/java -name "*.java")'
            )
        )

    shell("cp -r src/main/resources/. target/")
    # javac may leave a stray directory named after the artifact
    shell(f"rm -rf {shlex.quote(artifact_id + '/')}")
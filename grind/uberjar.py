"""Building a single runnable jar from compiled classes and dependency jars."""

from __future__ import annotations

import os
import shutil
import sys
import time
import zipfile
from dataclasses import dataclass
from pathlib import Path

MANIFEST_NAME = "META-INF/MANIFEST.MF"


@dataclass
class FatJarConfig:
    """Inputs and identity of a fat jar build."""

    output_jar: Path
    classes_dir: Path
    libs_dir: Path
    main_class: str
    group_id: str
    artifact_id: str

    def __post_init__(self) -> None:
        self.output_jar = Path(self.output_jar)
        self.classes_dir = Path(self.classes_dir)
        self.libs_dir = Path(self.libs_dir)


def generate_manifest(config: FatJarConfig) -> str:
    """The MANIFEST.MF text for the fat jar."""
    jdk = os.environ.get("JAVA_HOME", "unknown")
    return (
        "Manifest-Version: 1.0\n"
        f"Main-Class: {config.main_class}\n"
        f"Implementation-Title: {config.artifact_id}\n"
        f"Implementation-Vendor-Id: {config.group_id}\n"
        "Built-By: grind\n"
        f"Build-Jdk: {jdk}\n"
        "Implementation-Version: 1.0.0\n\n"
    )


def is_signature_file(name: str) -> bool:
    """True for jar signature files under META-INF/ (.SF, .RSA, .DSA)."""
    upper = name.upper()
    return upper.startswith("META-INF/") and upper.endswith((".SF", ".RSA", ".DSA"))


def is_mergeable(name: str) -> bool:
    """True for resources whose contents are concatenated across jars."""
    return (
        name.startswith("META-INF/services/")
        or name == "META-INF/spring.factories"
        or name.startswith("META-INF/spring/")
    )


def merge_resource(merged: dict[str, bytearray], name: str, data: bytes) -> None:
    """Append `data` to the merged resource, keeping it newline-terminated."""
    entry = merged.setdefault(name, bytearray())
    entry.extend(data)
    if not entry.endswith(b"\n"):
        entry.extend(b"\n")


def _add_directory_classes(
    directory: Path, writer: zipfile.ZipFile, seen: set[str]
) -> int:
    count = 0
    for root, dirs, names in os.walk(directory):
        dirs.sort()
        for name in sorted(names):
            path = Path(root) / name
            if not path.is_file():
                continue
            rel_path = path.relative_to(directory).as_posix()
            if rel_path in seen:
                continue
            seen.add(rel_path)
            writer.write(path, arcname=rel_path)
            count += 1
            kind = "class" if rel_path.endswith(".class") else "resource"
            print(f"+ {kind}: {rel_path}")
    return count


def _merge_jar(
    jar_path: Path,
    writer: zipfile.ZipFile,
    seen: set[str],
    merged: dict[str, bytearray],
) -> None:
    with zipfile.ZipFile(jar_path) as archive:
        for info in archive.infolist():
            name = info.filename
            if info.is_dir() or name == MANIFEST_NAME or is_signature_file(name):
                continue
            if is_mergeable(name):
                merge_resource(merged, name, archive.read(info))
            elif name not in seen:
                seen.add(name)
                with archive.open(info) as src, writer.open(name, "w") as dst:
                    shutil.copyfileobj(src, dst)


def build_fat_jar(config: FatJarConfig) -> Path:
    """Write the fat jar described by `config` and return its path."""
    start = time.monotonic()
    seen: set[str] = set()
    merged: dict[str, bytearray] = {}

    with zipfile.ZipFile(config.output_jar, "w", zipfile.ZIP_STORED) as writer:
        print("🧩 Starting fat jar build...")
        print(f" → Output: {config.output_jar}")
        print(f" → Classes: {config.classes_dir}")
        print(f" → Libs: {config.libs_dir}")
        print(f" → Main-Class: {config.main_class}")

        writer.writestr(MANIFEST_NAME, generate_manifest(config))
        seen.add(MANIFEST_NAME)
        print(f"+ manifest: {MANIFEST_NAME}")

        file_count = _add_directory_classes(config.classes_dir, writer, seen)

        jars = sorted(p for p in config.libs_dir.iterdir() if p.suffix == ".jar")
        total = len(jars)
        if total:
            print(f"📦 Merging {total} dependency jar(s)...")
        for index, jar_path in enumerate(jars, start=1):
            percent = index * 100 // max(total, 1)
            print(f"\r   [{index}/{total} | {percent:3}%] {jar_path.name}", end="")
            sys.stdout.flush()
            _merge_jar(jar_path, writer, seen, merged)
        if total:
            print()

        for name, data in merged.items():
            if name not in seen:
                seen.add(name)
                writer.writestr(name, bytes(data))
                print(f"+ merged: {name}")

    elapsed = time.monotonic() - start
    print(f"✅ Fat jar created: {config.output_jar}")
    print("📊 Summary:")
    print(f"   → {file_count} class/resource files")
    print(f"   → {total} dependency jars merged")
    print(f"⏱ Total build time: {int(elapsed)}.{int((elapsed % 1) * 1000):03d} seconds")
    return config.output_jar
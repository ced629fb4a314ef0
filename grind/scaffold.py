"""Scaffolding a new project directory with sources and a grind.yml."""

from __future__ import annotations

from pathlib import Path

VERSION = "0.8.0"
TAGLINE = "Java builds, without the headache"

LOGO = "\n".join(
    [
        "",
        "  +-------------------------+",
        "  |        G R I N D        |",
        "  +-------------------------+",
        "",
        f'        - "{TAGLINE}"',
        f"                    v{VERSION}",
        "",
    ]
)

_IGNORED = (
    "libs/*",
    "target/*",
    "build/*",
    "cache/*",
    "plugins/*",
    "reports/*",
    ".vscode/*",
    "!.vscode/settings.json",
    "!.vscode/tasks.json",
)


def _lines(*lines: str) -> str:
    return "\n".join(lines) + "\n"


def _gitignore() -> str:
    return _lines(*_IGNORED)


def _readme(artifact_id: str) -> str:
    fence = "```"
    return _lines(
        f"# {artifact_id}",
        "",
        "A project skeleton created by the `grind` tool; replace this with your own introduction.",
        "",
        "## Building",
        "",
        "Install the dependencies listed in grind.yml:",
        "",
        f"{fence}shell",
        "$ grind install",
        fence,
        "",
        "Then compile and package the project:",
        "",
        f"{fence}shell",
        "$ grind build",
        fence,
        "",
    )


def _vscode_settings() -> str:
    return _lines(
        "{",
        '  "java.project.referencedLibraries": ["libs/*"],',
        '  "java.project.sourcePaths": ["src/main/java"]',
        "}",
    )


def _main_class(namespace: str, artifact_id: str) -> str:
    indent = " " * 4
    return _lines(
        f"package {namespace};",
        "",
        f"public class {artifact_id} {{",
        f"{indent}public static void main(String[] args) {{",
        f'{indent * 2}System.out.println("Hello, world from grind!");',
        f"{indent}}}",
        "}",
    )


def _grind_file(namespace: str, artifact_id: str) -> str:
    fields = {
        "groupId": namespace,
        "artifactId": artifact_id,
        "version": "1.0.0",
        "name": "My App",
        "description": "Update me!",
    }
    body = ["project:"]
    body.extend(f'  {key}: "{value}"' for key, value in fields.items())
    body.extend(
        [
            "",
            "  dependencies:",
            '    - groupId: "junit"',
            '      artifactId: "junit"',
            '      version: "4.13.2"',
            '      scope: "test"',
            "",
            "  tasks:",
            '    clean: "rm -rf target/"',
            "",
        ]
    )
    return _lines(*body)


def _write(path: Path, text: str) -> None:
    path.write_text(text, encoding="utf-8")


def create(namespace: str, artifact_id: str) -> Path:
    """Create the project skeleton in ./<artifact_id>/ and return its path."""
    print(LOGO)
    root = Path(artifact_id)
    packages = namespace.replace(".", "/")

    root.mkdir(parents=True, exist_ok=True)
    print(f"==> created project directory [{artifact_id}/]")

    (root / "libs").mkdir(parents=True, exist_ok=True)
    print(f"==> created libs [{artifact_id}/libs]")

    _write(root / ".gitignore", _gitignore())
    print("==> created .gitignore file")

    _write(root / "README.md", _readme(artifact_id))
    print("==> created README.md file")

    (root / ".vscode").mkdir(parents=True, exist_ok=True)
    _write(root / ".vscode" / "settings.json", _vscode_settings())
    print("==> created settings.json file")

    source_dir = root / "src" / "main" / "java" / packages
    source_dir.mkdir(parents=True, exist_ok=True)
    (root / "src" / "main" / "resources").mkdir(parents=True, exist_ok=True)
    print(f"==> created packages [{artifact_id}/src/main/java/{packages}]")

    _write(source_dir / f"{artifact_id}.java", _main_class(namespace, artifact_id))
    print("==> created main java class file")

    _write(root / "grind.yml", _grind_file(namespace, artifact_id))
    print("==> created grind.yml file")

    print()
    print(f"🎉🎉 created project {artifact_id}/ successfully!")
    return root
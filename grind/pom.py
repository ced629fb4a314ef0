"""POM fetching, parsing and effective dependency resolution."""

from __future__ import annotations

import sys
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path

import requests

from grind.config import Dependency

MAVEN_CENTRAL = "https://repo1.maven.org/maven2"
CACHE_DIR = "cache"


class PomError(Exception):
    """Raised when a POM cannot be fetched, parsed or resolved."""


@dataclass(frozen=True)
class PomId:
    """Maven coordinates identifying a single POM."""

    group_id: str
    artifact_id: str
    version: str

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"


@dataclass(frozen=True)
class EffectiveDependency:
    """A dependency with its version and scope fully resolved."""

    group_id: str
    artifact_id: str
    version: str
    scope: str | None = None


@dataclass(frozen=True)
class PomDependency:
    """A <dependency> entry as written in a POM."""

    group_id: str
    artifact_id: str
    version: str | None = None
    type: str | None = None
    scope: str | None = None
    optional: str | None = None


@dataclass(frozen=True)
class Parent:
    """The <parent> reference of a POM."""

    group_id: str
    artifact_id: str
    version: str


@dataclass
class Pom:
    """The parts of a POM that dependency resolution needs."""

    group_id: str | None = None
    artifact_id: str | None = None
    version: str | None = None
    parent: Parent | None = None
    properties: dict[str, str] = field(default_factory=dict)
    dependency_management: list[PomDependency] = field(default_factory=list)
    dependencies: list[PomDependency] = field(default_factory=list)


@dataclass
class _Context:
    dependency_management: dict[str, PomDependency] = field(default_factory=dict)
    properties: dict[str, str] = field(default_factory=dict)


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _first(element: ET.Element, name: str) -> ET.Element | None:
    return next((c for c in element if _local(c.tag) == name), None)


def _text(element: ET.Element) -> str:
    return (element.text or "").strip()


def _optional(element: ET.Element, name: str) -> str | None:
    child = _first(element, name)
    return _text(child) if child is not None else None


def _required(element: ET.Element, name: str, path: str) -> str:
    child = _first(element, name)
    if child is None:
        raise PomError(f"Error at {path}: missing field `{name}`")
    return _text(child)


def _dependencies(container: ET.Element | None, path: str) -> list[PomDependency]:
    if container is None:
        return []
    deps = []
    for index, dep in enumerate(c for c in container if _local(c.tag) == "dependency"):
        where = f"{path}.dependency[{index}]"
        deps.append(
            PomDependency(
                group_id=_required(dep, "groupId", where),
                artifact_id=_required(dep, "artifactId", where),
                version=_optional(dep, "version"),
                type=_optional(dep, "type"),
                scope=_optional(dep, "scope"),
                optional=_optional(dep, "optional"),
            )
        )
    return deps


def parse_pom(xml_text: str) -> Pom:
    """Parse POM XML; namespaces are ignored."""
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as exc:
        raise PomError(f"Error at .: {exc}") from exc

    parent = None
    parent_el = _first(root, "parent")
    if parent_el is not None:
        parent = Parent(
            group_id=_required(parent_el, "groupId", "parent"),
            artifact_id=_required(parent_el, "artifactId", "parent"),
            version=_required(parent_el, "version", "parent"),
        )

    properties: dict[str, str] = {}
    props_el = _first(root, "properties")
    if props_el is not None:
        for child in props_el:
            properties[_local(child.tag)] = _text(child)

    managed: list[PomDependency] = []
    dm_el = _first(root, "dependencyManagement")
    if dm_el is not None:
        managed = _dependencies(
            _first(dm_el, "dependencies"), "dependencyManagement.dependencies"
        )

    return Pom(
        group_id=_optional(root, "groupId"),
        artifact_id=_optional(root, "artifactId"),
        version=_optional(root, "version"),
        parent=parent,
        properties=properties,
        dependency_management=managed,
        dependencies=_dependencies(_first(root, "dependencies"), "dependencies"),
    )


def substitute_properties(value: str, properties: dict[str, str]) -> str:
    """Replace every `${key}` placeholder with its property value."""
    for key, replacement in properties.items():
        value = value.replace("${" + key + "}", replacement)
    return value


def build_pom_url(group: str, artifact: str, version: str) -> str:
    """The Maven Central URL of a POM."""
    group_path = group.replace(".", "/")
    return f"{MAVEN_CENTRAL}/{group_path}/{artifact}/{version}/{artifact}-{version}.pom"


def get_pom(dep: Dependency) -> str:
    """Return the POM text for `dep`, from the local cache or Maven Central."""
    cache_dir = Path(CACHE_DIR)
    local_path = cache_dir / f"{dep.group_id}_{dep.artifact_id}_{dep.version}.pom"
    try:
        cache_dir.mkdir(parents=True, exist_ok=True)
        cache_ok = True
    except OSError:
        cache_ok = False
    if cache_ok and local_path.exists():
        try:
            return local_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            pass

    print(f"🌎 ==> fetching POM.xml for {dep.artifact_id}")
    try:
        response = requests.get(
            build_pom_url(dep.group_id, dep.artifact_id, dep.version), timeout=30
        )
        body = response.text
    except requests.RequestException as exc:
        raise PomError(str(exc)) from exc
    try:
        local_path.write_text(body, encoding="utf-8")
    except OSError as exc:
        print(f"⚠️ Failed to write file: {exc}", file=sys.stderr)
    return body


def _load(pom_id: PomId) -> Pom:
    xml_text = get_pom(
        Dependency(pom_id.group_id, pom_id.artifact_id, pom_id.version, "compile")
    )
    return parse_pom(xml_text)


def _resolve(pom_id: PomId, visited: set[PomId]) -> tuple[Pom, _Context]:
    if pom_id in visited:
        pom = _load(pom_id)
        print(f"Cyclic dependency detected: {pom_id}")
        return pom, _Context()

    visited.add(pom_id)
    pom = _load(pom_id)

    parent_pom = None
    if pom.parent is not None:
        parent_id = PomId(pom.parent.group_id, pom.parent.artifact_id, pom.parent.version)
        parent_pom, context = _resolve(parent_id, visited)
        if pom.group_id is None:
            pom.group_id = pom.parent.group_id
        if pom.version is None:
            pom.version = pom.parent.version
    else:
        context = _Context()

    current: dict[str, str] = {}
    if pom.group_id is not None:
        current["project.groupId"] = pom.group_id
    if pom.artifact_id is not None:
        current["project.artifactId"] = pom.artifact_id
    if pom.version is not None:
        current["project.version"] = pom.version
    if parent_pom is not None:
        if parent_pom.group_id is not None:
            current["project.parent.groupId"] = parent_pom.group_id
        if parent_pom.version is not None:
            current["project.parent.version"] = parent_pom.version

    context.properties.update(current)
    context.properties.update(pom.properties)

    for dep in pom.dependency_management:
        context.dependency_management.setdefault(
            f"{dep.group_id}:{dep.artifact_id}", dep
        )

    for dep in list(context.dependency_management.values()):
        if dep.scope == "import" and dep.type == "pom":
            if dep.version is None:
                raise PomError(
                    f"imported POM {dep.group_id}:{dep.artifact_id} has no version"
                )
            props = context.properties
            import_id = PomId(
                substitute_properties(dep.group_id, props),
                substitute_properties(dep.artifact_id, props),
                substitute_properties(dep.version, props),
            )
            _, imported = _resolve(import_id, visited)
            for key, value in imported.dependency_management.items():
                context.dependency_management.setdefault(key, value)

    return pom, context


def get_effective_dependencies(
    root_pom_id: PomId, visited: set[PomId] | None = None
) -> list[EffectiveDependency] | None:
    """Resolve the non-optional, versioned direct dependencies of a POM.

    Returns None when the POM (or a parent or imported BOM) cannot be resolved.
    """
    if visited is None:
        visited = set()
    try:
        pom, context = _resolve(root_pom_id, visited)
    except PomError as exc:
        print(f"Failed to resolve dependencies for {root_pom_id}: {exc}", file=sys.stderr)
        return None

    props = context.properties
    effective = []
    for dep in pom.dependencies:
        version = dep.version
        if version is None:
            managed = context.dependency_management.get(f"{dep.group_id}:{dep.artifact_id}")
            version = managed.version if managed is not None else None
        if version is None:
            continue
        if dep.optional is not None and "true" in dep.optional:
            continue
        effective.append(
            EffectiveDependency(
                group_id=substitute_properties(dep.group_id, props),
                artifact_id=substitute_properties(dep.artifact_id, props),
                version=substitute_properties(version, props),
                scope=dep.scope if dep.scope is not None else "compile",
            )
        )
    return effective
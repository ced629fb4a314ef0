"""Project configuration (grind.yml) model and profile helpers."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

import yaml

GRIND_FILE = "grind.yml"


class ConfigError(Exception):
    """Raised when a configuration file is missing or malformed."""


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise ConfigError(f"{what}: expected a mapping")
    return data


def _string(data: Mapping[str, Any], key: str, what: str) -> str:
    if key not in data:
        raise ConfigError(f"{what}: missing field `{key}`")
    value = data[key]
    if not isinstance(value, str):
        raise ConfigError(f"{what}.{key}: expected a string")
    return value


def _optional_string(data: Mapping[str, Any], key: str, what: str) -> str | None:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise ConfigError(f"{what}.{key}: expected a string")
    return value


def _string_map(value: Any, what: str) -> dict[str, str]:
    mapping = _mapping(value, what)
    result = {}
    for key, item in mapping.items():
        if not isinstance(key, str) or not isinstance(item, str):
            raise ConfigError(f"{what}: expected string keys and values")
        result[key] = item
    return result


@dataclass(frozen=True)
class Dependency:
    """A Maven coordinate with an optional scope."""

    group_id: str
    artifact_id: str
    version: str
    scope: str | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Dependency:
        data = _mapping(data, "dependency")
        return cls(
            group_id=_string(data, "groupId", "dependency"),
            artifact_id=_string(data, "artifactId", "dependency"),
            version=_string(data, "version", "dependency"),
            scope=_optional_string(data, "scope", "dependency"),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "groupId": self.group_id,
            "artifactId": self.artifact_id,
            "version": self.version,
            "scope": self.scope,
        }


@dataclass
class Profile:
    """Compiler flags and environment variables applied by name."""

    flags: list[str] | None = None
    envs: dict[str, str] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Profile:
        data = _mapping(data, "profile")
        flags = data.get("flags")
        if flags is not None:
            if not isinstance(flags, list) or not all(isinstance(f, str) for f in flags):
                raise ConfigError("profile.flags: expected a list of strings")
            flags = list(flags)
        envs = data.get("envs")
        if envs is not None:
            envs = _string_map(envs, "profile.envs")
        return cls(flags=flags, envs=envs)

    def to_dict(self) -> dict[str, Any]:
        return {
            "flags": list(self.flags) if self.flags is not None else None,
            "envs": dict(self.envs) if self.envs is not None else None,
        }


@dataclass
class Project:
    """The `project` section of grind.yml."""

    group_id: str
    artifact_id: str
    version: str
    name: str
    description: str
    dependencies: list[Dependency] = field(default_factory=list)
    tasks: dict[str, str] = field(default_factory=dict)
    profiles: dict[str, Profile] | None = None

    @classmethod
    def from_dict(cls, data: Any) -> Project:
        data = _mapping(data, "project")
        if "dependencies" not in data:
            raise ConfigError("project: missing field `dependencies`")
        deps = data["dependencies"]
        if not isinstance(deps, list):
            raise ConfigError("project.dependencies: expected a list")
        if "tasks" not in data:
            raise ConfigError("project: missing field `tasks`")
        profiles_raw = data.get("profiles")
        profiles = None
        if profiles_raw is not None:
            profiles = {
                str(name): Profile.from_dict(value)
                for name, value in _mapping(profiles_raw, "project.profiles").items()
            }
        return cls(
            group_id=_string(data, "groupId", "project"),
            artifact_id=_string(data, "artifactId", "project"),
            version=_string(data, "version", "project"),
            name=_string(data, "name", "project"),
            description=_string(data, "description", "project"),
            dependencies=[Dependency.from_dict(d) for d in deps],
            tasks=_string_map(data["tasks"], "project.tasks"),
            profiles=profiles,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "groupId": self.group_id,
            "artifactId": self.artifact_id,
            "version": self.version,
            "name": self.name,
            "description": self.description,
            "dependencies": [d.to_dict() for d in self.dependencies],
            "tasks": dict(self.tasks),
            "profiles": (
                {name: p.to_dict() for name, p in self.profiles.items()}
                if self.profiles is not None
                else None
            ),
        }


@dataclass
class Grind:
    """The whole grind.yml document."""

    project: Project

    @classmethod
    def from_dict(cls, data: Any) -> Grind:
        data = _mapping(data, "grind.yml")
        if "project" not in data:
            raise ConfigError("grind.yml: missing field `project`")
        return cls(project=Project.from_dict(data["project"]))

    def to_dict(self) -> dict[str, Any]:
        return {"project": self.project.to_dict()}


@dataclass
class RunArgs:
    """Flags and environment taken from a profile, plus remaining arguments."""

    flags: str = ""
    envs: str = ""
    args: list[str] = field(default_factory=list)


def load_grind(path: str | Path = GRIND_FILE) -> Grind:
    """Read and parse a grind.yml file, raising ConfigError on any failure."""
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"unable to read {path}: {exc}") from exc
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    return Grind.from_dict(data)


def save_grind(grind: Grind, path: str | Path = GRIND_FILE) -> None:
    """Write the configuration back to disk as YAML."""
    text = yaml.safe_dump(grind.to_dict(), sort_keys=False, allow_unicode=True)
    Path(path).write_text(text, encoding="utf-8")


def _profile(grind: Grind, profile: str) -> Profile | None:
    profiles = grind.project.profiles or {}
    return profiles.get(profile)


def get_flags(grind: Grind, profile: str) -> str:
    """Return the named profile's flags joined by spaces, or an empty string."""
    matched = _profile(grind, profile)
    if matched is None or matched.flags is None:
        return ""
    return " ".join(matched.flags)


def get_envs(grind: Grind, profile: str) -> str:
    """Return the named profile's environment as `KEY=VALUE` pairs joined by spaces."""
    matched = _profile(grind, profile)
    if matched is None or matched.envs is None:
        return ""
    return " ".join(f"{key}={value}" for key, value in matched.envs.items())


def get_run_args(grind: Grind, args: list[str]) -> RunArgs:
    """Treat the first argument as a profile name when it matches one.

    A matching profile (one yielding flags or environment) is consumed from
    the argument list; otherwise all arguments are kept.
    """
    remaining = list(args)
    flags = envs = ""
    if remaining:
        profile = remaining[0]
        flags = get_flags(grind, profile)
        envs = get_envs(grind, profile)
        if flags or envs:
            del remaining[0]
    return RunArgs(flags=flags, envs=envs, args=remaining)
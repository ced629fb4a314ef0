"""The grind.lock file: input dependencies and the fully resolved set."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

import yaml

from grind.config import ConfigError, Dependency

LOCK_FILE = "grind.lock"


@dataclass
class Lock:
    """Declared dependencies alongside the resolved ones they produced."""

    input_deps: list[Dependency] = field(default_factory=list)
    locked_deps: list[Dependency] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> Lock:
        if not isinstance(data, dict):
            raise ConfigError("grind.lock: expected a mapping")
        for key in ("inputDeps", "lockedDeps"):
            if not isinstance(data.get(key), list):
                raise ConfigError(f"grind.lock: missing or invalid field `{key}`")
        return cls(
            input_deps=[Dependency.from_dict(d) for d in data["inputDeps"]],
            locked_deps=[Dependency.from_dict(d) for d in data["lockedDeps"]],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "inputDeps": [d.to_dict() for d in self.input_deps],
            "lockedDeps": [d.to_dict() for d in self.locked_deps],
        }


def get_lock_file(path: str | Path = LOCK_FILE) -> Lock:
    """Load the lock file, raising ConfigError if it is missing or invalid."""
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"unable to read {path}: {exc}") from exc
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise ConfigError(f"invalid YAML in {path}: {exc}") from exc
    return Lock.from_dict(data)


def lock_file(
    input_deps: Iterable[Dependency],
    locked_deps: Iterable[Dependency],
    path: str | Path = LOCK_FILE,
) -> bool:
    """Write the lock file; return whether it was written."""
    lock = Lock(input_deps=list(input_deps), locked_deps=list(locked_deps))
    text = yaml.safe_dump(lock.to_dict(), sort_keys=False, allow_unicode=True)
    try:
        Path(path).write_text(text, encoding="utf-8")
    except OSError:
        return False
    print("🔃 grind.lock synced..")
    return True
"""Interpreter configuration, loadable from a JSON or YAML document."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, fields, asdict
from pathlib import Path
from typing import Any, Dict, List


DEFAULT_NATIVES = ("clock",)


@dataclass
class InterpreterConfig:
    """Knobs a host can set on an Interpreter."""

    max_call_depth: int = 256
    natives: List[str] = field(default_factory=lambda: list(DEFAULT_NATIVES))
    show_source_in_errors: bool = True

    def __post_init__(self) -> None:
        if self.max_call_depth < 1:
            raise ValueError(f"max_call_depth must be positive, got {self.max_call_depth}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InterpreterConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"unknown config keys: {', '.join(unknown)}")
        return cls(**data)

    @classmethod
    def load(cls, config_path: Path | str) -> "InterpreterConfig":
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"config not found: {path}")
        with path.open("r", encoding="utf-8") as fp:
            if path.suffix == ".json":
                data = json.load(fp)
            else:
                import yaml

                data = yaml.safe_load(fp)
        return cls.from_dict(data or {})

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

"""Engine configuration.

Configuration lives in the ``[tool.rewire]`` table of a ``pyproject.toml``::

    [tool.rewire]
    select = ["GCP0001"]
    ignore = []
    max-workers = 4
    analyze-generated = false
    verify-output = true

Keys may be written with dashes or underscores.
"""
from __future__ import annotations

import logging
import sys
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping

from rewire.core.errors import ConfigError

# Python 3.11+ has tomllib built-in
if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None  # type: ignore

logger = logging.getLogger(__name__)

TOOL_TABLE = "rewire"


@dataclass(frozen=True)
class EngineConfig:
    """Settings for a :class:`~rewire.engine.migrator.MigrationEngine`.

    Attributes
    ----------
    select : tuple[str, ...]
        Rule ids to run. Empty means every rule that is enabled by default.
    ignore : tuple[str, ...]
        Rule ids to drop, applied after ``select``.
    max_workers : int
        Threads used to walk one document. 1 walks sequentially.
    analyze_generated : bool
        Whether documents marked ``@generated`` are analyzed.
    verify_output : bool
        Re-parse fixed output and refuse a batch that would not parse.
    """

    select: tuple[str, ...] = ()
    ignore: tuple[str, ...] = ()
    max_workers: int = 1
    analyze_generated: bool = True
    verify_output: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.max_workers, int) or isinstance(self.max_workers, bool):
            raise ConfigError(f"max_workers must be an integer, got {self.max_workers!r}")
        if self.max_workers < 1:
            raise ConfigError(f"max_workers must be at least 1, got {self.max_workers}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> EngineConfig:
        """Build a config from a parsed ``[tool.rewire]`` table.

        Raises
        ------
        ConfigError
            On unknown keys or values of the wrong type.
        """
        known = {f.name for f in fields(cls)}
        values: dict[str, Any] = {}
        for raw_key, value in data.items():
            key = raw_key.replace("-", "_")
            if key not in known:
                raise ConfigError(f"Unknown rewire setting: {raw_key!r}")
            if key in ("select", "ignore"):
                if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
                    raise ConfigError(f"{raw_key} must be a list of rule ids")
                value = tuple(value)
            elif key in ("analyze_generated", "verify_output") and not isinstance(value, bool):
                raise ConfigError(f"{raw_key} must be true or false")
            values[key] = value
        return cls(**values)


def load_config(path: str | Path) -> EngineConfig:
    """Load the ``[tool.rewire]`` table from a pyproject.toml.

    Parameters
    ----------
    path : str | Path
        A pyproject.toml file, or a directory containing one.

    Returns
    -------
    EngineConfig
        The parsed config, or the defaults when the file or table is missing.

    Raises
    ------
    ConfigError
        If the file cannot be parsed or holds invalid settings.
    """
    path = Path(path)
    if path.is_dir():
        path = path / "pyproject.toml"
    if not path.is_file():
        logger.debug("No %s, using default config", path)
        return EngineConfig()

    if tomllib is None:
        raise ConfigError("tomli is required to read pyproject.toml before Python 3.11")

    try:
        with path.open("rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse {path}: {e}") from e

    table = data.get("tool", {}).get(TOOL_TABLE)
    if table is None:
        logger.debug("No [tool.%s] table in %s, using default config", TOOL_TABLE, path)
        return EngineConfig()
    return EngineConfig.from_mapping(table)

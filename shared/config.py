"""
Kestrel Configuration Management
=================================

Centralized configuration for the Kestrel tool using Python dataclasses
and TOML-based persistence.

Architecture follows the Twelve-Factor App methodology for configuration
management (Wiggins, 2011), separating config from code.

References:
    - Wiggins, A. (2011). The Twelve-Factor App. https://12factor.net/
    - TOML v1.0.0 Specification. https://toml.io/en/v1.0.0
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


# Default configuration file, looked up in the working directory
_DEFAULT_CONFIG_NAME: str = "config.toml"


# ========================== Tool-Specific Config ===========================


@dataclass(frozen=False, slots=True)
class InspectConfig:
    """Configuration for ELF inspection.

    Controls which parts of a decoded image are rendered and the largest
    file the engine is willing to read into memory.
    """

    max_file_size: int = 268_435_456  # 256 MiB
    show_segments: bool = True
    show_sections: bool = True
    resolve_names: bool = True
    output_format: str = "console"


# =========================== Global Settings ===============================


@dataclass(frozen=False, slots=True)
class GlobalConfig:
    """Global settings: logging verbosity, log destinations, output paths."""

    log_level: str = "INFO"
    log_file: str | None = None
    log_json: bool = False
    output_dir: str = "output"
    debug: bool = False
    version: str = "1.0.0"


# =========================== Master Config =================================


@dataclass(frozen=False, slots=True)
class KestrelConfig:
    """Master configuration aggregating the global and tool settings.

    Usage:
        >>> config = KestrelConfig.load()                  # from default path
        >>> config = KestrelConfig.load("custom.toml")     # from custom path
        >>> print(config.inspect.max_file_size)
        268435456
    """

    global_settings: GlobalConfig = field(default_factory=GlobalConfig)
    inspect: InspectConfig = field(default_factory=InspectConfig)

    # ------------------------------------------------------------------ #
    #  TOML Loading
    # ------------------------------------------------------------------ #

    @classmethod
    def load(cls, path: str | Path | None = None) -> KestrelConfig:
        """Load configuration from a TOML file.

        If *path* is ``None`` the loader looks for ``config.toml`` in the
        current working directory.  Missing keys fall back to dataclass
        defaults.

        Args:
            path: Filesystem path to a TOML configuration file.
                  Defaults to ``./config.toml``.

        Returns:
            A fully-populated :class:`KestrelConfig` instance.

        Raises:
            FileNotFoundError: If the specified path does not exist
                *and* was explicitly provided by the caller.
        """
        config_path = Path(path) if path is not None else Path.cwd() / _DEFAULT_CONFIG_NAME

        if not config_path.exists():
            if path is not None:
                raise FileNotFoundError(
                    f"Configuration file not found: {config_path}"
                )
            return cls()

        with open(config_path, "rb") as fh:
            raw: dict[str, Any] = tomllib.load(fh)

        return cls(
            global_settings=cls._build_section(GlobalConfig, raw.get("global", {})),
            inspect=cls._build_section(InspectConfig, raw.get("inspect", {})),
        )

    # ------------------------------------------------------------------ #
    #  Serialisation helpers
    # ------------------------------------------------------------------ #

    def to_dict(self) -> dict[str, Any]:
        """Serialise the entire configuration tree to a plain dictionary."""
        return asdict(self)

    # ------------------------------------------------------------------ #
    #  Internal helpers
    # ------------------------------------------------------------------ #

    @staticmethod
    def _build_section(cls: type, data: dict[str, Any]) -> Any:
        """Instantiate a dataclass *cls* using only the keys it declares.

        Unknown keys in the TOML source are ignored.
        """
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}  # type: ignore[attr-defined]
        filtered = {k: v for k, v in data.items() if k in valid_keys}
        return cls(**filtered)


# ========================= Module-level convenience ========================

def get_config(path: str | Path | None = None) -> KestrelConfig:
    """Module-level convenience wrapper around :meth:`KestrelConfig.load`.

    Caches the result so that repeated calls share one instance.
    """
    if not hasattr(get_config, "_cached") or path is not None:
        get_config._cached = KestrelConfig.load(path)  # type: ignore[attr-defined]
    return get_config._cached  # type: ignore[attr-defined]

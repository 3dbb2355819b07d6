"""Assembly configuration loading."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path  # noqa: TC003 - used at runtime
from typing import Any

from ruamel.yaml import YAML

# Default configuration values
DEFAULT_MODEL = "mock"
DEFAULT_ASPECT_RATIO = "1:1"
DEFAULT_PLACEHOLDER = "Connect nodes upstream to assemble prompt..."

ENV_DEFAULT_MODEL = "PW_DEFAULT_MODEL"
ENV_DEFAULT_ASPECT_RATIO = "PW_DEFAULT_ASPECT_RATIO"


@dataclass(frozen=True)
class AssemblyConfig:
    """Settings the engine reads while assembling a request.

    Attributes:
        default_model: Model used when no Parameters node is reachable.
        default_aspect_ratio: Aspect ratio used when no Parameters node is reachable.
        fragment_separator: Joins positive body fragments.
        framing_separator: Joins shot and camera fragments in the lead-in.
        lead_in_separator: Joins the framing lead-in to the body.
        negative_separator: Joins negative fragments.
        placeholder: Text shown by consumers when a field is empty.
    """

    default_model: str = DEFAULT_MODEL
    default_aspect_ratio: str = DEFAULT_ASPECT_RATIO
    fragment_separator: str = ". "
    framing_separator: str = ", "
    lead_in_separator: str = ": "
    negative_separator: str = ", "
    placeholder: str = DEFAULT_PLACEHOLDER

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssemblyConfig:
        """Create config from dictionary.

        Args:
            data: Dictionary that can have:
                - defaults: ``model`` and ``aspect_ratio``
                - separators: ``fragment``, ``framing``, ``lead_in``, ``negative``
                - placeholder: Empty-field placeholder text

        Returns:
            AssemblyConfig instance.
        """
        defaults = data.get("defaults") or {}
        separators = data.get("separators") or {}
        base = cls()
        return cls(
            default_model=str(defaults.get("model", base.default_model)),
            default_aspect_ratio=str(defaults.get("aspect_ratio", base.default_aspect_ratio)),
            fragment_separator=str(separators.get("fragment", base.fragment_separator)),
            framing_separator=str(separators.get("framing", base.framing_separator)),
            lead_in_separator=str(separators.get("lead_in", base.lead_in_separator)),
            negative_separator=str(separators.get("negative", base.negative_separator)),
            placeholder=str(data.get("placeholder", base.placeholder)),
        )

    def with_env_overrides(self) -> AssemblyConfig:
        """Apply PW_DEFAULT_MODEL / PW_DEFAULT_ASPECT_RATIO if set."""
        return replace(
            self,
            default_model=os.getenv(ENV_DEFAULT_MODEL) or self.default_model,
            default_aspect_ratio=os.getenv(ENV_DEFAULT_ASPECT_RATIO) or self.default_aspect_ratio,
        )


class ConfigError(Exception):
    """Raised when assembly configuration cannot be loaded."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load assembly config at {path}: {reason}")


def load_assembly_config(config_path: Path | None = None) -> AssemblyConfig:
    """Load assembly configuration from a YAML file.

    Environment overrides are applied on top of the file (or of the
    built-in defaults when no file is given).

    Args:
        config_path: Path to a YAML config file, or None for defaults.

    Returns:
        AssemblyConfig instance.

    Raises:
        ConfigError: If the file is missing, empty or unreadable.
    """
    if config_path is None:
        return AssemblyConfig().with_env_overrides()

    if not config_path.exists():
        raise ConfigError(config_path, "File not found")

    yaml = YAML(typ="safe")
    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.load(f)

        if data is None:
            raise ConfigError(config_path, "Empty file")
        if not isinstance(data, dict):
            raise ConfigError(config_path, "Expected a mapping at the top level")

        return AssemblyConfig.from_dict(data).with_env_overrides()
    except Exception as e:
        if isinstance(e, ConfigError):
            raise
        raise ConfigError(config_path, str(e)) from e

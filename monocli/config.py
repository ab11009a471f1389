"""
monocli Configuration

Pydantic-backed configuration for the tool itself.

All tunables are compiled in and there is no environment-variable surface.
StaticConfig holds thresholds and marker file names, RuntimeConfig
holds the paths resolved for the current invocation.
"""

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class StaticConfig(BaseModel):
    """
    Thresholds and file names that never change at runtime.

    - max_recursion: parent hops allowed while searching for the root
    - root_file_name: marker/document identifying the monorepo root
    - module_file_name: marker/document identifying a module
    - toolchain / workspace_file_name: binary and file used by the workspace strategy
    """

    max_recursion: int = Field(default=7)
    root_file_name: str = Field(default="work.toml")
    module_file_name: str = Field(default="module.toml")

    # Workspace strategy
    toolchain: str = Field(default="go")
    workspace_file_name: str = Field(default="go.work")

    # Root document defaults
    default_version: str = Field(default="0.1.0")

    model_config = ConfigDict(frozen=True)


class RuntimeConfig(BaseModel):
    """Paths resolved once per invocation."""

    wd: Path  # folder the cli was executed from
    root: Path  # root of the monorepo

    model_config = ConfigDict(frozen=True)


def load_static_config() -> StaticConfig:
    """Return the built-in static configuration."""
    return StaticConfig()

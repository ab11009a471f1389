"""
monocli Domain Models

Documents persisted in the monorepo (root and module) and the parsed
target expression used by the run command.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List

from pydantic import BaseModel, ConfigDict, Field

from monocli.errors import ValidationError


class Strategy(str, Enum):
    """How modules are stitched together at the root."""
    WORKSPACE = "workspace"  # toolchain workspace file at root
    REWRITE = "rewrite"      # reserved, not supported yet


def validate_strategy(value: str) -> Strategy:
    """Return the supported strategy for ``value`` or raise ValidationError."""
    if value == Strategy.WORKSPACE.value:
        return Strategy.WORKSPACE
    if value == Strategy.REWRITE.value:
        raise ValidationError("rewrite strategy unsupported yet", metadata={"strategy": value})
    raise ValidationError(f"invalid strategy '{value}'", metadata={"strategy": value})


class RootConfig(BaseModel):
    """Configuration of the monorepo, persisted in the root document."""

    name: str = ""
    version: str = "0.1.0"
    strategy: str = Strategy.WORKSPACE.value
    vendor: bool = True
    scripts: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")


class ModuleConfig(BaseModel):
    """
    Configuration of a module.

    Only ``scripts`` is persisted. ``name`` (the folder's base name) and
    ``relative_path`` (relative to the root) are added at load time.
    """

    name: str = Field(default="", exclude=True)
    relative_path: str = Field(default="", exclude=True)
    scripts: Dict[str, str] = Field(default_factory=dict)

    model_config = ConfigDict(extra="ignore")

    def script(self, script_name: str) -> str:
        return self.scripts.get(script_name, "")

    def has_script(self, script_name: str) -> bool:
        return self.script(script_name) != ""


ROOT_TARGET = "root"
ALL_TARGET = "all"


@dataclass(frozen=True)
class TargetSet:
    """Tokens of a comma separated target expression."""
    tokens: List[str] = field(default_factory=list)

    @property
    def is_root(self) -> bool:
        return self.tokens == [ROOT_TARGET]

    @property
    def is_all(self) -> bool:
        return self.tokens == [ALL_TARGET]

    def __str__(self) -> str:
        return ",".join(self.tokens)

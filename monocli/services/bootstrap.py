"""
monocli Bootstrap Service

Creates a monorepo at the resolved root: prepares the toolchain workspace
for the chosen strategy and writes the root document.
"""

from pathlib import Path
from typing import Optional

from monocli.errors import ValidationError
from monocli.models import RootConfig, Strategy, validate_strategy
from monocli.services.base import Service, ServiceContext
from monocli.services.configuration import ConfigurationService


class BootstrapService(Service):
    """Initializes a monorepo. Prompts are the caller's job."""

    def __init__(self, context: ServiceContext, configuration: Optional[ConfigurationService] = None) -> None:
        super().__init__(context)
        self.configuration = configuration or ConfigurationService(context)

    def default_name(self) -> str:
        return Path(self.runtime.root).name

    def ensure_not_initialized(self) -> None:
        """Raise ValidationError if the root document already exists."""
        if self.configuration.root_config_exists():
            raise ValidationError(
                f"monorepo already exists at {self.runtime.root}",
                metadata={"root": str(self.runtime.root)},
            )

    def new_root_config(self, name: Optional[str] = None, vendor: bool = True) -> RootConfig:
        return RootConfig(
            name=name or self.default_name(),
            version=self.static.default_version,
            strategy=Strategy.WORKSPACE.value,
            vendor=vendor,
        )

    def initialize(self, root_config: RootConfig) -> RootConfig:
        """
        Prepare the workspace and persist ``root_config``.

        Raises:
            ValidationError: Already initialized, or unsupported strategy
            ExecutionError: The toolchain could not create the workspace
            EncodeError / FilesystemError: The root document could not be written
        """
        self.ensure_not_initialized()

        strategy = validate_strategy(root_config.strategy)
        if strategy is Strategy.WORKSPACE:
            self._ensure_workspace()

        self.configuration.write_root_config(root_config)
        self.console.verbose(f"created monorepo configuration '{self.static.root_file_name}' at root")
        self.console.success(f"monorepo initialized at {self.runtime.root}")
        return root_config

    def _ensure_workspace(self) -> None:
        if self.configuration.workspace_exists():
            self.console.verbose(f"{self.static.toolchain} workspace already exists, no need to create one")
            return
        self.console.verbose(
            f"{self.static.toolchain} workspace does not exist yet, running '{self.static.toolchain} work init'"
        )
        self.executor.toolchain(self.runtime.root, "work", "init")

"""
monocli Service Base

Defines the base Service class and ServiceContext that all services inherit from.
This provides a consistent interface for dependency injection: services never
reach for the OS directly, they use the capabilities carried by the context.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from monocli.config import RuntimeConfig, StaticConfig
from monocli.logging import ConsoleLogger, get_logger
from monocli.services.system import Executor, Filesystem, SystemUtils


@dataclass
class ServiceContext:
    """
    Context object providing shared dependencies and runtime state to services.

    Attributes:
        static: Built-in thresholds and file names
        runtime: Working directory and resolved monorepo root
        system: Filesystem, executor and console capabilities
        metadata: Additional contextual metadata
    """
    static: StaticConfig
    runtime: RuntimeConfig
    system: SystemUtils
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def root(self) -> Path:
        return self.runtime.root

    def with_metadata(self, **kwargs: Any) -> "ServiceContext":
        """Return a new context with additional metadata."""
        return ServiceContext(
            static=self.static,
            runtime=self.runtime,
            system=self.system,
            metadata={**self.metadata, **kwargs},
        )


class Service:
    """
    Base class for all monocli services.

    Each service receives a ServiceContext providing configuration, the
    system capabilities and the console.

    Example:
        class MyService(Service):
            def do_something(self) -> str:
                self.console.info("Doing something")
                return "done"
    """

    def __init__(self, context: ServiceContext) -> None:
        self.context = context
        self.static = context.static
        self.runtime = context.runtime
        self.logger = get_logger(self.__class__.__name__)

    @property
    def fs(self) -> Filesystem:
        return self.context.system.fs

    @property
    def executor(self) -> Executor:
        return self.context.system.executor

    @property
    def console(self) -> ConsoleLogger:
        return self.context.system.console

    def log_extra(self, *, module: Optional[str] = None, **extra: Any) -> Dict[str, Any]:
        """
        Build a consistent extra dict for structured logging.

        Context metadata (e.g. the running command) is included by default.
        Only non-None values are included.
        """
        payload: Dict[str, Any] = {}
        command = self.context.metadata.get("command")
        if command is not None:
            payload["command"] = command
        if module is not None:
            payload["module_name"] = module
        payload.update({k: v for k, v in extra.items() if v is not None})
        return payload

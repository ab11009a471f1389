"""
monocli Services

Core service layer: configuration discovery, target selection and script dispatch.
"""

from importlib import import_module
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from monocli.services.base import Service, ServiceContext
    from monocli.services.system import (
        Executor,
        Filesystem,
        LocalExecutor,
        LocalFilesystem,
        SystemUtils,
        WalkEntry,
    )
    from monocli.services.configuration import ConfigurationService, resolve_root
    from monocli.services.targets import parse_target_expression, resolve_targets
    from monocli.services.dispatch import DispatchResult, DispatchService
    from monocli.services.bootstrap import BootstrapService

__all__ = [
    # Base
    "Service",
    "ServiceContext",
    # System
    "Executor",
    "Filesystem",
    "LocalExecutor",
    "LocalFilesystem",
    "SystemUtils",
    "WalkEntry",
    # Configuration
    "ConfigurationService",
    "resolve_root",
    # Targets
    "parse_target_expression",
    "resolve_targets",
    # Dispatch
    "DispatchResult",
    "DispatchService",
    # Bootstrap
    "BootstrapService",
]

_EXPORTS = {
    "Service": "monocli.services.base",
    "ServiceContext": "monocli.services.base",
    "Executor": "monocli.services.system",
    "Filesystem": "monocli.services.system",
    "LocalExecutor": "monocli.services.system",
    "LocalFilesystem": "monocli.services.system",
    "SystemUtils": "monocli.services.system",
    "WalkEntry": "monocli.services.system",
    "ConfigurationService": "monocli.services.configuration",
    "resolve_root": "monocli.services.configuration",
    "parse_target_expression": "monocli.services.targets",
    "resolve_targets": "monocli.services.targets",
    "DispatchResult": "monocli.services.dispatch",
    "DispatchService": "monocli.services.dispatch",
    "BootstrapService": "monocli.services.bootstrap",
}


def __getattr__(name: str):
    module_path = _EXPORTS.get(name)
    if not module_path:
        raise AttributeError(f"module {__name__} has no attribute {name}")
    module = import_module(module_path)
    return getattr(module, name)


def __dir__() -> list[str]:
    return sorted(__all__)

"""
monocli Configuration Service

Locates the monorepo root, loads and saves the root document, and discovers
modules by walking the tree below the root.
"""

import os
import tomllib
from pathlib import Path
from typing import Dict, List, Optional

import pydantic
import tomlkit

from monocli.config import RuntimeConfig, StaticConfig
from monocli.errors import DecodeError, EncodeError, MonoCliError, NotFoundError, ValidationError
from monocli.models import ModuleConfig, RootConfig
from monocli.services.base import Service
from monocli.services.system import Filesystem


def resolve_root(fs: Filesystem, working_directory: Optional[Path], marker_file_name: str, max_hops: int) -> Path:
    """
    Find the closest ancestor of ``working_directory`` containing ``marker_file_name``.

    At most ``max_hops`` parents are visited. Reaching the filesystem root
    before that returns ``working_directory`` itself, so an uninitialized
    folder can still become a monorepo.

    Raises:
        NotFoundError: No working directory, or the hop limit was exhausted
    """
    if not working_directory or not str(working_directory):
        raise NotFoundError("no working directory")

    current = Path(working_directory)
    for _ in range(max_hops + 1):
        if fs.exists(current / marker_file_name):
            return current
        parent = current.parent
        if parent == current:
            return Path(working_directory)
        current = parent
    raise NotFoundError("root not found", metadata={"wd": str(working_directory), "max_hops": max_hops})


def build_runtime_config(fs: Filesystem, static: StaticConfig, wd: Optional[Path] = None) -> RuntimeConfig:
    """Resolve the runtime paths for an invocation started in ``wd`` (default: cwd)."""
    working_directory = Path(wd) if wd is not None else Path(os.getcwd())
    root = resolve_root(fs, working_directory, static.root_file_name, static.max_recursion)
    return RuntimeConfig(wd=working_directory, root=root)


def decode_document(content: bytes, path: Path) -> Dict:
    """Decode TOML bytes into a plain dict."""
    try:
        return tomllib.loads(content.decode("utf-8"))
    except (UnicodeDecodeError, tomllib.TOMLDecodeError) as exc:
        raise DecodeError(f"failed to decode {path}: {exc}", metadata={"path": str(path)}) from exc


def encode_document(data: Dict, path: Path) -> bytes:
    """Encode a plain dict as TOML bytes."""
    try:
        return tomlkit.dumps(data).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise EncodeError(f"failed to encode {path}: {exc}", metadata={"path": str(path)}) from exc


class ConfigurationService(Service):
    """
    Reads and writes monorepo configuration.

    Modules are discovered fresh on every call; nothing is cached between
    commands.
    """

    @property
    def root_file_path(self) -> Path:
        return self.runtime.root / self.static.root_file_name

    def root_config_exists(self) -> bool:
        return self.fs.exists(self.root_file_path)

    def workspace_exists(self) -> bool:
        return self.fs.exists(self.runtime.root / self.static.workspace_file_name)

    def load_root_config(self) -> RootConfig:
        path = self.root_file_path
        data = decode_document(self.fs.read(path), path)
        try:
            return RootConfig.model_validate(data)
        except pydantic.ValidationError as exc:
            raise DecodeError(f"invalid root configuration {path}: {exc}", metadata={"path": str(path)}) from exc

    def write_root_config(self, root_config: RootConfig) -> None:
        path = self.root_file_path
        content = encode_document(root_config.model_dump(mode="json"), path)
        self.fs.write(path, content)
        self.logger.debug("root_config_written", extra=self.log_extra(path=str(path)))

    def load_module_config(self, relative_path: str) -> ModuleConfig:
        """
        Load the module document found in ``relative_path`` (relative to root).

        ``name`` and ``relative_path`` come from the path, never from the file.
        """
        path = self.runtime.root / relative_path / self.static.module_file_name
        data = decode_document(self.fs.read(path), path)
        try:
            module = ModuleConfig.model_validate(data)
        except pydantic.ValidationError as exc:
            raise DecodeError(f"invalid module configuration {path}: {exc}", metadata={"path": str(path)}) from exc
        name = Path(relative_path).name or self.runtime.root.name
        return module.model_copy(update={"name": name, "relative_path": relative_path})

    def module_path(self, module: ModuleConfig) -> Path:
        """Absolute directory of ``module``."""
        return self.runtime.root / module.relative_path

    def discover_modules(self) -> List[ModuleConfig]:
        """
        Walk the tree below the root and load every module found, sorted by name.

        Any failure aborts discovery: it is reported as a console warning and
        re-raised, so callers never see a partial list.

        Raises:
            FilesystemError: The walk or a read failed
            DecodeError: A module document is malformed
            ValidationError: Two module folders share the same base name
        """
        root = self.runtime.root
        modules: List[ModuleConfig] = []
        seen: Dict[str, str] = {}
        try:
            for entry in self.fs.walk(root):
                if not entry.is_dir:
                    continue
                if not self.fs.exists(entry.path / self.static.module_file_name):
                    continue
                relative_path = os.path.relpath(entry.path, root)
                module = self.load_module_config(relative_path)
                if module.name in seen:
                    raise ValidationError(
                        f"module name '{module.name}' is used by both '{seen[module.name]}' and '{relative_path}'",
                        metadata={"module": module.name, "paths": [seen[module.name], relative_path]},
                    )
                seen[module.name] = relative_path
                modules.append(module)
                self.logger.debug(
                    "module_discovered",
                    extra=self.log_extra(module=module.name, path=relative_path),
                )
        except MonoCliError as exc:
            self.console.warning(str(exc))
            self.logger.warning("discovery_failed", extra=self.log_extra(root=str(root), error=str(exc)))
            raise

        modules.sort(key=lambda m: m.name)
        return modules

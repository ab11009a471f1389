"""
monocli System Utilities

Capability interfaces for every side effect the core performs (filesystem
and process execution), their OS-backed implementations, and the
SystemUtils bundle handed to services.
"""

import os
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

from monocli.errors import ExecutionError, FilesystemError
from monocli.logging import ConsoleLogger, get_logger, log_extra

logger = get_logger(__name__)

SHELL = "/bin/sh"


@dataclass(frozen=True)
class WalkEntry:
    """One entry produced by a recursive directory walk."""
    path: Path
    name: str
    is_dir: bool


class Filesystem(ABC):
    """Filesystem operations used by the core."""

    @abstractmethod
    def exists(self, path: Path) -> bool:
        """Return True if anything exists at ``path``."""

    @abstractmethod
    def read(self, path: Path) -> bytes:
        """Return the file's bytes. Raises FilesystemError."""

    @abstractmethod
    def write(self, path: Path, content: bytes) -> None:
        """Write bytes to ``path``, replacing it. Raises FilesystemError."""

    @abstractmethod
    def walk(self, root: Path) -> Iterator[WalkEntry]:
        """
        Yield every entry under ``root``, ``root`` itself first.

        Raises FilesystemError when a directory cannot be listed.
        """


class Executor(ABC):
    """Process execution used by the core."""

    @abstractmethod
    def shell(self, directory: Path, script: str) -> None:
        """Run ``script`` with the shell in ``directory``, streaming its output."""

    @abstractmethod
    def toolchain(self, directory: Path, *args: str) -> None:
        """Run a toolchain sub-command in ``directory``."""


class LocalFilesystem(Filesystem):
    """Filesystem backed by the OS."""

    def exists(self, path: Path) -> bool:
        return os.path.exists(path)

    def read(self, path: Path) -> bytes:
        try:
            return Path(path).read_bytes()
        except OSError as exc:
            raise FilesystemError(f"failed to read {path}: {exc}", metadata={"path": str(path)}) from exc

    def write(self, path: Path, content: bytes) -> None:
        try:
            Path(path).write_bytes(content)
        except OSError as exc:
            raise FilesystemError(f"failed to write {path}: {exc}", metadata={"path": str(path)}) from exc

    def walk(self, root: Path) -> Iterator[WalkEntry]:
        def _raise(error: OSError) -> None:
            raise FilesystemError(
                f"failed to walk {error.filename}: {error.strerror}",
                metadata={"path": str(error.filename)},
            ) from error

        root = Path(root)
        if not root.is_dir():
            raise FilesystemError(f"failed to walk {root}: not a directory", metadata={"path": str(root)})
        yield WalkEntry(path=root, name=root.name, is_dir=True)
        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise):
            dirnames.sort()
            current = Path(dirpath)
            for name in sorted(filenames):
                yield WalkEntry(path=current / name, name=name, is_dir=False)
            for name in dirnames:
                path = current / name
                # symlinked directories are listed but never descended into
                yield WalkEntry(path=path, name=name, is_dir=not path.is_symlink())


class LocalExecutor(Executor):
    """Executor running real child processes, one at a time."""

    def __init__(self, toolchain_binary: str = "go") -> None:
        self.toolchain_binary = toolchain_binary

    def shell(self, directory: Path, script: str) -> None:
        if not os.path.isdir(directory):
            raise ExecutionError(f"directory does not exist: {directory}", metadata={"cwd": str(directory)})
        logger.debug("shell_start", extra=log_extra(cwd=str(directory)))
        try:
            # stdout/stderr are inherited so output streams as it is produced.
            result = subprocess.run([SHELL, "-c", script], cwd=directory)
        except OSError as exc:
            raise ExecutionError(f"failed to start command in {directory}: {exc}") from exc
        if result.returncode != 0:
            raise ExecutionError(
                f"failed to run command in {directory}: exit status {result.returncode}",
                metadata={"cwd": str(directory), "returncode": result.returncode},
            )

    def toolchain(self, directory: Path, *args: str) -> None:
        cmd = [self.toolchain_binary, *args]
        logger.debug("toolchain_start", extra=log_extra(cwd=str(directory), cmd=" ".join(cmd)))
        try:
            result = subprocess.run(
                cmd,
                cwd=directory,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except OSError as exc:
            raise ExecutionError(f"failed to run command: {exc}", metadata={"cmd": cmd}) from exc
        if result.returncode != 0:
            raise ExecutionError(
                f"failed to run command: exit status {result.returncode}\nOutput: {result.stdout}",
                metadata={"cmd": cmd, "returncode": result.returncode},
            )


@dataclass
class SystemUtils:
    """Side-effect utilities that interact with the system."""
    fs: Filesystem
    executor: Executor
    console: ConsoleLogger


def local_system_utils(console: Optional[ConsoleLogger] = None, toolchain_binary: str = "go") -> SystemUtils:
    """Build SystemUtils backed by the real filesystem and processes."""
    return SystemUtils(
        fs=LocalFilesystem(),
        executor=LocalExecutor(toolchain_binary=toolchain_binary),
        console=console or ConsoleLogger(),
    )

import io
import logging
import sys
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

import pytest
from rich.console import Console

# Ensure repository root is on sys.path so the in-tree package imports cleanly.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from monocli.config import RuntimeConfig, StaticConfig  # noqa: E402
from monocli.errors import ExecutionError, FilesystemError  # noqa: E402
from monocli.logging import ConsoleLogger  # noqa: E402
from monocli.services.base import ServiceContext  # noqa: E402
from monocli.services.system import Executor, Filesystem, SystemUtils, WalkEntry  # noqa: E402


class MemoryFilesystem(Filesystem):
    """In-memory filesystem. Directories are implied by the files added."""

    def __init__(self, reverse_walk: bool = True) -> None:
        self.files: Dict[Path, bytes] = {}
        self.dirs = {Path("/")}
        self.writes: List[Path] = []
        self.walk_error_at: Optional[Path] = None
        # Walk in reverse lexical order so tests never depend on walk order.
        self.reverse_walk = reverse_walk

    def add_dir(self, path) -> None:
        path = Path(path)
        self.dirs.add(path)
        self.dirs.update(path.parents)

    def add_file(self, path, content="") -> None:
        path = Path(path)
        self.add_dir(path.parent)
        self.files[path] = content.encode("utf-8") if isinstance(content, str) else content

    def exists(self, path) -> bool:
        path = Path(path)
        return path in self.files or path in self.dirs

    def read(self, path) -> bytes:
        path = Path(path)
        if path not in self.files:
            raise FilesystemError(f"failed to read {path}: no such file")
        return self.files[path]

    def write(self, path, content: bytes) -> None:
        path = Path(path)
        if path.parent not in self.dirs:
            raise FilesystemError(f"failed to write {path}: no such directory")
        self.files[path] = content
        self.writes.append(path)

    def walk(self, root) -> Iterator[WalkEntry]:
        root = Path(root)
        entries = [WalkEntry(path=d, name=d.name, is_dir=True) for d in self.dirs if d == root or root in d.parents]
        entries += [WalkEntry(path=f, name=f.name, is_dir=False) for f in self.files if root in f.parents]
        entries.sort(key=lambda e: str(e.path), reverse=self.reverse_walk)
        for entry in entries:
            if self.walk_error_at is not None and entry.path == self.walk_error_at:
                raise FilesystemError(f"failed to walk {entry.path}: permission denied")
            yield entry


class RecordingExecutor(Executor):
    """Executor that records calls instead of starting processes."""

    def __init__(self) -> None:
        self.shell_calls: List[Tuple[Path, str]] = []
        self.toolchain_calls: List[Tuple[Path, Tuple[str, ...]]] = []
        self.fail_in: Dict[Path, str] = {}

    def shell(self, directory, script: str) -> None:
        directory = Path(directory)
        self.shell_calls.append((directory, script))
        if directory in self.fail_in:
            raise ExecutionError(self.fail_in[directory], metadata={"cwd": str(directory)})

    def toolchain(self, directory, *args: str) -> None:
        self.toolchain_calls.append((Path(directory), args))


def console_output(console: ConsoleLogger) -> str:
    return console.console.file.getvalue()


@pytest.fixture
def memory_fs() -> MemoryFilesystem:
    return MemoryFilesystem()


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def console() -> ConsoleLogger:
    return ConsoleLogger(Console(file=io.StringIO(), soft_wrap=True, color_system=None, highlight=False))


@pytest.fixture
def repo_root() -> Path:
    return Path("/work/repo")


@pytest.fixture
def make_context(memory_fs, executor, console, repo_root):
    """Build a ServiceContext over the in-memory fakes."""

    def _make(root: Optional[Path] = None, wd: Optional[Path] = None, fs: Optional[Filesystem] = None) -> ServiceContext:
        root = root or repo_root
        return ServiceContext(
            static=StaticConfig(),
            runtime=RuntimeConfig(wd=wd or root, root=root),
            system=SystemUtils(fs=fs or memory_fs, executor=executor, console=console),
        )

    return _make


@pytest.fixture
def service_context(make_context) -> ServiceContext:
    return make_context()


@pytest.fixture
def read_console(console):
    """Return everything written to the captured console so far."""
    return lambda: console_output(console)


@pytest.fixture(autouse=True)
def _reset_monocli_logging():
    """CLI invocations bind handlers to CliRunner streams; drop them after each test."""
    yield
    logging.getLogger("monocli").handlers = []

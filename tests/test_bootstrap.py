from pathlib import Path
from unittest.mock import MagicMock

import pytest

from monocli.config import RuntimeConfig, StaticConfig
from monocli.errors import ExecutionError, ValidationError
from monocli.models import RootConfig
from monocli.services.base import ServiceContext
from monocli.services.bootstrap import BootstrapService
from monocli.services.configuration import ConfigurationService
from monocli.services.system import SystemUtils

ROOT = Path("/work/repo")


@pytest.fixture
def bootstrap(service_context, memory_fs):
    memory_fs.add_dir(ROOT)
    return BootstrapService(service_context)


def test_new_root_config_defaults(bootstrap):
    cfg = bootstrap.new_root_config()
    assert cfg.name == "repo"
    assert cfg.version == "0.1.0"
    assert cfg.strategy == "workspace"
    assert cfg.vendor is True


def test_initialize_creates_workspace_and_root_document(bootstrap, memory_fs, executor, service_context, read_console):
    bootstrap.initialize(bootstrap.new_root_config(name="acme", vendor=False))

    assert executor.toolchain_calls == [(ROOT, ("work", "init"))]
    assert memory_fs.writes == [ROOT / "work.toml"]
    loaded = ConfigurationService(service_context).load_root_config()
    assert loaded.name == "acme"
    assert loaded.vendor is False
    assert "monorepo initialized at /work/repo" in read_console()


def test_initialize_keeps_existing_workspace(bootstrap, memory_fs, executor, read_console):
    memory_fs.add_file(ROOT / "go.work", "go 1.22\n")

    bootstrap.initialize(bootstrap.new_root_config())

    assert executor.toolchain_calls == []
    assert "workspace already exists" in read_console()


def test_initialize_twice_fails_without_writing(bootstrap, memory_fs):
    bootstrap.initialize(bootstrap.new_root_config(name="acme"))
    before = dict(memory_fs.files)

    with pytest.raises(ValidationError, match="already exists"):
        bootstrap.initialize(bootstrap.new_root_config(name="other"))

    assert memory_fs.writes == [ROOT / "work.toml"]
    assert memory_fs.files == before


@pytest.mark.parametrize(
    "strategy, message",
    [("rewrite", "unsupported"), ("monolith", "invalid strategy 'monolith'")],
)
def test_initialize_rejects_other_strategies(bootstrap, memory_fs, executor, strategy, message):
    with pytest.raises(ValidationError, match=message):
        bootstrap.initialize(RootConfig(name="acme", strategy=strategy))

    assert memory_fs.writes == []
    assert executor.toolchain_calls == []


def test_toolchain_failure_leaves_no_root_document(memory_fs, console):
    memory_fs.add_dir(ROOT)
    executor = MagicMock()
    executor.toolchain.side_effect = ExecutionError("failed to run command: exit status 1")
    context = ServiceContext(
        static=StaticConfig(),
        runtime=RuntimeConfig(wd=ROOT, root=ROOT),
        system=SystemUtils(fs=memory_fs, executor=executor, console=console),
    )

    with pytest.raises(ExecutionError, match="exit status 1"):
        BootstrapService(context).initialize(RootConfig(name="acme"))

    executor.toolchain.assert_called_once_with(ROOT, "work", "init")
    assert memory_fs.writes == []

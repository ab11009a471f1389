"""
monocli CLI

Click-based command-line interface for monocli.
Provides commands to initialize a monorepo, list its modules and run
scripts across them.
"""

import functools
import sys
from typing import Optional

import click

from monocli import __version__
from monocli.config import load_static_config
from monocli.errors import MonoCliError, NotFoundError, ValidationError
from monocli.logging import EXIT_RUNTIME_ERROR, ConsoleLogger, get_logger, init_cli_logging, log_context, log_extra
from monocli.services.base import ServiceContext
from monocli.services.bootstrap import BootstrapService
from monocli.services.configuration import ConfigurationService, build_runtime_config
from monocli.services.dispatch import DispatchService
from monocli.services.system import local_system_utils
from monocli.services.targets import parse_target_expression, select_modules

logger = get_logger(__name__)


def get_console(ctx: click.Context) -> ConsoleLogger:
    """Console of the current invocation (an injected context wins)."""
    obj = ctx.find_root().obj
    context = obj.get("CONTEXT")
    if context is not None:
        return context.system.console
    if obj.get("CONSOLE") is None:
        obj["CONSOLE"] = ConsoleLogger()
    return obj["CONSOLE"]


def get_service_context(ctx: click.Context) -> ServiceContext:
    """Create (once) the ServiceContext for CLI operations."""
    obj = ctx.find_root().obj
    if obj.get("CONTEXT") is None:
        static = load_static_config()
        system = local_system_utils(console=get_console(ctx), toolchain_binary=static.toolchain)
        runtime = build_runtime_config(system.fs, static)
        obj["CONTEXT"] = ServiceContext(static=static, runtime=runtime, system=system)
    return obj["CONTEXT"].with_metadata(command=ctx.info_name)


def handle_errors(func):
    """Report MonoCliError in fatal style and exit non-zero."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()
        with log_context(command=ctx.info_name):
            try:
                return func(*args, **kwargs)
            except MonoCliError as exc:
                logger.debug("command_failed", extra=log_extra(category=exc.category, error=str(exc)))
                get_console(ctx).fatal(str(exc))
                sys.exit(EXIT_RUNTIME_ERROR)

    return wrapper


def require_monorepo(configuration: ConfigurationService) -> None:
    if not configuration.root_config_exists():
        raise NotFoundError(f"monorepo not found at {configuration.runtime.root}")


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose logging for all commands")
@click.pass_context
def cli(ctx, verbose):
    """A CLI tool to manage monorepos made of independent modules."""
    ctx.ensure_object(dict)
    ctx.obj["VERBOSE"] = verbose
    init_cli_logging(verbose=verbose)


@cli.command()
@click.argument("name", required=False)
@click.pass_context
@handle_errors
def init(ctx, name: Optional[str]):
    """Initialize a new monorepo at the working directory."""
    context = get_service_context(ctx)
    console = context.system.console
    bootstrap = BootstrapService(context)
    bootstrap.ensure_not_initialized()

    name = (name or "").strip()
    if not name:
        name = click.prompt(
            "Enter the monorepo name",
            default=bootstrap.default_name(),
            show_default=True,
        ).strip() or bootstrap.default_name()

    console.info(f"Using {context.static.toolchain} workspace strategy by default (no other option for now)")
    vendor = click.confirm("Do you want to vendor dependencies?", default=True)

    bootstrap.initialize(bootstrap.new_root_config(name=name, vendor=vendor))


@cli.command("list")
@click.pass_context
@handle_errors
def list_modules(ctx):
    """List all modules in the monorepo."""
    context = get_service_context(ctx)
    console = context.system.console
    configuration = ConfigurationService(context)
    require_monorepo(configuration)

    modules = configuration.discover_modules()
    if not modules:
        console.info("no modules found")
        return
    for module in modules:
        console.default(module.name)


@cli.command()
@click.argument("script_name", required=False, default="")
@click.option("--target", default="all", show_default=True, help="Target root or specific modules (comma separated)")
@click.option("--dry-run", is_flag=True, help="Print the commands that would be executed")
@click.option(
    "--allow-missing",
    is_flag=True,
    help="Run the scripts in the modules that have it, even if it is missing in some",
)
@click.pass_context
@handle_errors
def run(ctx, script_name: str, target: str, dry_run: bool, allow_missing: bool):
    """Run a script in a given scope (all modules, some modules, at root)."""
    context = get_service_context(ctx)
    console = context.system.console
    configuration = ConfigurationService(context)
    require_monorepo(configuration)

    if not script_name:
        raise ValidationError("no script name provided, usage: monocli run [script_name]")
    console.verbose(f"running script '{script_name}'")

    console.verbose(f"value for flag allowMissing: {str(allow_missing).lower()}")
    console.verbose(f"value for flag dryRun:       {str(dry_run).lower()}")
    targets = parse_target_expression(target)
    console.verbose(f"value for flag target:       {targets}")

    if targets.is_root:
        console.verbose("running script in root not supported yet")
        return

    modules = select_modules(targets, configuration.discover_modules())
    DispatchService(context, configuration).dispatch(
        script_name,
        modules,
        allow_missing=allow_missing,
        dry_run=dry_run,
    )


@cli.command()
@click.pass_context
@handle_errors
def version(ctx):
    """Print the version of monocli."""
    get_console(ctx).default(__version__)


@cli.command()
@click.pass_context
@handle_errors
def debug(ctx):
    """Give information about the configuration."""
    context = get_service_context(ctx)
    console = context.system.console
    configuration = ConfigurationService(context)

    def header(title: str) -> None:
        console.info("===================")
        console.info(title)
        console.info("===================")

    exists = configuration.root_config_exists()

    header("RUNTIME_CONFIG")
    console.default(f"WD_(COMMAND_RAN_FROM)........{context.runtime.wd}")
    console.default(f"ROOT (OF THE MONOREPO).......{context.runtime.root}")
    console.default(f"MONOREPO EXISTS (AT ROOT)....{str(exists).lower()}")

    header("STATIC_CONFIG")
    console.default(f"MAX RECURSION................{context.static.max_recursion}")
    console.default(f"ROOT FILE NAME...............{context.static.root_file_name}")
    console.default(f"MODULE FILE NAME.............{context.static.module_file_name}")

    if not exists:
        return

    root_config = configuration.load_root_config()
    header("ROOT_CONFIG")
    console.default(f"NAME..........{root_config.name}")
    console.default(f"VERSION.......{root_config.version}")
    console.default(f"STRATEGY......{root_config.strategy}")
    console.default(f"VENDOR........{str(root_config.vendor).lower()}")

    modules = configuration.discover_modules()
    console.default(f"N_MODULES.....{len(modules)}")

    if modules:
        header("MODULES_CONFIG")
    for module in modules:
        console.info(f"MODULE {module.name}")
        console.default(f"MODULE_NAME........ {module.name}")
        console.default(f"MODULE_PATH........ {module.relative_path}")
        if module.scripts:
            console.default("COMMANDS........")
            for key in sorted(module.scripts):
                console.default(f"  {key} -> {module.scripts[key]}")


def main() -> None:
    """Console script entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()

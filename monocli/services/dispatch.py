"""
monocli Dispatch Service

Runs a named script in each targeted module, one module at a time.

Before anything runs, targets are classified into modules that define the
script and modules that don't, and the allow-missing policy decides whether
the run may proceed. Execution stops at the first failure; modules that
already ran are not rolled back.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence

from monocli.errors import ExecutionError, MonoCliError, ValidationError
from monocli.logging import log_context
from monocli.models import ModuleConfig
from monocli.services.base import Service, ServiceContext
from monocli.services.configuration import ConfigurationService


class DispatchState(str, Enum):
    """Lifecycle of a dispatch."""
    IDLE = "idle"
    VALIDATING = "validating"
    CLASSIFYING = "classifying"
    REJECTED = "rejected"
    EXECUTING = "executing"
    COMPLETED = "completed"
    ABORTED = "aborted"


@dataclass
class DispatchResult:
    """Outcome of a dispatch that was allowed to execute."""
    script: str
    ran: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    dry_run: bool = False


class DispatchService(Service):
    """Applies the allow-missing policy and executes scripts sequentially."""

    def __init__(self, context: ServiceContext, configuration: Optional[ConfigurationService] = None) -> None:
        super().__init__(context)
        self.configuration = configuration or ConfigurationService(context)
        self.state = DispatchState.IDLE

    def _transition(self, state: DispatchState) -> None:
        self.logger.debug("dispatch_state", extra=self.log_extra(previous=self.state.value, state=state.value))
        self.state = state

    def dispatch(
        self,
        script_name: str,
        targets: Sequence[ModuleConfig],
        *,
        allow_missing: bool = False,
        dry_run: bool = False,
    ) -> DispatchResult:
        """
        Run ``script_name`` in every module of ``targets``, in order.

        Args:
            script_name: Key of the script in each module's ``scripts`` table
            targets: Modules to run in, already resolved and ordered
            allow_missing: Proceed when some (not all) targets lack the script
            dry_run: Log what would run without starting any process

        Raises:
            ValidationError: No script name, or the policy rejected the run
            ExecutionError: A script failed; remaining modules were not run
        """
        self.state = DispatchState.IDLE
        self._transition(DispatchState.VALIDATING)
        if not script_name:
            self._transition(DispatchState.REJECTED)
            raise ValidationError("no script name provided")

        self._transition(DispatchState.CLASSIFYING)
        self.console.verbose("checking if all modules have the script")
        missing = [module.name for module in targets if not module.has_script(script_name)]
        try:
            self._apply_policy(script_name, targets, missing, allow_missing)
        except ValidationError:
            self._transition(DispatchState.REJECTED)
            raise

        result = DispatchResult(script=script_name, skipped=missing, dry_run=dry_run)
        self._transition(DispatchState.EXECUTING)
        try:
            for module in targets:
                self._run_module(script_name, module, dry_run, result)
        except MonoCliError:
            self._transition(DispatchState.ABORTED)
            raise
        self._transition(DispatchState.COMPLETED)
        return result

    def _apply_policy(
        self,
        script_name: str,
        targets: Sequence[ModuleConfig],
        missing: List[str],
        allow_missing: bool,
    ) -> None:
        # zero targets counts as missing everywhere
        if len(missing) == len(targets):
            raise ValidationError(
                "not running script, because it is missing in all modules",
                metadata={"script": script_name, "targets": len(targets)},
            )
        if missing and not allow_missing:
            raise ValidationError(
                f"not running script '{script_name}', because it is missing in following modules: {', '.join(missing)}",
                metadata={"script": script_name, "missing": missing},
            )
        if missing:
            self.console.verbose(
                f"script '{script_name}' is missing in following modules (but flag allow-missing was passed): {', '.join(missing)}"
            )
        else:
            self.console.verbose("all modules have the script")

    def _run_module(self, script_name: str, module: ModuleConfig, dry_run: bool, result: DispatchResult) -> None:
        script = module.script(script_name)
        if not script:
            self.console.info("script is empty, skipping")
            return

        self.console.info(f"running script {script_name} in module {module.name}")
        if dry_run:
            result.ran.append(module.name)
            return

        directory = self.configuration.module_path(module)
        with log_context(module_name=module.name):
            self.logger.debug("script_start", extra=self.log_extra(script=script_name, cwd=str(directory)))
            try:
                self.executor.shell(directory, script)
            except ExecutionError as exc:
                raise ExecutionError(
                    f"script '{script_name}' failed in module '{module.name}': {exc}",
                    metadata={**exc.metadata, "module": module.name, "script": script_name},
                ) from exc
        result.ran.append(module.name)

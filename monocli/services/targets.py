"""
monocli Target Resolution

Turns the user's target expression (``all``, ``root`` or a comma separated
list of module names) into the ordered list of modules to run in.
"""

from typing import List, Sequence

from monocli.errors import ValidationError
from monocli.logging import get_logger, log_extra
from monocli.models import ROOT_TARGET, ModuleConfig, TargetSet

logger = get_logger(__name__)


def parse_target_expression(expression: str) -> TargetSet:
    """
    Split a target expression on commas.

    Raises:
        ValidationError: ``root`` is combined with other targets
    """
    tokens = expression.split(",")
    if ROOT_TARGET in tokens and len(tokens) > 1:
        raise ValidationError(
            "cannot run script in root and in modules at the same time, you're being too fancy",
            metadata={"targets": tokens},
        )
    return TargetSet(tokens=tokens)


def select_modules(targets: TargetSet, modules: Sequence[ModuleConfig]) -> List[ModuleConfig]:
    """
    Pick the modules named by ``targets``, keeping discovery order.

    ``all`` selects everything and ``root`` selects no module. Names that
    match no module are dropped.
    """
    if targets.is_root:
        return []
    if targets.is_all:
        return list(modules)

    selected = [module for module in modules if module.name in targets.tokens]
    known = {module.name for module in modules}
    unknown = [token for token in targets.tokens if token not in known]
    if unknown:
        logger.debug("unknown_targets_dropped", extra=log_extra(targets=",".join(unknown)))
    return selected


def resolve_targets(expression: str, modules: Sequence[ModuleConfig]) -> List[ModuleConfig]:
    """Parse ``expression`` and select the matching modules."""
    return select_modules(parse_target_expression(expression), modules)

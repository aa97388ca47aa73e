"""
Experimental feature flags.

Some tools are gated behind an experiment: they are only usable when the
caller's experiment flags explicitly enable them.
"""
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional


class ExperimentId(str, Enum):
    """Identifiers of the experimental features."""
    DIFF_STRATEGY = "experimentalDiffStrategy"
    SEARCH_AND_REPLACE = "search_and_replace"
    INSERT_BLOCK = "insert_content"
    POWER_STEERING = "powerSteering"


EXPERIMENT_IDS: frozenset[str] = frozenset(e.value for e in ExperimentId)

# Every experiment is opt-in
EXPERIMENT_DEFAULTS: Mapping[str, bool] = MappingProxyType(
    {e.value: False for e in ExperimentId}
)


def is_experiment_id(value: Any) -> bool:
    """Check whether a value names a known experiment."""
    if isinstance(value, ExperimentId):
        return True
    return isinstance(value, str) and value in EXPERIMENT_IDS


def experiment_enabled(
    experiments: Optional[Mapping[str, Any]],
    experiment: str,
) -> bool:
    """Check whether an experiment is switched on.

    Args:
        experiments: Flags supplied by the caller, keyed by experiment id.
            ``None`` means no experiment is enabled.
        experiment: The experiment id (plain string or ``ExperimentId``).

    Returns:
        True only if the flag for the experiment is present and truthy.
    """
    if not experiments:
        return False
    key = experiment.value if isinstance(experiment, ExperimentId) else experiment
    return bool(experiments.get(key, EXPERIMENT_DEFAULTS.get(key, False)))

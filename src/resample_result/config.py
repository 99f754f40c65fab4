"""
Process-wide configuration for scoring and prediction defaults.

A single ResultConfig instance is active at any time. Scoring code resolves
it through get_config() at call time, so replacing it with set_config() or
temporarily overriding it with config_context() affects every subsequent
call that does not receive an explicit config.
"""

import contextlib
import dataclasses
from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from ezcolorlog import root_logger as logger


def _default_measures() -> Dict[str, List[str]]:
    return {
        "classif": ["classif.ce"],
        "regr": ["regr.mse"],
    }


def _predict_type_map() -> Dict[str, Dict[str, List[str]]]:
    # learner predict_type -> predict types it can deliver, per task type
    return {
        "classif": {
            "response": ["response"],
            "prob": ["response", "prob"],
        },
        "regr": {
            "response": ["response"],
            "se": ["response", "se"],
        },
    }


@dataclass
class ResultConfig:
    """Defaults used when scoring resample results"""

    # Measure ids used when `measures` is omitted, keyed by task type
    default_measures: Dict[str, List[str]] = field(default_factory=_default_measures)

    # Predict sets used when `predict_sets` is omitted
    default_predict_sets: Tuple[str, ...] = ("test",)

    # Task type -> learner predict_type -> supported measure predict types
    predict_type_map: Dict[str, Dict[str, List[str]]] = field(default_factory=_predict_type_map)

    def measures_for(self, task_type: str) -> List[str]:
        """Default measure ids for a task type"""
        if task_type not in self.default_measures:
            raise ValueError(
                f"No default measures for task type '{task_type}'. Available: {list(self.default_measures)}"
            )
        return list(self.default_measures[task_type])

    def supported_predict_types(self, task_type: str, predict_type: str) -> List[str]:
        """Measure predict types a learner with `predict_type` can satisfy"""
        return list(self.predict_type_map.get(task_type, {}).get(predict_type, [predict_type]))


_config = ResultConfig()


def get_config() -> ResultConfig:
    """Return the active process-wide configuration."""
    return _config


def set_config(config: ResultConfig) -> ResultConfig:
    """Replace the active configuration and return the previous one."""
    global _config
    if not isinstance(config, ResultConfig):
        raise TypeError(f"Expected ResultConfig, got: {type(config).__name__}")
    previous, _config = _config, config
    return previous


@contextlib.contextmanager
def config_context(**overrides):
    """Temporarily override fields of the active configuration.

    Usage:
        with config_context(default_measures={"classif": ["classif.acc"]}):
            rr.aggregate()
    """
    previous = get_config()
    updated = dataclasses.replace(previous, **overrides)
    logger.debug(f"Overriding result config: {sorted(overrides)}")
    set_config(updated)
    try:
        yield updated
    finally:
        set_config(previous)

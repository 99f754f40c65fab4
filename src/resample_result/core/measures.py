"""
Measures: named scoring functions plus an aggregation over iterations.

A measure scores each resampling iteration separately (`score`) and
combines a whole result container into one figure (`aggregate`). Scores
are never computed on pooled predictions unless a measure opts into
micro averaging.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Literal, Optional, Sequence, Type, Union

import numpy as np
from ezcolorlog import root_logger as logger
from sklearn.metrics import accuracy_score, mean_absolute_error, mean_squared_error, roc_auc_score

from ..config import ResultConfig, get_config
from ..utils import weighted_mean_std
from .errors import MeasureIncompatibleError
from .predictions import as_predict_sets
from .protocols import ResampleRow

Average = Literal["macro", "macro_weighted", "micro"]
AVERAGES = ("macro", "macro_weighted", "micro")


class Measure(ABC):
    """Abstract base for performance measures"""

    id: str | None = None  # Must be set by subclasses
    task_type: Optional[str] = None  # None = applicable to any task type
    predict_type: str = "response"
    task_properties: frozenset = frozenset()
    minimize: bool = False

    def __init__(
        self,
        predict_sets: Union[str, Sequence[str]] = "test",
        average: Average = "macro",
        aggregator: Optional[Callable[[np.ndarray], float]] = None,
    ):
        if average not in AVERAGES:
            raise ValueError(f"Unknown average: {average}. Must be one of {list(AVERAGES)}")
        self.predict_sets = as_predict_sets(predict_sets)
        self.average = average
        self.aggregator = aggregator or np.mean

    def __repr__(self) -> str:
        return f"<{type(self).__name__}:{self.id}>"

    @abstractmethod
    def score_prediction(self, prediction: Any, task: Any = None, learner: Any = None) -> float:
        """Score a single prediction object"""
        pass

    def score(self, row: ResampleRow) -> float:
        """Score one resampling iteration"""
        prediction = row.prediction_for(self.predict_sets)
        if prediction is None:
            return np.nan
        return float(self.score_prediction(prediction, task=row.task, learner=row.learner))

    def aggregate(self, result) -> float:
        """Aggregate the iterations of a ResampleResult into a single score"""
        match self.average:
            case "macro":
                return float(self.aggregator(measure_score_data(self, result)))
            case "macro_weighted":
                scores = measure_score_data(self, result)
                counts = [_n_obs(row.prediction_for(self.predict_sets)) for row in result.rows()]
                if sum(counts) == 0:
                    return np.nan
                return weighted_mean_std(scores, counts)[0]
            case "micro":
                prediction = result.prediction(self.predict_sets)
                if prediction is None:
                    return np.nan
                return float(self.score_prediction(prediction, task=result.task, learner=None))
            case _:
                raise ValueError(f"Unknown average: {self.average}")

    def check(self, task: Any, learner: Any = None, config: Optional[ResultConfig] = None) -> None:
        """Raise MeasureIncompatibleError if this measure cannot score task/learner"""
        config = config or get_config()
        task_type = getattr(task, "task_type", None)

        if self.task_type is not None and task_type != self.task_type:
            raise MeasureIncompatibleError(
                self.id, f"measure is for task type '{self.task_type}', task has type '{task_type}'"
            )

        missing = set(self.task_properties) - set(getattr(task, "properties", None) or ())
        if missing:
            raise MeasureIncompatibleError(self.id, f"task is missing properties {sorted(missing)}")

        if learner is not None:
            learner_predict_type = getattr(learner, "predict_type", "response")
            supported = config.supported_predict_types(task_type, learner_predict_type)
            if self.predict_type not in supported:
                raise MeasureIncompatibleError(
                    self.id,
                    f"measure needs predict type '{self.predict_type}', "
                    f"learner '{getattr(learner, 'id', learner)}' predicts '{learner_predict_type}'",
                )


def _n_obs(prediction: Any) -> int:
    return 0 if prediction is None else int(prediction.n_obs)


def measure_score_data(measure: Measure, result) -> np.ndarray:
    """One score per row of `result`, in row-store order"""
    return np.array([measure.score(row) for row in result.rows()], dtype=float)


###############################################################################
# Custom measures -------------------------------------------------------------
###############################################################################


class CustomMeasure(Measure):
    """Measure built from user functions

    `score_fn` receives a ResampleRow; `aggregate_fn`, if given, receives the
    whole ResampleResult and replaces the default aggregation.
    """

    def __init__(
        self,
        id: str,
        score_fn: Callable[[ResampleRow], float],
        aggregate_fn: Optional[Callable[[Any], float]] = None,
        task_type: Optional[str] = None,
        predict_type: str = "response",
        task_properties: Iterable[str] = (),
        predict_sets: Union[str, Sequence[str]] = "test",
        average: Average = "macro",
        aggregator: Optional[Callable[[np.ndarray], float]] = None,
        minimize: bool = False,
    ):
        if average == "micro" and aggregate_fn is None:
            raise ValueError("Custom measures score rows, micro averaging needs an aggregate_fn")
        super().__init__(predict_sets=predict_sets, average=average, aggregator=aggregator)
        self.id = id
        self.task_type = task_type
        self.predict_type = predict_type
        self.task_properties = frozenset(task_properties)
        self.minimize = minimize
        self.score_fn = score_fn
        self.aggregate_fn = aggregate_fn

    def score_prediction(self, prediction: Any, task: Any = None, learner: Any = None) -> float:
        """Not supported: `score_fn` works on whole rows, not on bare predictions.

        Micro averaging is only allowed together with an `aggregate_fn`, so
        aggregation never reaches this method.
        """
        raise NotImplementedError(f"Measure '{self.id}' scores rows, not predictions")

    def score(self, row: ResampleRow) -> float:
        return float(self.score_fn(row))

    def aggregate(self, result) -> float:
        if self.aggregate_fn is not None:
            return float(self.aggregate_fn(result))
        return super().aggregate(result)


###############################################################################
# Registry --------------------------------------------------------------------
###############################################################################


class MeasureRegistry:
    """Registry of measures available by id."""

    _measures: Dict[str, Union[Type[Measure], Measure]] = {}

    @classmethod
    def register(cls, measure_class: Type[Measure]) -> Type[Measure]:
        """Decorator to register a measure class."""
        if measure_class.id is None:
            raise ValueError(f"Measure {measure_class.__name__} must define an 'id' class attribute")
        cls._measures[measure_class.id] = measure_class
        return measure_class

    @classmethod
    def add(cls, measure: Measure) -> Measure:
        """Register a measure instance under its id."""
        if not measure.id:
            raise ValueError(f"Measure {measure!r} has no id")
        cls._measures[measure.id] = measure
        return measure

    @classmethod
    def get(cls, measure_id: str) -> Measure:
        """Get a measure instance by id."""
        if measure_id not in cls._measures:
            available = sorted(cls._measures.keys())
            raise ValueError(f"Unknown measure: {measure_id}. Available: {available}")

        entry = cls._measures[measure_id]
        return entry if isinstance(entry, Measure) else entry()

    @classmethod
    def list_measures(cls, task_type: Optional[str] = None) -> List[str]:
        """List registered measure ids, optionally only those for a task type."""
        ids = []
        for measure_id, entry in cls._measures.items():
            if task_type is None or entry.task_type in (None, task_type):
                ids.append(measure_id)
        return sorted(ids)


def as_measures(
    measures: Union[None, str, Measure, Iterable[Union[str, Measure]]],
    task_type: Optional[str] = None,
    config: Optional[ResultConfig] = None,
) -> List[Measure]:
    """Resolve `measures` to a non-empty list of Measure instances.

    None resolves to the configured defaults for `task_type`.
    """
    if measures is None:
        config = config or get_config()
        measures = config.measures_for(task_type)
        logger.debug(f"Using default measures for task type '{task_type}': {measures}")
    elif isinstance(measures, (str, Measure)):
        measures = [measures]

    resolved = [m if isinstance(m, Measure) else MeasureRegistry.get(m) for m in measures]
    if not resolved:
        raise ValueError("At least one measure is required")

    ids = [m.id for m in resolved]
    duplicated = sorted({i for i in ids if ids.count(i) > 1})
    if duplicated:
        raise ValueError(f"Duplicated measure ids: {duplicated}")
    return resolved


def assert_measures(
    measures: List[Measure],
    task: Any,
    learner: Any = None,
    config: Optional[ResultConfig] = None,
) -> List[Measure]:
    """Check every measure against task and learner, returns `measures` unchanged"""
    for m in measures:
        m.check(task, learner, config=config)
    return measures


###############################################################################
# Built-in measures -----------------------------------------------------------
###############################################################################


@MeasureRegistry.register
class ClassifAccuracy(Measure):
    """Fraction of correctly classified observations"""

    id = "classif.acc"
    task_type = "classif"

    def score_prediction(self, prediction, task=None, learner=None) -> float:
        return float(accuracy_score(prediction.truth, prediction.response))


@MeasureRegistry.register
class ClassifError(Measure):
    """Fraction of misclassified observations"""

    id = "classif.ce"
    task_type = "classif"
    minimize = True

    def score_prediction(self, prediction, task=None, learner=None) -> float:
        return 1.0 - float(accuracy_score(prediction.truth, prediction.response))


@MeasureRegistry.register
class ClassifAUC(Measure):
    """Area under the ROC curve for two-class problems

    The positive class is `task.positive` when the task defines one, otherwise
    the first probability column.
    """

    id = "classif.auc"
    task_type = "classif"
    predict_type = "prob"
    task_properties = frozenset({"twoclass"})

    def score_prediction(self, prediction, task=None, learner=None) -> float:
        prob = prediction.prob
        if prob is None:
            raise ValueError(f"Measure '{self.id}' requires class probabilities")
        positive = getattr(task, "positive", None) or prob.columns[0]
        truth = np.asarray(prediction.truth) == positive
        if truth.all() or not truth.any():
            # AUC is undefined with a single class in truth
            return np.nan
        return float(roc_auc_score(truth, prob[positive].to_numpy()))


@MeasureRegistry.register
class RegrMSE(Measure):
    """Mean squared error"""

    id = "regr.mse"
    task_type = "regr"
    minimize = True

    def score_prediction(self, prediction, task=None, learner=None) -> float:
        return float(mean_squared_error(prediction.truth, prediction.response))


@MeasureRegistry.register
class RegrRMSE(Measure):
    id = "regr.rmse"
    task_type = "regr"
    minimize = True

    def score_prediction(self, prediction, task=None, learner=None) -> float:
        return float(np.sqrt(mean_squared_error(prediction.truth, prediction.response)))


@MeasureRegistry.register
class RegrMAE(Measure):
    id = "regr.mae"
    task_type = "regr"
    minimize = True

    def score_prediction(self, prediction, task=None, learner=None) -> float:
        return float(mean_absolute_error(prediction.truth, prediction.response))

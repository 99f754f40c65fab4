"""
Result container for a single resampled evaluation.

A ResampleResult holds one row per resampling iteration: task, trained
learner, resampling scheme, iteration number and predictions (a mapping from
predict set to prediction object). All stored objects are accessed by
reference. Do not modify any of them without copying it first.
"""

import uuid
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Union

import numpy as np
import pandas as pd
from ezcolorlog import root_logger as logger

from ..config import get_config
from ..utils import as_int_list, is_integer
from .errors import InvalidIterationError, SchemaError
from .measures import Measure, as_measures, assert_measures, measure_score_data
from .predictions import as_predict_sets, combine_predictions
from .protocols import ROW_COLUMNS, ResampleRow

MeasuresLike = Union[None, str, Measure, Iterable[Union[str, Measure]]]
ID_COLUMNS = ["task", "task_id", "learner", "learner_id", "resampling", "resampling_id", "iteration", "prediction"]


def as_row_table(data: Any, required: Sequence[str] = ROW_COLUMNS) -> pd.DataFrame:
    """Convert `data` to a DataFrame and check the row-store schema.

    Required columns are moved to the front in `required` order, extra
    columns follow in their original order. Iterations are coerced to int.
    """
    # DataFrame.copy() copies the table only, stored objects stay shared
    df = data.copy() if isinstance(data, pd.DataFrame) else pd.DataFrame(data)

    missing = [c for c in required if c not in df.columns]
    if missing:
        raise SchemaError(f"Row table is missing required columns: {missing}")

    bad = [v for v in df["iteration"].tolist() if not is_integer(v) or int(v) < 1]
    if bad:
        raise SchemaError(f"Iterations must be integers >= 1, got: {bad}")
    df["iteration"] = np.asarray([int(v) for v in df["iteration"].tolist()], dtype=np.int64)

    columns = list(required) + [c for c in df.columns if c not in required]
    return df[columns].reset_index(drop=True)


def _ids(objects: Iterable[Any]) -> List[Optional[str]]:
    return [getattr(o, "id", None) for o in objects]


class ResampleResult:
    """Container for the results of one resampling run

    Usage:
        rr = ResampleResult(table)
        rr.aggregate(["classif.acc"])
        rr.score("classif.ce")
        rr.clone().filter([1, 2])
    """

    def __init__(self, data: Any, uhash: Optional[str] = None):
        """
        Args:
            data: Table with one row per resampling iteration and at least the
                columns task, learner, resampling, iteration and prediction.
                A DataFrame, a mapping of columns or a sequence of row mappings.
            uhash: Unique identity of this result. A fresh UUID if None.
        """
        table = as_row_table(data)

        duplicated = sorted(set(table.loc[table["iteration"].duplicated(), "iteration"].tolist()))
        if duplicated:
            raise SchemaError(f"Iterations must be unique, duplicated: {duplicated}")

        self.data: pd.DataFrame = table.sort_values("iteration", kind="stable").reset_index(drop=True)
        self.uhash = str(uuid.uuid4()) if uhash is None else uhash
        logger.debug(f"Created {self!r} ({self.uhash})")

    def __repr__(self) -> str:
        return f"<ResampleResult> of {len(self)} iterations"

    def __len__(self) -> int:
        return len(self.data)

    def __add__(self, other):
        from .benchmark import combine

        return combine(self, other)

    # =========================================================================
    # Read-only accessors
    # =========================================================================

    @property
    def uhash(self) -> str:
        """Unique identity of this result"""
        return self._uhash

    @uhash.setter
    def uhash(self, value: str):
        if not isinstance(value, str) or not value:
            raise ValueError(f"uhash must be a non-empty string, got: {value!r}")
        self._uhash = value

    @property
    def task(self) -> Any:
        """The task all iterations were run on"""
        return self.data["task"].iloc[0] if len(self.data) else None

    @property
    def learners(self) -> List[Any]:
        """Trained learners, sorted by resampling iteration"""
        return self.data["learner"].tolist()

    @property
    def resampling(self) -> Any:
        """Instantiated resampling scheme"""
        return self.data["resampling"].iloc[0] if len(self.data) else None

    @property
    def iterations(self) -> List[int]:
        return [int(i) for i in self.data["iteration"]]

    @property
    def task_type(self) -> Optional[str]:
        return getattr(self.task, "task_type", None)

    def rows(self) -> Iterator[ResampleRow]:
        """Iterate over the rows as ResampleRow models, in row-store order"""
        extra_cols = [c for c in self.data.columns if c not in ROW_COLUMNS]
        for rec in self.data.to_dict("records"):
            prediction = rec["prediction"]
            if prediction is None:
                prediction = {}
            elif not isinstance(prediction, Mapping):
                # A bare prediction object is taken as the test set
                prediction = {"test": prediction}

            yield ResampleRow(
                task=rec["task"],
                learner=rec["learner"],
                resampling=rec["resampling"],
                iteration=int(rec["iteration"]),
                prediction=dict(prediction),
                extra={c: rec[c] for c in extra_cols},
            )

    def as_data_frame(self) -> pd.DataFrame:
        """Copy of the internal table. Stored objects are not copied."""
        return self.data.copy()

    def clone(self) -> "ResampleResult":
        """Independent container with a copied table, sharing objects and uhash"""
        return ResampleResult(self.data.copy(), uhash=self.uhash)

    # =========================================================================
    # Diagnostics
    # =========================================================================

    @property
    def warnings(self) -> pd.DataFrame:
        """Warnings recorded by the learners, columns `iteration` and `message`.

        An iteration contributes one row per recorded warning.
        """
        return self._diagnostics("warnings")

    @property
    def errors(self) -> pd.DataFrame:
        """Errors recorded by the learners, columns `iteration` and `message`."""
        return self._diagnostics("errors")

    def _diagnostics(self, attr: str) -> pd.DataFrame:
        records = [
            {"iteration": int(iteration), "message": msg}
            for iteration, learner in zip(self.data["iteration"], self.data["learner"])
            for msg in (getattr(learner, attr, None) or [])
        ]
        return pd.DataFrame(records, columns=["iteration", "message"]).astype({"iteration": np.int64})

    # =========================================================================
    # Predictions
    # =========================================================================

    def predictions(self, predict_sets: Union[None, str, Sequence[str]] = None) -> List[Any]:
        """Prediction objects sorted by resampling iteration.

        If multiple predict sets are given, they are combined into a single
        prediction per iteration. Iterations without any of the requested sets
        yield None.
        """
        if predict_sets is None:
            predict_sets = get_config().default_predict_sets
        predict_sets = as_predict_sets(predict_sets)
        return [row.prediction_for(predict_sets) for row in self.rows()]

    def prediction(self, predict_sets: Union[None, str, Sequence[str]] = None) -> Any:
        """Combined prediction of all iterations and all requested predict sets.

        Measures do not operate on this object: they score each iteration
        separately and combine the scores with their aggregation function.
        """
        return combine_predictions(self.predictions(predict_sets))

    # =========================================================================
    # Scoring
    # =========================================================================

    def _resolve_measures(self, measures: MeasuresLike) -> List[Measure]:
        measures = as_measures(measures, task_type=self.task_type)
        learner = self.learners[0] if len(self.data) else None
        return assert_measures(measures, task=self.task, learner=learner)

    def score(self, measures: MeasuresLike = None, ids: bool = True) -> pd.DataFrame:
        """Table with one row per iteration and one score column per measure.

        Args:
            measures: Measures or measure ids. Defaults to the configured
                default measures for the task type.
            ids: Add `task_id`, `learner_id` and `resampling_id` columns.

        Returns:
            New DataFrame; the row store itself is left untouched.
        """
        measures = self._resolve_measures(measures)
        if not isinstance(ids, bool):
            raise TypeError(f"ids must be a bool, got: {ids!r}")

        tab = self.data.copy()
        for m in measures:
            if m.id in tab.columns:
                logger.warning(f"Overwriting existing column '{m.id}' with scores of measure '{m.id}'")
            tab[m.id] = measure_score_data(m, self)

        if ids:
            tab["task_id"] = _ids(tab["task"])
            tab["learner_id"] = _ids(tab["learner"])
            tab["resampling_id"] = _ids(tab["resampling"])
            tab = tab[ID_COLUMNS + [c for c in tab.columns if c not in ID_COLUMNS]]

        return tab

    def aggregate(self, measures: MeasuresLike = None) -> Dict[str, float]:
        """Aggregated score per measure id, using each measure's aggregation."""
        measures = self._resolve_measures(measures)
        scores = {m.id: float(m.aggregate(self)) for m in measures}
        logger.info(f"Aggregated {len(self)} iterations: {scores}")
        return scores

    # =========================================================================
    # Subsetting
    # =========================================================================

    def filter(self, iters: Union[int, Iterable[int]]) -> "ResampleResult":
        """Keep only the iterations in `iters`, modifying this object in place.

        Returns the object itself. Call `clone()` beforehand to keep the
        previous state.
        """
        try:
            iters = as_int_list(iters)
        except ValueError as e:
            raise InvalidIterationError(f"Iterations must be integers: {e}") from e

        if not iters:
            raise InvalidIterationError("At least one iteration is required")

        if not len(self.data):
            raise InvalidIterationError(f"Cannot filter iterations {iters} of an empty result")

        upper = self.resampling.iters
        out_of_range = sorted({i for i in iters if i < 1 or i > upper})
        if out_of_range:
            raise InvalidIterationError(f"Iterations {out_of_range} are outside [1, {upper}]")

        keep = self.data["iteration"].isin(set(iters))
        self.data = self.data[keep].reset_index(drop=True)
        logger.debug(f"Filtered {self.uhash} to iterations {self.iterations}")
        return self

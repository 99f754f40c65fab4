"""
Prediction objects and prediction combination.

TablePrediction is the pandas-backed prediction shipped with the package.
Any object implementing the Prediction protocol (n_obs + combine) can be
stored in a result container instead.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .errors import InvalidSubsetError
from .protocols import PREDICT_SETS, Prediction


PROB_PREFIX = "prob."


@dataclass
class TablePrediction:
    """Per-observation predictions stored as a DataFrame

    Columns: `row_ids`, `truth`, `response` and, for probabilistic
    classification, one `prob.<class>` column per class.
    """

    data: pd.DataFrame

    def __post_init__(self):
        missing = [c for c in ("row_ids", "truth", "response") if c not in self.data.columns]
        if missing:
            raise ValueError(f"Prediction data is missing columns: {missing}")

    @classmethod
    def from_arrays(
        cls,
        row_ids: Sequence,
        truth: Sequence,
        response: Sequence,
        prob: Optional[Union[pd.DataFrame, dict]] = None,
    ) -> "TablePrediction":
        """Create a prediction from aligned arrays; `prob` maps class -> probabilities"""
        data = pd.DataFrame({"row_ids": list(row_ids), "truth": list(truth), "response": list(response)})
        if prob is not None:
            prob = pd.DataFrame(prob)
            for cls_name in prob.columns:
                data[f"{PROB_PREFIX}{cls_name}"] = np.asarray(prob[cls_name], dtype=float)
        return cls(data=data)

    @property
    def n_obs(self) -> int:
        return len(self.data)

    def __len__(self) -> int:
        return self.n_obs

    @property
    def row_ids(self) -> np.ndarray:
        return self.data["row_ids"].to_numpy()

    @property
    def truth(self) -> np.ndarray:
        return self.data["truth"].to_numpy()

    @property
    def response(self) -> np.ndarray:
        return self.data["response"].to_numpy()

    @property
    def prob(self) -> Optional[pd.DataFrame]:
        """Class probabilities with class names as columns, None if not predicted"""
        cols = [c for c in self.data.columns if c.startswith(PROB_PREFIX)]
        if not cols:
            return None
        prob = self.data[cols].copy()
        prob.columns = [c[len(PROB_PREFIX) :] for c in cols]
        return prob

    def combine(self, *others: "TablePrediction") -> "TablePrediction":
        """Stack self and others row-wise, aligning columns by name"""
        frames = [self.data] + [o.data for o in others]
        return TablePrediction(data=pd.concat(frames, ignore_index=True, sort=False))

    def __repr__(self) -> str:
        return f"TablePrediction(n_obs={self.n_obs}, columns={list(self.data.columns)})"


def combine_predictions(predictions: Iterable[Optional[Prediction]]) -> Optional[Prediction]:
    """Combine predictions into one, skipping None entries.

    Returns None if nothing is left to combine.
    """
    parts = [p for p in predictions if p is not None]
    if not parts:
        return None
    if len(parts) == 1:
        return parts[0]
    return parts[0].combine(*parts[1:])


def as_predict_sets(predict_sets: Union[str, Iterable[str]]) -> List[str]:
    """Validate predict sets and return them as a de-duplicated list in request order"""
    if isinstance(predict_sets, str):
        predict_sets = [predict_sets]
    try:
        requested = list(dict.fromkeys(predict_sets))
    except TypeError as e:
        raise InvalidSubsetError(f"Predict sets must be strings, got: {predict_sets!r}") from e

    if not requested:
        raise InvalidSubsetError("At least one predict set is required")

    invalid = [s for s in requested if s not in PREDICT_SETS]
    if invalid:
        raise InvalidSubsetError(f"Unknown predict sets: {invalid}. Must be a subset of {list(PREDICT_SETS)}")
    return requested

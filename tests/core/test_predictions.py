"""
Tests for prediction objects and predict set handling.
"""

import pytest
import numpy as np
import pandas as pd

from resample_result.core.errors import InvalidSubsetError
from resample_result.core.predictions import TablePrediction, as_predict_sets, combine_predictions
from resample_result.core.protocols import Prediction, ResampleRow


class TestTablePrediction:
    """Test the DataFrame-backed prediction"""

    def test_from_arrays(self):
        p = TablePrediction.from_arrays(row_ids=[1, 2, 3], truth=["a", "b", "a"], response=["a", "a", "a"])

        assert p.n_obs == 3
        assert len(p) == 3
        assert list(p.row_ids) == [1, 2, 3]
        assert p.prob is None
        assert isinstance(p, Prediction)

    def test_prob_columns(self):
        p = TablePrediction.from_arrays(
            row_ids=[1, 2], truth=["a", "b"], response=["a", "b"], prob={"a": [0.8, 0.3], "b": [0.2, 0.7]}
        )

        assert list(p.data.columns) == ["row_ids", "truth", "response", "prob.a", "prob.b"]
        assert list(p.prob.columns) == ["a", "b"]
        assert np.allclose(p.prob["b"], [0.2, 0.7])

    def test_missing_columns(self):
        with pytest.raises(ValueError, match="response"):
            TablePrediction(pd.DataFrame({"row_ids": [1], "truth": [1.0]}))

    def test_combine(self):
        """Combination stacks rows and leaves inputs untouched"""
        p1 = TablePrediction.from_arrays(row_ids=[1, 2], truth=[1.0, 2.0], response=[1.5, 2.5])
        p2 = TablePrediction.from_arrays(row_ids=[3], truth=[3.0], response=[2.0])

        combined = p1.combine(p2)

        assert combined.n_obs == 3
        assert list(combined.row_ids) == [1, 2, 3]
        assert p1.n_obs == 2

    def test_combine_missing_columns(self):
        """Probability columns missing in one part are filled with NaN"""
        p1 = TablePrediction.from_arrays(row_ids=[1], truth=["a"], response=["a"], prob={"a": [0.9], "b": [0.1]})
        p2 = TablePrediction.from_arrays(row_ids=[2], truth=["b"], response=["b"])

        combined = p1.combine(p2)

        assert combined.n_obs == 2
        assert np.isnan(combined.prob["a"].iloc[1])


class TestCombinePredictions:
    def test_skips_none(self):
        p = TablePrediction.from_arrays(row_ids=[1], truth=[1.0], response=[1.0])

        assert combine_predictions([None, p, None]) is p
        assert combine_predictions([None, None]) is None
        assert combine_predictions([]) is None

    def test_total_observations(self):
        parts = [TablePrediction.from_arrays(row_ids=range(n), truth=[0.0] * n, response=[0.0] * n) for n in (3, 4, 5)]

        assert combine_predictions(parts).n_obs == 12


class TestPredictSets:
    def test_string(self):
        assert as_predict_sets("test") == ["test"]

    def test_order_and_duplicates(self):
        assert as_predict_sets(["train", "test", "train"]) == ["train", "test"]

    def test_invalid(self):
        with pytest.raises(InvalidSubsetError, match="holdout"):
            as_predict_sets(["test", "holdout"])

    def test_empty(self):
        with pytest.raises(InvalidSubsetError):
            as_predict_sets([])
        with pytest.raises(InvalidSubsetError):
            as_predict_sets(set())

    def test_not_iterable(self):
        with pytest.raises(InvalidSubsetError):
            as_predict_sets(1)


class TestResampleRow:
    """Test the row model"""

    def test_prediction_for(self):
        train = TablePrediction.from_arrays(row_ids=[1, 2], truth=[0.0, 0.0], response=[0.0, 0.0])
        test = TablePrediction.from_arrays(row_ids=[3], truth=[0.0], response=[1.0])
        row = ResampleRow(task=None, learner=None, resampling=None, iteration=1, prediction={"train": train, "test": test})

        assert row.prediction_for(["test"]) is test
        assert row.prediction_for(["train", "test"]).n_obs == 3

    def test_iteration_must_be_positive(self):
        with pytest.raises(ValueError):
            ResampleRow(task=None, learner=None, resampling=None, iteration=0)

    def test_frozen(self):
        row = ResampleRow(task=None, learner=None, resampling=None, iteration=1)
        with pytest.raises(ValueError):
            row.iteration = 2

"""
Pytest configuration and shared fixtures for resample_result tests.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set

import pytest

from resample_result.core.measures import MeasureRegistry
from resample_result.core.predictions import TablePrediction
from resample_result.core.results import ResampleResult


@pytest.fixture
def clean_registry():
    """
    Saves the measure registry and restores it after the test.

    Usage:
        def test_something(clean_registry):
            # Registrations made here are dropped afterwards
            pass
    """
    original_measures = MeasureRegistry._measures.copy()
    try:
        yield
    finally:
        MeasureRegistry._measures = original_measures


########################################################
# Mock collaborators
########################################################


@dataclass(eq=False)
class MockTask:
    id: str = "iris"
    task_type: str = "classif"
    properties: Set[str] = field(default_factory=lambda: {"multiclass"})
    positive: Optional[str] = None


@dataclass(eq=False)
class MockLearner:
    id: str = "classif.featureless"
    task_type: str = "classif"
    predict_type: str = "response"
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


@dataclass(eq=False)
class MockResampling:
    id: str = "cv"
    iters: int = 3


def make_classif_prediction(n_correct: int, n: int = 10, offset: int = 0) -> TablePrediction:
    """Prediction over n observations of class "a", the first n_correct predicted right"""
    return TablePrediction.from_arrays(
        row_ids=range(offset, offset + n),
        truth=["a"] * n,
        response=["a"] * n_correct + ["b"] * (n - n_correct),
    )


@pytest.fixture
def make_rows():
    """Factory for row tables: one row per entry of `correct` (test-set hits out of 10)"""

    def _make(
        correct: Sequence[int] = (9, 8, 10),
        task: Optional[MockTask] = None,
        resampling: Optional[MockResampling] = None,
        learner_id: str = "classif.featureless",
        warnings: Optional[Sequence[Sequence[str]]] = None,
        errors: Optional[Sequence[Sequence[str]]] = None,
        with_train: bool = False,
        iterations: Optional[Sequence[int]] = None,
    ) -> List[dict]:
        task = task or MockTask()
        resampling = resampling or MockResampling(iters=len(correct))
        iterations = iterations or range(1, len(correct) + 1)

        rows = []
        for i, (iteration, n_correct) in enumerate(zip(iterations, correct)):
            learner = MockLearner(
                id=learner_id,
                warnings=list(warnings[i]) if warnings else [],
                errors=list(errors[i]) if errors else [],
            )
            prediction = {"test": make_classif_prediction(n_correct, offset=100 * i)}
            if with_train:
                prediction["train"] = make_classif_prediction(20, n=20, offset=100 * i + 50)
            rows.append(
                {
                    "task": task,
                    "learner": learner,
                    "resampling": resampling,
                    "iteration": iteration,
                    "prediction": prediction,
                }
            )
        return rows

    return _make


@pytest.fixture
def make_result(make_rows):
    """Factory for ResampleResults built from `make_rows`"""

    def _make(uhash: Optional[str] = None, **kwargs) -> ResampleResult:
        return ResampleResult(make_rows(**kwargs), uhash=uhash)

    return _make

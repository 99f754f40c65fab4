"""
Core abstractions for resample result containers.

This module provides the result container for a single resampled evaluation,
the collection type for combining several of them, and the measure and
collaborator interfaces they rely on.
"""

from .protocols import Task, Learner, Resampling, Prediction, ResampleRow, PredictSet, TaskType
from .errors import (
    ResampleResultError,
    SchemaError,
    InvalidSubsetError,
    MeasureIncompatibleError,
    InvalidIterationError,
    IdentityConflictError,
)
from .predictions import TablePrediction, combine_predictions
from .measures import Measure, CustomMeasure, MeasureRegistry, as_measures, assert_measures
from .results import ResampleResult
from .benchmark import BenchmarkResult, as_benchmark_result, combine


__all__ = [
    # Protocol interfaces
    "Task",
    "Learner",
    "Resampling",
    "Prediction",
    "ResampleRow",
    "PredictSet",
    "TaskType",
    # Errors
    "ResampleResultError",
    "SchemaError",
    "InvalidSubsetError",
    "MeasureIncompatibleError",
    "InvalidIterationError",
    "IdentityConflictError",
    # Predictions
    "TablePrediction",
    "combine_predictions",
    # Measures
    "Measure",
    "CustomMeasure",
    "MeasureRegistry",
    "as_measures",
    "assert_measures",
    # Containers
    "ResampleResult",
    "BenchmarkResult",
    "as_benchmark_result",
    "combine",
]

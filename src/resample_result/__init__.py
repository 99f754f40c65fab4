from .core.results import ResampleResult
from .core.benchmark import BenchmarkResult, combine
from .core.measures import Measure, CustomMeasure, MeasureRegistry
from .core.predictions import TablePrediction
from .config import ResultConfig, get_config, set_config, config_context

__all__ = [
    "ResampleResult",
    "BenchmarkResult",
    "combine",
    "Measure",
    "CustomMeasure",
    "MeasureRegistry",
    "TablePrediction",
    "ResultConfig",
    "get_config",
    "set_config",
    "config_context",
]

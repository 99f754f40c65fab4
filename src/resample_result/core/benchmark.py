"""
Collections of resample results.

A BenchmarkResult stacks the rows of several ResampleResults into one table
and tags every row with the uhash of the result it came from. Scoring and
aggregation group by uhash first, each group being an independent
resample result.
"""

from typing import Any, Dict, List, Optional

import pandas as pd
from ezcolorlog import root_logger as logger

from .errors import IdentityConflictError
from .measures import Measure
from .protocols import ROW_COLUMNS
from .results import MeasuresLike, ResampleResult, as_row_table

BENCHMARK_COLUMNS = ROW_COLUMNS + ["uhash"]


class BenchmarkResult:
    """Rows of multiple resample results, tagged by uhash"""

    def __init__(self, data: Any = None, columns: Optional[Dict[str, List[str]]] = None):
        """
        Args:
            data: Row table with the row-store columns plus `uhash`.
            columns: Columns each uhash owns, without `uhash`. Groups not
                listed own every column of the table.
        """
        if data is None:
            data = pd.DataFrame(columns=BENCHMARK_COLUMNS)
        table = as_row_table(data, required=BENCHMARK_COLUMNS)

        duplicated = table.duplicated(["uhash", "iteration"])
        if duplicated.any():
            pairs = table.loc[duplicated, ["uhash", "iteration"]].drop_duplicates()
            raise IdentityConflictError(
                f"Duplicated (uhash, iteration) pairs: {list(pairs.itertuples(index=False, name=None))}"
            )

        self.data: pd.DataFrame = table

        all_columns = [c for c in table.columns if c != "uhash"]
        columns = columns or {}
        self.group_columns: Dict[str, List[str]] = {
            u: [c for c in columns.get(u, all_columns) if c in all_columns] for u in self.uhashes
        }

    def __repr__(self) -> str:
        return f"<BenchmarkResult> of {self.n_resample_results} resample results ({len(self)} rows)"

    def __len__(self) -> int:
        return len(self.data)

    def __add__(self, other):
        return combine(self, other)

    def combine(self, *others) -> "BenchmarkResult":
        """New collection holding the rows of self followed by those of others"""
        return combine(self, *others)

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def uhashes(self) -> List[str]:
        """Unique hashes of the contained resample results, in first-seen order"""
        return list(dict.fromkeys(self.data["uhash"].tolist()))

    @property
    def n_resample_results(self) -> int:
        return len(self.uhashes)

    def resample_result(self, uhash: str) -> ResampleResult:
        """Rebuild the ResampleResult with the given uhash"""
        group = self.data[self.data["uhash"] == uhash]
        if group.empty:
            raise KeyError(f"No resample result with uhash '{uhash}'")

        # Padding from other groups' columns is left out
        return ResampleResult(group[self.group_columns[uhash]], uhash=uhash)

    @property
    def resample_results(self) -> List[ResampleResult]:
        return [self.resample_result(u) for u in self.uhashes]

    @property
    def tasks(self) -> pd.DataFrame:
        """Distinct tasks, columns `task_id` and `task`"""
        return self._distinct("task")

    @property
    def learners(self) -> pd.DataFrame:
        """Distinct learners, columns `learner_id` and `learner`"""
        return self._distinct("learner")

    @property
    def resamplings(self) -> pd.DataFrame:
        """Distinct resamplings, columns `resampling_id` and `resampling`"""
        return self._distinct("resampling")

    def _distinct(self, column: str) -> pd.DataFrame:
        seen: Dict[Any, Any] = {}
        for obj in self.data[column]:
            seen.setdefault(getattr(obj, "id", None), obj)
        return pd.DataFrame({f"{column}_id": list(seen.keys()), column: list(seen.values())})

    def as_data_frame(self) -> pd.DataFrame:
        """Copy of the internal table. Stored objects are not copied."""
        return self.data.copy()

    # =========================================================================
    # Scoring
    # =========================================================================

    def score(self, measures: MeasuresLike = None, ids: bool = True) -> pd.DataFrame:
        """Per-iteration scores of all resample results.

        Each resample result is scored on its own; the tables are stacked with
        leading `nr` (1-based group number) and `uhash` columns.
        """
        measures = _as_measure_list(measures)
        frames = []
        for nr, rr in enumerate(self.resample_results, start=1):
            tab = rr.score(measures, ids=ids)
            tab.insert(0, "uhash", rr.uhash)
            tab.insert(0, "nr", nr)
            frames.append(tab)

        if not frames:
            return pd.DataFrame(columns=["nr"] + BENCHMARK_COLUMNS)
        return pd.concat(frames, ignore_index=True, sort=False)

    def aggregate(self, measures: MeasuresLike = None, ids: bool = True) -> pd.DataFrame:
        """One row per resample result with its aggregated scores."""
        measures = _as_measure_list(measures)
        records = []
        for nr, rr in enumerate(self.resample_results, start=1):
            record: Dict[str, Any] = {"nr": nr, "uhash": rr.uhash, "resample_result": rr}
            if ids:
                record["task_id"] = getattr(rr.task, "id", None)
                record["learner_id"] = getattr(rr.learners[0], "id", None)
                record["resampling_id"] = getattr(rr.resampling, "id", None)
            record["iters"] = len(rr)
            scores = rr.aggregate(measures)
            clashes = sorted(set(scores) & set(record))
            if clashes:
                raise ValueError(f"Measure ids clash with aggregate columns: {clashes}")
            record.update(scores)
            records.append(record)

        return pd.DataFrame(records)


def as_benchmark_result(x: Any) -> BenchmarkResult:
    """Convert a ResampleResult (or BenchmarkResult) to a BenchmarkResult"""
    match x:
        case BenchmarkResult():
            return x
        case ResampleResult():
            return BenchmarkResult(x.data.assign(uhash=x.uhash), columns={x.uhash: list(x.data.columns)})
        case _:
            raise TypeError(f"Cannot convert {type(x).__name__} to BenchmarkResult")


def combine(*objects: Any) -> BenchmarkResult:
    """Combine resample/benchmark results into a new BenchmarkResult.

    Rows are stacked by column name, columns missing from some inputs are
    filled with NaN. Inputs are not modified. The same uhash may not come
    from two different inputs.
    """
    if not objects:
        raise ValueError("At least one result is required")

    results = [as_benchmark_result(x) for x in objects]

    origin: Dict[str, int] = {}
    for i, br in enumerate(results):
        for u in br.uhashes:
            if u in origin:
                raise IdentityConflictError(f"uhash '{u}' is present in inputs {origin[u]} and {i}")
            origin[u] = i

    data = pd.concat([br.data for br in results], ignore_index=True, sort=False)
    columns = {u: cols for br in results for u, cols in br.group_columns.items()}
    combined = BenchmarkResult(data, columns=columns)
    logger.debug(f"Combined {len(objects)} results into {combined!r}")
    return combined


def _as_measure_list(measures: MeasuresLike) -> MeasuresLike:
    # Iterables are consumed once per group, so materialise them up front
    if measures is None or isinstance(measures, (str, Measure)):
        return measures
    return list(measures)

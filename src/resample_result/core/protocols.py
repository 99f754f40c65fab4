"""
Collaborator protocols for resample result containers.

The container never fits, splits, or scores anything itself. It talks to
its collaborators through these interfaces:
- Task: dataset plus target definition
- Learner: trained model with recorded fit diagnostics
- Resampling: scheme producing a fixed number of splits
- Prediction: per-observation output of one predict set, combinable
Measures live in measures.py since they carry shared behaviour.
"""

from typing import Protocol, Optional, List, runtime_checkable, Literal, Dict, Any, Set

from pydantic import BaseModel, ConfigDict, Field


# Type aliases for better ergonomics - define once, use everywhere
PredictSet = Literal["train", "test"]
TaskType = Literal["classif", "regr"]

PREDICT_SETS = ("train", "test")
ROW_COLUMNS = ["iteration", "task", "learner", "resampling", "prediction"]

########################################################
# Collaborators
########################################################


@runtime_checkable
class Task(Protocol):
    """Dataset plus target/objective definition"""

    id: str
    task_type: str  # e.g., "classif", "regr"
    properties: Set[str]  # e.g., {"twoclass"}


@runtime_checkable
class Learner(Protocol):
    """Trained model of one resampling iteration"""

    id: str
    task_type: str
    predict_type: str  # e.g., "response", "prob"

    # Diagnostics recorded while fitting
    warnings: List[str]
    errors: List[str]


@runtime_checkable
class Resampling(Protocol):
    """Instantiated resampling scheme"""

    id: str
    iters: int


@runtime_checkable
class Prediction(Protocol):
    """Predictions of one predict set of one iteration"""

    @property
    def n_obs(self) -> int:
        """Number of predicted observations"""
        ...

    def combine(self, *others: "Prediction") -> "Prediction":
        """Return a new prediction holding self followed by others"""
        ...


########################################################
# Rows
########################################################


class ResampleRow(BaseModel):
    """One resampling iteration as stored in a result container"""

    task: Any = Field(..., description="Task the iteration was run on")
    learner: Any = Field(..., description="Learner trained in this iteration")
    resampling: Any = Field(..., description="Resampling scheme shared by all rows")
    iteration: int = Field(..., ge=1, description="1-based resampling iteration")
    prediction: Dict[str, Any] = Field(default_factory=dict, description="Predict set -> prediction")
    extra: Dict[str, Any] = Field(default_factory=dict, description="Additional columns of the row")

    # Collaborators are arbitrary user objects, shared by reference
    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    def prediction_for(self, predict_sets: List[str]) -> Optional[Any]:
        """Combined prediction for the requested predict sets, None if the row has none of them"""
        from .predictions import combine_predictions

        parts = [self.prediction[s] for s in predict_sets if self.prediction.get(s) is not None]
        if not parts:
            return None
        return combine_predictions(parts)

"""Trial variants: exhaustive and spatially partitioned experiments."""

from typing import Dict, Optional, Type

from capture import CaptureModel

from .base import Experiment, ReceiverRecord, TrialReport, TrialResult
from .basic import BasicExperiment
from .binned import BinnedExperiment
from .grid import GridExperiment
from .recursive import RecursiveGridExperiment

EXPERIMENT_TYPES: Dict[str, Type[Experiment]] = {
    "basic": BasicExperiment,
    "binned": BinnedExperiment,
    "grid": GridExperiment,
    "recursive": RecursiveGridExperiment,
}


def build_experiment(
    experiment_type: str,
    model: CaptureModel,
    cell_size: Optional[float] = None,
    cell_capacity: int = 16,
) -> Experiment:
    """Instantiate the variant named by ``experiment_type`` (case-insensitive)."""
    key = experiment_type.strip().lower()
    if key not in EXPERIMENT_TYPES:
        raise ValueError(
            f"Unknown experiment type '{experiment_type}'; expected one of {sorted(EXPERIMENT_TYPES)}"
        )
    if key in ("binned", "grid"):
        return EXPERIMENT_TYPES[key](model, cell_size=cell_size)
    if key == "recursive":
        return RecursiveGridExperiment(model, cell_capacity=cell_capacity)
    return EXPERIMENT_TYPES[key](model)


__all__ = [
    "Experiment",
    "ReceiverRecord",
    "TrialReport",
    "TrialResult",
    "BasicExperiment",
    "BinnedExperiment",
    "GridExperiment",
    "RecursiveGridExperiment",
    "EXPERIMENT_TYPES",
    "build_experiment",
]

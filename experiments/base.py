# experiments/base.py

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
import time

from capture import CaptureDisk, CaptureModel, solution_points
from coverage_index import CoverageIndex, build_coverage_index
from geometry import Point
from placement import Receiver, place_receivers
from transmitters import Transmitter, copy_transmitters


@dataclass
class TrialResult:
    """Everything one trial produced, plus the metrics derived from it."""

    trial_number: int
    transmitters: List[Transmitter]
    disks: List[CaptureDisk]
    solution_point_count: int
    receivers: List[Receiver]
    seed: Optional[int] = None
    experiment: str = ""
    duration_sec: float = 0.0
    timings: Dict[str, float] = field(default_factory=dict)

    @property
    def total_disks(self) -> int:
        return len(self.disks)

    def coverage_ratio(self, receiver_count: Optional[int] = None) -> float:
        """
        Disks claimed by the first ``receiver_count`` receivers (all of them
        by default) over the disks generated in this trial.
        """
        if not self.disks:
            return 0.0
        receivers = self.receivers if receiver_count is None else self.receivers[:receiver_count]
        return sum(r.score for r in receivers) / len(self.disks)

    def contention(self, receiver_count: int) -> int:
        """Contention of the ``receiver_count``-th receiver (1-based)."""
        return self.receivers[receiver_count - 1].contention

    def summary(self) -> Dict[str, Any]:
        return {
            "trial": self.trial_number,
            "seed": self.seed,
            "experiment": self.experiment,
            "transmitters": len(self.transmitters),
            "disks": len(self.disks),
            "solution_points": self.solution_point_count,
            "receivers": len(self.receivers),
            "coverage": self.coverage_ratio(),
            "duration_sec": self.duration_sec,
        }

    def report(self) -> TrialReport:
        """Lean, picklable copy of what the runner keeps from this trial."""
        return TrialReport(
            trial_number=self.trial_number,
            transmitters=copy_transmitters(self.transmitters),
            receivers=[ReceiverRecord(r.x, r.y, r.score, r.contention) for r in self.receivers],
            total_disks=len(self.disks),
            row=self.summary(),
        )


@dataclass(frozen=True)
class ReceiverRecord:
    x: float
    y: float
    score: int
    contention: int


@dataclass
class TrialReport:
    """
    What crosses the worker boundary for one trial: no disks, no coverage
    index, only positions, receiver scores and the summary row.
    """

    trial_number: int
    transmitters: List[Transmitter]
    receivers: List[ReceiverRecord]
    total_disks: int
    row: Dict[str, Any]

    def coverage_ratio(self, receiver_count: Optional[int] = None) -> float:
        if not self.total_disks:
            return 0.0
        receivers = self.receivers if receiver_count is None else self.receivers[:receiver_count]
        return sum(r.score for r in receivers) / self.total_disks

    def contention(self, receiver_count: int) -> int:
        return self.receivers[receiver_count - 1].contention


class Experiment(ABC):
    """
    One way of running a trial: generate capture disks, derive candidate
    receiver points, index which disks cover each point, then place
    receivers greedily.

    Variants differ only in how the first three steps avoid exhaustive
    pairwise work; their outputs must match the exhaustive ones.
    """

    name = "base"

    def __init__(self, model: CaptureModel):
        self.model = model

    @abstractmethod
    def generate_disks(self, transmitters: Sequence[Transmitter]) -> List[CaptureDisk]:
        """Capture disks over the transmitter pairs, indexed 0..n-1."""
        raise NotImplementedError

    def solution_points(self, disks: Sequence[CaptureDisk]) -> List[Point]:
        """Disk centers plus pairwise intersections. Default: every disk pair."""
        return solution_points(disks, self.model)

    def coverage_index(self, points: Sequence[Point], disks: Sequence[CaptureDisk]) -> CoverageIndex:
        """Point -> covering disks. Default: every (point, disk) pair."""
        return build_coverage_index(points, disks)

    def perform(
        self,
        transmitters: Sequence[Transmitter],
        num_receivers: int,
        trial_number: int = 0,
        seed: Optional[int] = None,
    ) -> TrialResult:
        start = time.time()
        timings: Dict[str, float] = {}

        disks = self.generate_disks(transmitters)
        timings["disks"] = time.time() - start

        mark = time.time()
        points = self.solution_points(disks)
        timings["solution_points"] = time.time() - mark

        mark = time.time()
        index = self.coverage_index(points, disks)
        timings["coverage_index"] = time.time() - mark

        mark = time.time()
        receivers = place_receivers(points, disks, num_receivers, index)
        timings["placement"] = time.time() - mark

        return TrialResult(
            trial_number=trial_number,
            transmitters=list(transmitters),
            disks=disks,
            solution_point_count=len(points),
            receivers=receivers,
            seed=seed,
            experiment=self.name,
            duration_sec=time.time() - start,
            timings=timings,
        )

"""
Cross-trial statistics.

One ``ExperimentStats`` bucket per receiver count collects a coverage-ratio
and a contention sample from every trial that placed at least that many
receivers. Buckets are shared by concurrently finishing trials, so every
bucket guards its sample lists with a lock.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, TextIO
import csv
import threading

import numpy as np

from experiments.base import TrialReport


def _p95(values: Sequence[float]) -> float:
    # Nearest-rank percentile: an observed sample, never an interpolation.
    return float(np.percentile(values, 95, method="inverted_cdf"))


_REDUCERS = {
    "min": lambda v: float(np.min(v)),
    "median": lambda v: float(np.median(v)),
    "mean": lambda v: float(np.mean(v)),
    "p95": _p95,
    "max": lambda v: float(np.max(v)),
}


class ExperimentStats:
    """Samples for one receiver count across all trials of a run."""

    def __init__(self, number_transmitters: int, number_receivers: int):
        self.number_transmitters = number_transmitters
        self.number_receivers = number_receivers
        self._coverage: List[float] = []
        self._contention: List[float] = []
        self._lock = threading.Lock()

    def add_sample(self, coverage: float, contention: float) -> None:
        with self._lock:
            self._coverage.append(float(coverage))
            self._contention.append(float(contention))

    @property
    def samples(self) -> int:
        with self._lock:
            return len(self._coverage)

    def coverage_samples(self) -> List[float]:
        with self._lock:
            return list(self._coverage)

    def contention_samples(self) -> List[float]:
        with self._lock:
            return list(self._contention)

    @staticmethod
    def _reduce(values: List[float], how: str) -> float:
        if not values:
            return 0.0
        return _REDUCERS[how](values)

    def coverage(self, how: str) -> float:
        """Reduce the coverage samples: ``min``, ``median``, ``mean``, ``p95`` or ``max``."""
        return self._reduce(self.coverage_samples(), how)

    def contention(self, how: str) -> float:
        return self._reduce(self.contention_samples(), how)

    def min_coverage(self) -> float:
        return self.coverage("min")

    def median_coverage(self) -> float:
        return self.coverage("median")

    def mean_coverage(self) -> float:
        return self.coverage("mean")

    def p95_coverage(self) -> float:
        return self.coverage("p95")

    def max_coverage(self) -> float:
        return self.coverage("max")

    def min_contention(self) -> float:
        return self.contention("min")

    def median_contention(self) -> float:
        return self.contention("median")

    def mean_contention(self) -> float:
        return self.contention("mean")

    def p95_contention(self) -> float:
        return self.contention("p95")

    def max_contention(self) -> float:
        return self.contention("max")

    def row(self) -> Dict[str, float]:
        coverage = self.coverage_samples()
        contention = self.contention_samples()
        row: Dict[str, float] = {
            "transmitters": self.number_transmitters,
            "receivers": self.number_receivers,
        }
        for how in _REDUCERS:
            row[f"{how}_coverage"] = self._reduce(coverage, how)
        for how in _REDUCERS:
            row[f"{how}_contention"] = self._reduce(contention, how)
        return row


class StatsTable:
    """Buckets for receiver counts 1..max_receivers."""

    def __init__(self, max_receivers: int, number_transmitters: int):
        self.buckets: List[ExperimentStats] = [
            ExperimentStats(number_transmitters, k) for k in range(1, max_receivers + 1)
        ]

    def __len__(self) -> int:
        return len(self.buckets)

    def bucket(self, receiver_count: int) -> ExperimentStats:
        return self.buckets[receiver_count - 1]

    def record(self, result: TrialReport) -> None:
        """Add one sample per receiver count the trial reached."""
        reached = min(len(result.receivers), len(self.buckets))
        for k in range(1, reached + 1):
            self.bucket(k).add_sample(result.coverage_ratio(k), result.contention(k))

    def rows(self) -> List[Dict[str, float]]:
        return [b.row() for b in self.buckets]


STATS_FIELDNAMES = [
    "transmitters",
    "receivers",
    "min_coverage",
    "median_coverage",
    "mean_coverage",
    "p95_coverage",
    "max_coverage",
    "min_contention",
    "median_contention",
    "mean_contention",
    "p95_contention",
    "max_contention",
]


def write_stats_csv(rows: Iterable[Dict[str, float]], f: TextIO) -> None:
    """
    Write summary rows to an open text file: counts as integers, coverage to
    4 decimals and contention to 5.
    """
    writer = csv.DictWriter(f, fieldnames=STATS_FIELDNAMES)
    writer.writeheader()
    for row in rows:
        out: Dict[str, str] = {}
        for key in STATS_FIELDNAMES:
            value = row.get(key, 0)
            if key in ("transmitters", "receivers"):
                out[key] = str(int(value))
            elif key.endswith("_coverage"):
                out[key] = f"{float(value):.4f}"
            else:
                out[key] = f"{float(value):.5f}"
        writer.writerow(out)

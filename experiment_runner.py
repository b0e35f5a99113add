"""
CLI to run receiver-placement trials and summarise them.

Reads a YAML run configuration (experiments/placement.yml by default),
runs ``num_trials`` independent trials on a bounded worker pool, writes each
trial's receivers (and generated transmitters), and writes one CSV row of
coverage/contention statistics per receiver count.
"""

from __future__ import annotations

from concurrent.futures import (
    FIRST_COMPLETED,
    Executor,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    wait,
)
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence
import csv
import os
import random
import sys
import time

from capture import CaptureModel
from experiments import EXPERIMENT_TYPES, TrialReport, TrialResult, build_experiment
from stats import StatsTable, write_stats_csv
from transmitters import (
    PlacementRegion,
    Transmitter,
    copy_transmitters,
    generate_transmitters,
    load_transmitters,
    parse_distribution,
    write_transmitters,
)


DEFAULT_CONFIG = Path(__file__).parent / "experiments" / "placement.yml"


@dataclass(frozen=True)
class PlacementConfig:
    beta: float = 0.5
    max_range_meters: float = 25.0
    universe_width: float = 100.0
    universe_height: float = 100.0
    square_width: Optional[float] = None
    square_height: Optional[float] = None
    num_transmitters: int = 20
    num_receivers: int = 5
    num_trials: int = 10
    num_threads: int = 0
    transmitter_distribution: str = "uniform"
    experiment_type: str = "basic"
    cell_size: Optional[float] = None
    cell_capacity: int = 16
    seed: int = 42
    output_base_path: str = ""
    output_file: str = "stats.csv"
    receivers_file: str = "receivers.txt"
    transmitters_file: str = ""
    runs_file: str = ""
    drain_timeout_sec: float = 60.0

    @property
    def placement_width(self) -> float:
        return self.universe_width if self.square_width is None else self.square_width

    @property
    def placement_height(self) -> float:
        return self.universe_height if self.square_height is None else self.square_height

    def validate(self) -> None:
        """
        Reject invalid settings before any trial runs.

        Raises:
            ValueError: describing the first invalid setting found.
        """
        if not 0.0 < self.beta < 1.0:
            raise ValueError(f"beta must be in (0, 1), got {self.beta}")
        if self.max_range_meters <= 0:
            raise ValueError(f"max_range_meters must be positive, got {self.max_range_meters}")
        if self.universe_width <= 0 or self.universe_height <= 0:
            raise ValueError("universe_width and universe_height must be positive")
        if self.placement_width <= 0 or self.placement_height <= 0:
            raise ValueError("square_width and square_height must be positive")
        if self.placement_width > self.universe_width or self.placement_height > self.universe_height:
            raise ValueError("placement square must fit inside the universe")
        for name in ("num_transmitters", "num_receivers", "num_trials"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be non-negative, got {getattr(self, name)}")
        if self.experiment_type.strip().lower() not in EXPERIMENT_TYPES:
            raise ValueError(
                f"Unknown experiment type '{self.experiment_type}'; expected one of {sorted(EXPERIMENT_TYPES)}"
            )
        if self.cell_size is not None and self.cell_size <= 0:
            raise ValueError(f"cell_size must be positive, got {self.cell_size}")
        if self.cell_capacity < 1:
            raise ValueError(f"cell_capacity must be at least 1, got {self.cell_capacity}")
        if self.drain_timeout_sec < 0:
            raise ValueError("drain_timeout_sec must be non-negative")
        parse_distribution(self.transmitter_distribution)

    def capture_model(self) -> CaptureModel:
        return CaptureModel(
            beta=self.beta,
            max_range_meters=self.max_range_meters,
            universe_width=self.universe_width,
            universe_height=self.universe_height,
        )

    def region(self) -> PlacementRegion:
        return PlacementRegion(
            universe_width=self.universe_width,
            universe_height=self.universe_height,
            square_width=self.placement_width,
            square_height=self.placement_height,
        )

    def resolve(self, name: str) -> Path:
        """Path of an output/input file relative to ``output_base_path``."""
        base = self.output_base_path.strip()
        return Path(base) / name if base else Path(name)

    def thread_count(self) -> int:
        if self.num_threads < 1:
            return os.cpu_count() or 1
        return self.num_threads


def load_config(path: Path) -> PlacementConfig:
    import yaml  # type: ignore

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Malformed YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top of {path}")
    known = {f.name for f in fields(PlacementConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")
    return PlacementConfig(**data)


@dataclass
class RunSummary:
    stats: StatsTable
    results: List[Dict[str, Any]] = field(default_factory=list)
    abandoned: int = 0
    interrupted: bool = False
    duration_sec: float = 0.0


def run_trial(
    config: PlacementConfig,
    trial_number: int,
    transmitters: Optional[Sequence[Transmitter]] = None,
) -> TrialResult:
    """
    Run one independent trial.

    The trial RNG is seeded with ``config.seed + trial_number``. Given
    ``transmitters`` are copied so their disk lists start empty; otherwise
    transmitters are generated from the configured distribution.
    """
    seed = config.seed + trial_number
    rng = random.Random(seed)
    if transmitters is None:
        txers = generate_transmitters(
            config.num_transmitters, config.transmitter_distribution, config.region(), rng
        )
    else:
        txers = copy_transmitters(transmitters)

    experiment = build_experiment(
        config.experiment_type,
        config.capture_model(),
        cell_size=config.cell_size,
        cell_capacity=config.cell_capacity,
    )
    return experiment.perform(txers, config.num_receivers, trial_number=trial_number, seed=seed)


def run_trial_report(
    config: PlacementConfig,
    trial_number: int,
    transmitters: Optional[Sequence[Transmitter]] = None,
) -> TrialReport:
    """Worker entry point: run one trial and keep only what the parent records."""
    return run_trial(config, trial_number, transmitters).report()


def run_experiments(config: PlacementConfig, executor: Optional[Executor] = None) -> RunSummary:
    """
    Run every trial of ``config`` and write the summary outputs.

    At most one trial per worker is in flight; a finished trial is merged
    into the statistics and replaced by the next one. After the last
    submission the run waits at most ``drain_timeout_sec`` for stragglers,
    which are then abandoned. A KeyboardInterrupt abandons in-flight trials
    but still writes statistics for the completed ones. A trial that raises,
    or whose files cannot be written, is reported and counted as abandoned.

    Trials run in worker processes unless ``executor`` is given; the pool
    created here has its workers terminated when trials are abandoned.

    Raises:
        ValueError: for an invalid configuration.
        OSError: if the summary file cannot be written; nothing has run yet.
    """
    config.validate()
    start = time.time()

    stats_path = config.resolve(config.output_file)
    stats_path.parent.mkdir(parents=True, exist_ok=True)
    with stats_path.open("w", newline="") as stats_file:
        loaded = _load_input_transmitters(config)
        number_transmitters = len(loaded) if loaded else config.num_transmitters
        summary = RunSummary(stats=StatsTable(config.num_receivers, number_transmitters))

        workers = config.thread_count()
        print(
            f"[run] {config.num_trials} trials, {number_transmitters} transmitters, "
            f"experiment={config.experiment_type} workers={workers}"
        )
        _warn_if_inexact(config)

        if executor is None:
            pool = _open_pool(workers)
            try:
                _run_trials(config, loaded, pool, summary)
            finally:
                if summary.abandoned or summary.interrupted:
                    _terminate_pool(pool)
                else:
                    pool.shutdown(wait=True)
        else:
            _run_trials(config, loaded, executor, summary)

        write_stats_csv(summary.stats.rows(), stats_file)

    if config.runs_file:
        write_runs_csv(summary.results, config.resolve(config.runs_file))

    summary.duration_sec = time.time() - start
    print(f"[run] completed {len(summary.results)} trials in {summary.duration_sec:.2f}s")
    return summary


def _open_pool(workers: int) -> Executor:
    try:
        return ProcessPoolExecutor(max_workers=workers)
    except (PermissionError, NotImplementedError, OSError) as exc:
        print(f"[run] process pool unavailable ({exc}), falling back to threads")
        return ThreadPoolExecutor(max_workers=workers)


def _terminate_pool(pool: Executor) -> None:
    """
    Shut ``pool`` down without waiting for the trials still running in it.

    Worker processes are terminated so an abandoned trial cannot keep the
    interpreter alive; threads cannot be stopped and finish on their own.
    """
    terminate_workers = getattr(pool, "terminate_workers", None)
    if terminate_workers is not None:
        terminate_workers()
        return
    for process in list((getattr(pool, "_processes", None) or {}).values()):
        process.terminate()
    pool.shutdown(wait=False, cancel_futures=True)


def _load_input_transmitters(config: PlacementConfig) -> Optional[List[Transmitter]]:
    if not config.transmitters_file.strip():
        return None
    path = config.resolve(config.transmitters_file.strip())
    if not path.exists():
        return None
    loaded = load_transmitters(path)
    if loaded:
        print(f"[run] using {len(loaded)} transmitters from {path}")
    return loaded or None


def _warn_if_inexact(config: PlacementConfig) -> None:
    kind = config.experiment_type.strip().lower()
    if kind in ("binned", "grid") and config.cell_size is not None:
        cutoff = 2 * config.max_range_meters
        if config.cell_size < cutoff:
            print(
                f"[run] cell_size={config.cell_size} is below the range cutoff {cutoff}; "
                "transmitter pairs further apart than one cell may be missed"
            )


def _run_trials(
    config: PlacementConfig,
    loaded: Optional[List[Transmitter]],
    executor: Executor,
    summary: RunSummary,
) -> None:
    total = config.num_trials
    submitted = 0
    in_flight: Dict[Future, int] = {}
    max_parallel = getattr(executor, "_max_workers", None) or config.thread_count()
    deadline: Optional[float] = None

    def submit_next() -> None:
        nonlocal submitted
        future = executor.submit(run_trial_report, config, submitted, loaded)
        in_flight[future] = submitted
        submitted += 1

    try:
        while submitted < total and len(in_flight) < max_parallel:
            submit_next()

        while in_flight:
            if submitted >= total and deadline is None:
                deadline = time.monotonic() + config.drain_timeout_sec
            timeout = None if deadline is None else max(0.0, deadline - time.monotonic())

            done, _pending = wait(in_flight.keys(), timeout=timeout, return_when=FIRST_COMPLETED)
            if not done:
                print(
                    f"[run] timed out after {config.drain_timeout_sec:.0f}s waiting for "
                    f"{len(in_flight)} trials; abandoning them"
                )
                summary.abandoned += len(in_flight)
                for future in in_flight:
                    future.cancel()
                in_flight.clear()
                break

            for future in done:
                trial_number = in_flight.pop(future)
                try:
                    _record_trial(config, future.result(), summary, generated=loaded is None)
                except Exception as exc:
                    print(f"[run] failed trial={trial_number}: {exc}")
                    summary.abandoned += 1

                if submitted < total:
                    submit_next()
    except KeyboardInterrupt:
        print(f"[run] interrupted; abandoning {len(in_flight)} in-flight trials")
        summary.interrupted = True
        summary.abandoned += len(in_flight) + (total - submitted)
        for future in in_flight:
            future.cancel()


def _trial_file(config: PlacementConfig, name: str, trial_number: int) -> Path:
    prefix = str(trial_number) if config.num_trials > 1 else ""
    return config.resolve(prefix + name)


def _record_trial(config: PlacementConfig, report: TrialReport, summary: RunSummary, generated: bool) -> None:
    write_receivers(_trial_file(config, config.receivers_file, report.trial_number), report)
    if generated and config.transmitters_file.strip():
        write_transmitters(
            _trial_file(config, config.transmitters_file.strip(), report.trial_number),
            report.transmitters,
        )
    summary.stats.record(report)
    row = report.row
    summary.results.append(row)
    print(
        f"[run] completed trial={row['trial']} disks={row['disks']} receivers={row['receivers']} "
        f"coverage={row['coverage']:.3f} duration={row['duration_sec']:.2f}s"
    )


def write_receivers(path: Path, report: TrialReport) -> None:
    """One ``x y coveredDiskCount`` line per receiver, in selection order."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w") as f:
        for rx in report.receivers:
            f.write(f"{rx.x:.2f} {rx.y:.2f} {rx.score:d}\n")


def write_runs_csv(results: Iterable[Dict[str, Any]], path: Path) -> None:
    """
    Write per-trial summary rows to CSV for downstream analysis.
    """
    fieldnames = [
        "trial",
        "seed",
        "experiment",
        "transmitters",
        "disks",
        "solution_points",
        "receivers",
        "coverage",
        "duration_sec",
    ]
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        for res in sorted(results, key=lambda r: r["trial"]):
            writer.writerow({key: res.get(key) for key in fieldnames})


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(sys.argv[1:] if argv is None else argv)
    config_path = Path(args[0]) if args else DEFAULT_CONFIG
    print(f"[run] using configuration file {config_path}")

    try:
        config = load_config(config_path)
    except (OSError, ValueError) as exc:
        print(f"[run] unable to load configuration {config_path}: {exc}", file=sys.stderr)
        return 2

    try:
        summary = run_experiments(config)
    except ValueError as exc:
        print(f"[run] invalid configuration: {exc}", file=sys.stderr)
        return 2
    except OSError as exc:
        print(f"[run] unable to write output: {exc}", file=sys.stderr)
        return 1

    print(f"Wrote statistics to {config.resolve(config.output_file)}")
    if summary.interrupted:
        return 130
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

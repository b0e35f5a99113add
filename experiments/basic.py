from __future__ import annotations

from typing import List, Sequence

from capture import CaptureDisk, generate_capture_disks
from experiments.base import Experiment
from transmitters import Transmitter


class BasicExperiment(Experiment):
    """Exhaustive trial: all transmitter pairs, all disk pairs, all point/disk pairs."""

    name = "basic"

    def generate_disks(self, transmitters: Sequence[Transmitter]) -> List[CaptureDisk]:
        return generate_capture_disks(transmitters, self.model)

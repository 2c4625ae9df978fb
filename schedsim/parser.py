"""Job sources feeding the scheduler.

File format (JSON)::

    {"jobs": [{"timestamp": 0, "processing_time": [3, 2]},
              {"timestamp": 1, "processing_time": [5, 4]}]}

Job ids are assigned in arrival order (stable with respect to file order).
"""

from __future__ import annotations

import json
import logging
from typing import Iterable

from schedsim.models import Job

logger = logging.getLogger("schedsim.parser")


class InvalidJobFileError(ValueError):
    """Raised when a job file is malformed."""


class NumberOfMachinesMismatch(ValueError):
    """Raised when processing-time vectors do not match the machine count."""


class JobSource:
    """In-memory job source releasing jobs as simulated time reaches them.

    Args:
        jobs: Jobs to release. They are delivered in ``(arrival_time, id)``
            order.
    """

    def __init__(self, jobs: Iterable[Job]):
        self._jobs: list[Job] = sorted(jobs, key=lambda j: (j.arrival_time, j.id))
        self._next = 0

    @property
    def job_array(self) -> list[Job]:
        return list(self._jobs)

    @property
    def num_machines(self) -> int | None:
        """Length of the processing-time vectors (``None`` without jobs)."""
        if not self._jobs:
            return None
        return len(self._jobs[0].processing_time)

    def check_validity(self, num_machines: int) -> bool:
        """Verify every job carries exactly ``num_machines`` processing times.

        Raises:
            NumberOfMachinesMismatch: On the first job with a different length.
        """
        for job in self._jobs:
            if len(job.processing_time) != num_machines:
                raise NumberOfMachinesMismatch(
                    f"Job {job.id} has {len(job.processing_time)} processing times, "
                    f"expected {num_machines}"
                )
        return True

    def get_jobs(self, timestamp: int) -> list[Job]:
        """Return every not yet delivered job with ``arrival_time <= timestamp``."""
        released: list[Job] = []
        while self._next < len(self._jobs) and self._jobs[self._next].arrival_time <= timestamp:
            released.append(self._jobs[self._next])
            self._next += 1
        if released:
            logger.debug("t=%s released jobs %s", timestamp, [j.id for j in released])
        return released

    def done(self) -> bool:
        """True once every job has been delivered."""
        return self._next >= len(self._jobs)


def _parse_entry(idx: int, entry: object) -> tuple[int, list[int]]:
    if not isinstance(entry, dict):
        raise InvalidJobFileError(f"Job entry {idx} is not an object")
    timestamp = entry.get("timestamp")
    times = entry.get("processing_time")
    if isinstance(timestamp, bool) or not isinstance(timestamp, int) or timestamp < 0:
        raise InvalidJobFileError(f"Job entry {idx}: invalid timestamp {timestamp!r}")
    if not isinstance(times, list) or not times:
        raise InvalidJobFileError(f"Job entry {idx}: processing_time must be a non-empty list")
    for t in times:
        if isinstance(t, bool) or not isinstance(t, int) or t < 0:
            raise InvalidJobFileError(f"Job entry {idx}: invalid processing time {t!r}")
    return timestamp, times


def load_jobs(file_path: str) -> list[Job]:
    """Parse a JSON job file into jobs with ids in arrival order.

    Raises:
        FileNotFoundError: If the file does not exist.
        InvalidJobFileError: On malformed content or inconsistent vector lengths.
    """
    with open(file_path, "r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidJobFileError(f"{file_path}: not valid JSON ({e})") from e

    entries = data.get("jobs") if isinstance(data, dict) else None
    if not isinstance(entries, list):
        raise InvalidJobFileError(f"{file_path}: missing 'jobs' list")

    parsed = [_parse_entry(idx, entry) for idx, entry in enumerate(entries)]
    lengths = {len(times) for _, times in parsed}
    if len(lengths) > 1:
        raise InvalidJobFileError(f"{file_path}: processing_time lengths differ {sorted(lengths)}")

    # sorted() is stable, so equal timestamps keep file order
    parsed.sort(key=lambda p: p[0])
    return [Job(id=i, arrival_time=ts, processing_time=times) for i, (ts, times) in enumerate(parsed)]


class JsonInputHandler(JobSource):
    """Job source backed by a JSON job file."""

    def __init__(self, file_path: str):
        self.file_path = file_path
        super().__init__(load_jobs(file_path))
        logger.info("Loaded %d jobs from %s", len(self._jobs), file_path)

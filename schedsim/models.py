"""Core data structures for the unrelated-machines simulation.

This module defines:
    Job          -- immutable job with one processing time per machine.
    Machine      -- mutable runtime state of a single machine.
    ScheduleStep -- write-once (timestamp, job_id, machine_id) assignment fact.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, eq=False)
class Job:
    """Immutable job of the unrelated machines model.

    Attributes:
        id: Unique non-negative identifier across the whole run.
        arrival_time: Simulated timestamp at which the job becomes schedulable.
        processing_time: processing_time[m] -> duration on machine ``m``.
            Entries need not be related across machines.
    """

    id: int
    arrival_time: int
    processing_time: tuple[int, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        # accept any sequence from the producer but keep the job hashable/immutable
        object.__setattr__(self, "processing_time", tuple(self.processing_time))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Job):
            return NotImplemented
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        times = " ".join(str(t) for t in self.processing_time)
        return f"Job {self.id} (arrival={self.arrival_time}) times=[{times}]"


@dataclass
class Machine:
    """Mutable machine state.

    A machine is either fully free (``current_job_id`` and ``remaining_time``
    both ``None``) or fully busy (both set). ``remaining_time == 0`` is a
    legitimate busy state that the next time advance turns into free.
    """

    id: int
    current_job_id: int | None = None
    remaining_time: int | None = None

    def is_free(self) -> bool:
        return self.remaining_time is None

    def execute(self, job: Job) -> None:
        """Start ``job`` on this machine (caller guarantees it is free)."""
        assert self.is_free(), f"machine {self.id} is busy with job {self.current_job_id}"
        assert 0 <= self.id < len(job.processing_time), (
            f"job {job.id} has no processing time for machine {self.id}"
        )
        self.current_job_id = job.id
        self.remaining_time = job.processing_time[self.id]

    def set_free(self) -> None:
        self.current_job_id = None
        self.remaining_time = None

    def __str__(self) -> str:
        if self.is_free():
            return f"Machine {self.id}: free"
        return f"Machine {self.id}: job={self.current_job_id} remaining={self.remaining_time}"


@dataclass(frozen=True)
class ScheduleStep:
    """Single assignment of a job onto a machine.

    Fields:
        timestamp: Simulated time of the assignment (job start).
        job_id: Identifier of the placed job.
        machine_id: Machine the job was placed on.
    """

    timestamp: int
    job_id: int
    machine_id: int

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.timestamp, self.job_id, self.machine_id)

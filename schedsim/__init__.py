"""Core package for the unrelated-machines scheduling simulator.

Exports base data structures, the greedy engine and job sources.
"""

from schedsim.models import Job, Machine, ScheduleStep  # noqa: F401
from schedsim.parser import JobSource, JsonInputHandler  # noqa: F401
from schedsim.scheduler import GreedyUnrelatedScheduler  # noqa: F401
from schedsim.simulation import run_simulation  # noqa: F401

__all__ = [
    "GreedyUnrelatedScheduler",
    "Job",
    "JobSource",
    "JsonInputHandler",
    "Machine",
    "ScheduleStep",
    "run_simulation",
]

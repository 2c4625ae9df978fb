"""Time-stepped driver loop around the greedy scheduler.

Each turn fetches the jobs released for the current timestamp, lets the
scheduler place what it can, then advances simulated time by ``time_step``.
The run ends once the job source and the scheduler both report completion.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from schedsim.models import Job, Machine, ScheduleStep
from schedsim.parser import JobSource
from schedsim.scheduler import GreedyUnrelatedScheduler

logger = logging.getLogger("schedsim.simulation")


class SimulationStalled(RuntimeError):
    """Raised when a run does not finish within ``max_turns`` turns."""

    def __init__(self, turns: int, pending_job_ids: List[int]):
        super().__init__(
            f"Simulation not finished after {turns} turns, pending jobs: {pending_job_ids}"
        )
        self.turns = turns
        self.pending_job_ids = pending_job_ids


@dataclass
class SimulationResult:
    steps: List[ScheduleStep]
    jobs: Dict[int, Job]
    num_machines: int
    turns: int
    end_time: int
    makespan: int = 0
    machines: List[Machine] = field(default_factory=list)

    def machine_loads(self) -> Dict[int, int]:
        """Total processing time assigned to each machine."""
        loads = {m: 0 for m in range(self.num_machines)}
        for step in self.steps:
            loads[step.machine_id] += self.jobs[step.job_id].processing_time[step.machine_id]
        return loads

    def flow_times(self) -> Dict[int, int]:
        """Waiting time (start - arrival) per placed job."""
        return {
            step.job_id: step.timestamp - self.jobs[step.job_id].arrival_time
            for step in self.steps
        }


def make_machines(num_machines: int) -> List[Machine]:
    return [Machine(id=i) for i in range(num_machines)]


def compute_makespan(steps: List[ScheduleStep], jobs: Dict[int, Job]) -> int:
    return max(
        (s.timestamp + jobs[s.job_id].processing_time[s.machine_id] for s in steps),
        default=0,
    )


def run_simulation(
    source: JobSource,
    num_machines: int,
    time_step: int = 1,
    scheduler: Optional[GreedyUnrelatedScheduler] = None,
    max_turns: Optional[int] = None,
    on_step: Optional[Callable[[ScheduleStep], None]] = None,
) -> SimulationResult:
    """Run the scheduler against ``source`` until everything is processed.

    Args:
        source: Job source exposing ``get_jobs``, ``done`` and ``check_validity``.
        num_machines: Size of the machine bank.
        time_step: Simulated time elapsed between two turns (> 0).
        scheduler: Engine to drive; a fresh one is created when omitted.
        max_turns: Optional bound on the number of turns.
        on_step: Optional callback invoked for every emitted schedule step.

    Returns:
        SimulationResult with the emitted steps in order.

    Raises:
        ValueError: If ``time_step`` or ``num_machines`` is not positive.
        NumberOfMachinesMismatch: If the source jobs do not fit the bank.
        SimulationStalled: If ``max_turns`` is exceeded.
    """
    if time_step <= 0:
        raise ValueError(f"time_step must be positive, got {time_step}")
    if num_machines <= 0:
        raise ValueError(f"num_machines must be positive, got {num_machines}")
    source.check_validity(num_machines)
    if scheduler is None:
        scheduler = GreedyUnrelatedScheduler()

    machines = make_machines(num_machines)
    jobs: Dict[int, Job] = {}
    steps: List[ScheduleStep] = []
    now = 0
    turns = 0
    while True:
        if max_turns is not None and turns >= max_turns:
            raise SimulationStalled(turns, [j.id for j in scheduler.pending_jobs])
        new_jobs = source.get_jobs(now)
        for job in new_jobs:
            jobs[job.id] = job
        for step in scheduler.schedule(new_jobs, machines, now):
            steps.append(step)
            if on_step is not None:
                on_step(step)
        scheduler.advance_time(machines, time_step)
        now += time_step
        turns += 1
        if source.done() and scheduler.done():
            break

    makespan = compute_makespan(steps, jobs)
    logger.info(
        "Simulation finished: jobs=%d machines=%d turns=%d makespan=%d",
        len(jobs),
        num_machines,
        turns,
        makespan,
    )
    return SimulationResult(
        steps=steps,
        jobs=jobs,
        num_machines=num_machines,
        turns=turns,
        end_time=now,
        makespan=makespan,
        machines=machines,
    )

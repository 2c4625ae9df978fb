"""Greedy scheduler for unrelated machines with real-time job arrival.

Pending jobs are kept in an accumulation list used as a stack: each
matching step takes the most recently arrived job and places it on the free
machine where it runs fastest. This is a list-scheduling heuristic, it does
not search all (job, machine) pairs for the best match.
"""

from __future__ import annotations

import logging
from typing import Iterable, Sequence

from schedsim.models import Job, Machine, ScheduleStep

logger = logging.getLogger("schedsim.scheduler")


class GreedyUnrelatedScheduler:
    """Matching and time-advance engine.

    Usage per simulated turn::

        steps = scheduler.schedule(new_jobs, machines, now)
        scheduler.advance_time(machines, elapsed)
        if source.done() and scheduler.done(): ...
    """

    def __init__(self) -> None:
        self._accumulated_jobs: list[Job] = []
        self._is_done = False

    @property
    def pending_jobs(self) -> tuple[Job, ...]:
        """Jobs not placed yet, oldest first."""
        return tuple(self._accumulated_jobs)

    def schedule(
        self,
        new_jobs: Iterable[Job],
        machines: Sequence[Machine],
        now: int,
    ) -> list[ScheduleStep]:
        """Place pending jobs onto free machines.

        Args:
            new_jobs: Jobs that arrived for this turn, in arrival order.
            machines: Full machine list, ``machines[i].id == i``.
            now: Current simulated timestamp, stamped on every emitted step.

        Returns:
            Steps emitted during this call, in placement order (may be empty).
        """
        for job in new_jobs:
            self._accumulated_jobs.append(job)
            logger.debug("Accumulated %s", job)
        logger.debug("t=%s pending=%d", now, len(self._accumulated_jobs))

        steps: list[ScheduleStep] = []
        while self._accumulated_jobs:
            current_job = self._accumulated_jobs[-1]

            num_free = 0
            target: Machine | None = None
            min_time: int | None = None
            for machine in machines:
                if not machine.is_free():
                    continue
                num_free += 1
                expected = current_job.processing_time[machine.id]
                # strict < keeps the lowest index on ties
                if min_time is None or expected < min_time:
                    min_time = expected
                    target = machine

            if num_free == 0:
                break

            assert target is not None
            target.execute(current_job)
            steps.append(ScheduleStep(now, current_job.id, target.id))
            self._accumulated_jobs.pop()
            logger.debug(
                "t=%s placed job %d on machine %d (time=%s)",
                now,
                current_job.id,
                target.id,
                min_time,
            )

            # num_free was counted before this placement: at most one machine was left
            if num_free <= 1:
                break

        return steps

    def advance_time(self, machines: Sequence[Machine], elapsed: int) -> None:
        """Let ``elapsed`` time pass on every busy machine.

        A machine busy at the start of the call blocks completion for this
        call even if it finishes during it, so ``done()`` turns true one call
        after the last job completes.
        """
        assert elapsed >= 0, f"elapsed must be non-negative, got {elapsed}"
        logger.debug(
            "Advancing %s, pending=%d, machines=[%s]",
            elapsed,
            len(self._accumulated_jobs),
            "; ".join(str(m) for m in machines),
        )
        done_candidate = not self._accumulated_jobs
        for machine in machines:
            if machine.is_free():
                continue
            done_candidate = False
            machine.remaining_time = max(0, machine.remaining_time - elapsed)
            if machine.remaining_time == 0:
                logger.debug("Machine %d finished job %d", machine.id, machine.current_job_id)
                machine.set_free()
        self._is_done = done_candidate

    def done(self) -> bool:
        """Return the completion flag set by the latest ``advance_time`` call."""
        return self._is_done

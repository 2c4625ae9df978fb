"""Tests for the driver loop and the instance generator."""

from __future__ import annotations

from pathlib import Path

import pytest

from schedsim.generator import dump_instance, generate_unrelated_instance
from schedsim.models import Job, ScheduleStep
from schedsim.parser import JobSource, JsonInputHandler, NumberOfMachinesMismatch
from schedsim.simulation import SimulationStalled, run_simulation


def test_fixture_run(fixtures_dir: Path):
    source = JsonInputHandler(str(fixtures_dir / "unrelated_job1.json"))
    seen: list[ScheduleStep] = []
    result = run_simulation(source, 2, on_step=seen.append)
    # t=0 J0 -> M1 (2 < 3); t=1 J1 -> M0; t=2 J2 -> M1 freed at t=2
    assert result.steps == [ScheduleStep(0, 0, 1), ScheduleStep(1, 1, 0), ScheduleStep(2, 2, 1)]
    assert seen == result.steps
    assert result.makespan == 6
    assert result.machine_loads() == {0: 5, 1: 4}
    assert result.flow_times() == {0: 0, 1: 0, 2: 0}
    # machine 0 finishes during the turn starting at t=5, done reported one turn later
    assert result.turns == 7
    assert result.end_time == 7
    assert all(m.is_free() for m in result.machines)


def test_waiting_jobs_get_flow_time():
    jobs = [
        Job(id=0, arrival_time=0, processing_time=[4]),
        Job(id=1, arrival_time=0, processing_time=[2]),
        Job(id=2, arrival_time=1, processing_time=[1]),
    ]
    result = run_simulation(JobSource(jobs), 1)
    # stack order: job 1 first, then job 2 (newer) before job 0
    assert [s.job_id for s in result.steps] == [1, 2, 0]
    assert result.flow_times() == {1: 0, 2: 1, 0: 3}
    assert result.makespan == 7


def test_coarse_time_step_releases_all_jobs():
    jobs = generate_unrelated_instance(12, 3, seed=5, max_arrival=9, max_time=7)
    result = run_simulation(JobSource(jobs), 3, time_step=4)
    assert sorted(s.job_id for s in result.steps) == list(range(12))
    assert all(s.timestamp % 4 == 0 for s in result.steps)


def test_generated_instance_completes_and_round_trips(tmp_path: Path):
    jobs = generate_unrelated_instance(30, 4, seed=3, max_arrival=15, max_time=20)
    path = tmp_path / "gen.json"
    dump_instance(jobs, str(path))
    loaded = JsonInputHandler(str(path)).job_array
    assert [(j.arrival_time, j.processing_time) for j in loaded] == [
        (j.arrival_time, j.processing_time) for j in jobs
    ]
    result = run_simulation(JsonInputHandler(str(path)), 4)
    assert sorted(s.job_id for s in result.steps) == list(range(30))
    # no machine runs two jobs at once
    by_machine: dict[int, list[tuple[int, int]]] = {}
    for s in result.steps:
        dur = result.jobs[s.job_id].processing_time[s.machine_id]
        by_machine.setdefault(s.machine_id, []).append((s.timestamp, s.timestamp + dur))
    for spans in by_machine.values():
        spans.sort()
        for (_, end), (start, _) in zip(spans, spans[1:]):
            assert start >= end


def test_generator_is_deterministic():
    a = generate_unrelated_instance(10, 3, seed=42)
    b = generate_unrelated_instance(10, 3, seed=42)
    assert [(j.arrival_time, j.processing_time) for j in a] == [
        (j.arrival_time, j.processing_time) for j in b
    ]
    with pytest.raises(ValueError):
        generate_unrelated_instance(3, 0)


def test_invalid_parameters():
    source = JobSource([Job(id=0, arrival_time=0, processing_time=[1, 2])])
    with pytest.raises(ValueError):
        run_simulation(source, 2, time_step=0)
    with pytest.raises(NumberOfMachinesMismatch):
        run_simulation(source, 3)


def test_max_turns_stall():
    jobs = [Job(id=i, arrival_time=0, processing_time=[10]) for i in range(3)]
    with pytest.raises(SimulationStalled) as exc:
        run_simulation(JobSource(jobs), 1, max_turns=5)
    assert exc.value.turns == 5
    assert exc.value.pending_job_ids == [0, 1]


def test_empty_source_finishes_in_one_turn():
    result = run_simulation(JobSource([]), 2)
    assert result.steps == []
    assert result.turns == 1
    assert result.makespan == 0

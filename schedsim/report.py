"""Persistence of the schedule step sequence (CSV and JSON)."""

from __future__ import annotations

import csv
import json
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Optional

from schedsim.models import ScheduleStep
from schedsim.simulation import SimulationResult

CSV_HEADER = ["timestamp", "job_id", "machine_id"]


def write_steps_csv(steps: Iterable[ScheduleStep], path: str | Path) -> None:
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(CSV_HEADER)
        for step in steps:
            writer.writerow(step.as_tuple())


def read_steps_csv(path: str | Path) -> List[ScheduleStep]:
    with open(path, "r", newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames != CSV_HEADER:
            raise ValueError(f"Unexpected CSV header in {path}: {reader.fieldnames}")
        return [
            ScheduleStep(int(row["timestamp"]), int(row["job_id"]), int(row["machine_id"]))
            for row in reader
        ]


def write_result_json(
    result: SimulationResult,
    path: str | Path,
    instance: Optional[str] = None,
) -> None:
    """Dump steps as ``[t, job, machine]`` triples plus run summary."""
    payload = {
        "instance": instance,
        "timestamp": datetime.now().strftime("%Y%m%d_%H%M%S"),
        "machines": result.num_machines,
        "jobs": len(result.jobs),
        "turns": result.turns,
        "end_time": result.end_time,
        "makespan": result.makespan,
        # json keys must be strings
        "machine_loads": {str(k): v for k, v in result.machine_loads().items()},
        "steps": [list(s.as_tuple()) for s in result.steps],
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2)


def read_steps_json(path: str | Path) -> List[ScheduleStep]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return [ScheduleStep(int(t), int(j), int(m)) for t, j, m in data.get("steps", [])]


def next_unique_path(path: str | Path) -> str:
    """If the file exists append _1, _2 ... until a free name is found."""
    p = Path(path)
    if not p.exists():
        return str(p)
    counter = 1
    while True:
        candidate = p.parent / f"{p.stem}_{counter}{p.suffix}"
        if not candidate.exists():
            return str(candidate)
        counter += 1

import json
import random
from typing import List

from schedsim.models import Job


def generate_unrelated_instance(
    n: int,
    m: int,
    seed: int = 0,
    max_arrival: int = 10,
    max_time: int = 99,
) -> List[Job]:
    """Generate a random unrelated-machines instance with arrivals in [0, max_arrival]."""
    if n < 0 or m <= 0:
        raise ValueError(f"Invalid instance size n={n} m={m}")
    rng = random.Random(seed)
    arrivals = sorted(rng.randint(0, max_arrival) for _ in range(n))
    return [
        Job(
            id=j,
            arrival_time=arrivals[j],
            processing_time=[rng.randint(1, max_time) for _ in range(m)],
        )
        for j in range(n)
    ]


def dump_instance(jobs: List[Job], path: str) -> None:
    """Write jobs in the JSON job-file format read by ``load_jobs``."""
    payload = {
        "jobs": [
            {"timestamp": job.arrival_time, "processing_time": list(job.processing_time)}
            for job in jobs
        ]
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)

#!/usr/bin/env python3


import argparse
import json
import logging
import os
from datetime import datetime
from typing import Any, Dict

import yaml

from schedsim.generator import generate_unrelated_instance
from schedsim.parser import JobSource, JsonInputHandler
from schedsim.report import next_unique_path, write_result_json, write_steps_csv
from schedsim.simulation import SimulationResult, run_simulation
from schedsim.visualization import plot_gantt

logger = logging.getLogger("schedsim")


def load_config(config_file: str = "config.yaml") -> Dict[str, Any]:
    """Load configuration from a YAML or JSON file."""
    if not os.path.isfile(config_file):
        raise FileNotFoundError(f"Config file not found: {config_file}")
    with open(config_file, "r", encoding="utf-8") as f:
        text = f.read()
    if config_file.endswith((".yml", ".yaml")):
        return yaml.safe_load(text) or {}
    return json.loads(text)


def build_source(config: Dict[str, Any]) -> tuple[JobSource, str, int]:
    """Return ``(source, instance_name, num_machines)`` from config."""
    gen_cfg = config.get("generator", {}) if isinstance(config.get("generator"), dict) else {}
    if gen_cfg.get("enabled"):
        n = gen_cfg.get("jobs")
        m = gen_cfg.get("machines")
        seed = gen_cfg.get("seed", 0)
        if n is None or m is None:
            raise ValueError("Generator enabled but 'jobs' or 'machines' not provided")
        jobs = generate_unrelated_instance(
            int(n),
            int(m),
            seed=int(seed),
            max_arrival=int(gen_cfg.get("max_arrival", 10)),
            max_time=int(gen_cfg.get("max_time", 99)),
        )
        return JobSource(jobs), f"generated_n{n}_m{m}_seed{seed}", int(m)

    instance_path = config.get("instance")
    if not instance_path:
        raise ValueError("Missing 'instance' key in config (or enable 'generator')")
    handler = JsonInputHandler(instance_path)
    num_machines = config.get("machines") or handler.num_machines
    if num_machines is None:
        raise ValueError("Cannot infer machine count from an empty instance; set 'machines'")
    name = os.path.basename(instance_path).split(".")[0]
    return handler, name, int(num_machines)


def run_from_config(config: Dict[str, Any]) -> SimulationResult:
    source, name, num_machines = build_source(config)
    max_turns = config.get("max_turns")
    result = run_simulation(
        source,
        num_machines,
        time_step=int(config.get("time_step", 1)),
        max_turns=int(max_turns) if max_turns is not None else None,
        on_step=lambda s: logger.info(
            "t=%d job %d -> machine %d", s.timestamp, s.job_id, s.machine_id
        ),
    )

    out_cfg = config.get("output", {}) if isinstance(config.get("output"), dict) else {}
    out_dir = out_cfg.get("dir")
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
        stamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        csv_path = next_unique_path(os.path.join(out_dir, f"schedule_{name}_{stamp}.csv"))
        write_steps_csv(result.steps, csv_path)
        json_path = next_unique_path(os.path.join(out_dir, f"result_{name}_{stamp}.json"))
        write_result_json(result, json_path, instance=name)
        logger.info("Saved schedule to %s and %s", csv_path, json_path)
        if out_cfg.get("gantt", True):
            gantt_path = next_unique_path(
                os.path.join(out_dir, f"gantt_{name}_c{result.makespan}_{stamp}.png")
            )
            plot_gantt(result.steps, result.jobs, num_machines, gantt_path)
            logger.info("Saved Gantt chart to %s", gantt_path)
    return result


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Greedy online scheduling on unrelated machines (config only)"
    )
    parser.add_argument("--config", default="config.yaml", help="Path to YAML/JSON config")
    args = parser.parse_args()

    config = load_config(args.config)
    log_level = config.get("log_level", "INFO")
    logging.basicConfig(
        level=getattr(logging, str(log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    result = run_from_config(config)
    print(
        f"Placed {len(result.steps)} jobs on {result.num_machines} machines, "
        f"makespan {result.makespan} ({result.turns} turns)"
    )


if __name__ == "__main__":
    main()

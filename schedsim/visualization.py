import os
from typing import Dict, List, Optional

import matplotlib

matplotlib.use("Agg")  # Must be set before importing pyplot
import matplotlib.pyplot as plt  # noqa: E402
from matplotlib.patches import Rectangle  # noqa: E402

from schedsim.models import Job, ScheduleStep  # noqa: E402


def plot_gantt(
    steps: List[ScheduleStep],
    jobs: Dict[int, Job],
    num_machines: int,
    save_path: str,
    title: Optional[str] = None,
    show_legend: Optional[bool] = None,
) -> str:
    """Create and save a Gantt chart of the emitted schedule steps.

    Each step becomes one bar on its machine row starting at the step
    timestamp and lasting the job's processing time on that machine.
    Legend is shown automatically only for up to 40 jobs.
    """
    n = len(jobs)
    base_w, base_h = 10, 0.5 * num_machines + 2
    fig, ax = plt.subplots(
        figsize=(min(base_w + n * 0.05, 18), min(base_h, 16)),
        constrained_layout=True,
    )
    cmap = plt.get_cmap("tab20")
    makespan = 0
    for step in steps:
        duration = jobs[step.job_id].processing_time[step.machine_id]
        makespan = max(makespan, step.timestamp + duration)
        ax.barh(
            step.machine_id,
            duration,
            left=step.timestamp,
            height=0.8,
            color=cmap(step.job_id % 20),
            alpha=0.85,
            edgecolor="black",
            linewidth=0.6,
        )
        if duration > 0:
            ax.text(
                step.timestamp + duration / 2,
                step.machine_id,
                f"J{step.job_id}",
                ha="center",
                va="center",
                fontsize=7,
            )
    ax.set_xlabel("Time", fontsize=12)
    ax.set_ylabel("Machine", fontsize=12)
    ax.set_title(title or f"Gantt Chart - makespan = {makespan}", fontsize=14, fontweight="bold")
    ax.set_yticks(range(num_machines))
    ax.set_yticklabels([f"M{i}" for i in range(num_machines)])
    ax.grid(True, alpha=0.25, axis="x", linestyle="--", linewidth=0.7)
    ax.set_ylim(-0.5, num_machines - 0.5)

    if show_legend is None:
        show_legend = 0 < n <= 40
    if show_legend:
        legend_elements = [
            Rectangle(
                (0, 0),
                1,
                1,
                facecolor=cmap(job_id % 20),
                alpha=0.85,
                edgecolor="black",
                label=f"Job {job_id}",
            )
            for job_id in sorted(jobs)
        ]
        ax.legend(
            handles=legend_elements,
            bbox_to_anchor=(1.02, 1),
            loc="upper left",
            borderaxespad=0.0,
            fontsize=8,
            frameon=False,
            ncol=1 if n <= 25 else 2,
        )

    if os.path.dirname(save_path):
        os.makedirs(os.path.dirname(save_path), exist_ok=True)
    fig.savefig(save_path, dpi=180)
    plt.close(fig)
    return save_path

"""Critical path extraction from a finished forward pass."""

from .core import ScheduledTask
from .graph import DependencyGraph


def compute_critical_path(scheduled: list[ScheduledTask], graph: DependencyGraph) -> list[str]:
    """Find the chain of tasks that gated the project finish.

    Starts at the task with the latest finish and walks backwards, at each
    step choosing the predecessor whose finish equals the current task's ready
    instant. Ties at either step go to the lowest tie-break key.

    Args:
        scheduled: Every scheduled task
        graph: Dependency graph the schedule was built from

    Returns:
        Task ids on the critical path, earliest first
    """
    if not scheduled:
        return []

    by_id = {task.task_id: task for task in scheduled}
    latest_finish = max(task.finish for task in scheduled)
    current = min(
        (task for task in scheduled if task.finish == latest_finish),
        key=lambda task: graph.sort_key(task.task_id),
    )

    chain = [current.task_id]
    while True:
        ready = current.ready
        gating = [p for p in graph.predecessors(current.task_id) if by_id[p].finish == ready]
        if not gating:
            break
        # predecessors() is already in tie-break order
        current = by_id[gating[0]]
        chain.append(current.task_id)

    chain.reverse()
    return chain

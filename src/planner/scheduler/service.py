"""High-level scheduling service."""

from dataclasses import replace
from typing import TYPE_CHECKING

from ..logger import get_logger
from .config import SchedulingConfig
from .core import SchedulingResult
from .critical_path import compute_critical_path
from .forward_pass import ForwardPassScheduler
from .validator import ProjectValidator

logger = get_logger()

if TYPE_CHECKING:
    from ..export import ScheduleExport
    from ..models import Project


class SchedulingService:
    """High-level service turning a project into a complete schedule.

    This service coordinates:
    - ProjectValidator (input checks and dependency graph)
    - ForwardPassScheduler (start/finish of every task)
    - compute_critical_path (critical flags)

    Any error aborts the whole run; no partial schedule is ever returned.
    """

    def __init__(self, project: "Project", config: SchedulingConfig | None = None):
        """Initialize scheduling service.

        Args:
            project: Project to schedule
            config: Optional scheduling policy
        """
        self.project = project
        self.config = config or SchedulingConfig()
        self.validator = ProjectValidator(self.config)

    def schedule(self) -> SchedulingResult:
        """Validate the project and compute its schedule.

        Returns:
            SchedulingResult with tasks in topological order, the project
            finish, and the critical path
        """
        graph = self.validator.validate(self.project)

        scheduler = ForwardPassScheduler(self.project, graph, config=self.config)
        drafts = scheduler.schedule()

        critical_path = compute_critical_path(drafts, graph)
        critical = set(critical_path)
        scheduled_tasks = [replace(task, critical=task.task_id in critical) for task in drafts]

        project_finish = max(
            (task.finish for task in scheduled_tasks), default=scheduler.project_start
        )
        logger.changes(
            f"Project '{self.project.name}' finishes at {project_finish}; "
            f"critical path: {' -> '.join(critical_path) or '(none)'}"
        )

        return SchedulingResult(
            scheduled_tasks=scheduled_tasks,
            project_start=scheduler.project_start,
            project_finish=project_finish,
            critical_path=critical_path,
            member_intervals={name: ledger.intervals for name, ledger in scheduler.ledgers.items()},
            metadata={
                "tie_break": self.config.tie_break.value,
                "assignee_policy": self.config.assignee_policy.value,
            },
        )

    def export(self) -> "ScheduleExport":
        """Schedule the project and build the renderer-facing export."""
        from ..export import build_export

        return build_export(self.project, self.schedule())

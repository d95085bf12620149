"""Scheduler package - calendar-aware, resource-constrained project scheduling.

This package provides:
- ProjectValidator: input checks that run before any task is placed
- DependencyGraph: index-based DAG with deterministic topological order
- ForwardPassScheduler: single forward pass over the graph
- compute_critical_path: backward walk over gating predecessors
- SchedulingService: high-level entry point tying them together

Configuration:
- SchedulingConfig: tie-break order and multi-assignee policy
"""

from .config import AssigneePolicy, SchedulingConfig, TieBreakOrder
from .core import ScheduledTask, SchedulingResult
from .critical_path import compute_critical_path
from .forward_pass import ForwardPassScheduler
from .graph import DependencyGraph
from .resources import BusyInterval, ResourceLedger, effective_rate
from .service import SchedulingService
from .validator import ProjectValidator

__all__ = [
    # Core dataclasses
    "ScheduledTask",
    "SchedulingResult",
    # Configuration
    "SchedulingConfig",
    "TieBreakOrder",
    "AssigneePolicy",
    # Graph and validation
    "DependencyGraph",
    "ProjectValidator",
    # Resources
    "BusyInterval",
    "ResourceLedger",
    "effective_rate",
    # Algorithm
    "ForwardPassScheduler",
    "compute_critical_path",
    # High-level service
    "SchedulingService",
]

"""Task dependency graph: validation and deterministic topological order."""

from __future__ import annotations

import heapq
from collections.abc import Iterable
from typing import TYPE_CHECKING

from ..exceptions import CycleDetectedError, DanglingReferenceError, DuplicateIdError
from .config import TieBreakOrder

if TYPE_CHECKING:
    from ..models import Task

_WHITE, _GRAY, _BLACK = 0, 1, 2


class DependencyGraph:
    """Arena of tasks with predecessor/successor adjacency lists of indices.

    Edges point from a predecessor to the task that waits for it. Every
    ordering the graph hands out (adjacency lists, topological order, cycle
    search) follows the configured tie-break, so results are reproducible.
    """

    def __init__(
        self,
        tasks: list[Task],
        member_names: Iterable[str] | None = None,
        tie_break: TieBreakOrder = TieBreakOrder.ID,
    ) -> None:
        """Build the graph.

        Args:
            tasks: Tasks in declaration order
            member_names: Known team member names; when given, assignments are
                checked by validate()
            tie_break: Rule for ordering tasks that are otherwise equivalent
        """
        self.tie_break = tie_break
        self.task_ids: list[str] = []
        self._index: dict[str, int] = {}
        for task in tasks:
            if task.id in self._index:
                raise DuplicateIdError("task", task.id)
            self._index[task.id] = len(self.task_ids)
            self.task_ids.append(task.id)

        self._tasks = list(tasks)
        self._member_names = set(member_names) if member_names is not None else None
        self._preds: list[list[int]] = [[] for _ in self.task_ids]
        self._succs: list[list[int]] = [[] for _ in self.task_ids]
        self._dangling: list[tuple[str, str, str]] = []

        for i, task in enumerate(tasks):
            for pred_id in task.predecessors:
                pred = self._index.get(pred_id)
                if pred is None:
                    self._dangling.append((task.id, pred_id, "predecessor"))
                elif pred not in self._preds[i]:
                    self._preds[i].append(pred)
                    self._succs[pred].append(i)

        for adjacency in (*self._preds, *self._succs):
            adjacency.sort(key=self._key_of_index)

    def _key_of_index(self, index: int) -> tuple[str, int] | tuple[int]:
        if self.tie_break == TieBreakOrder.DECLARATION:
            return (index,)
        return (self.task_ids[index], index)

    def sort_key(self, task_id: str) -> tuple[str, int] | tuple[int]:
        """Sort key implementing the tie-break rule (lower sorts first)."""
        return self._key_of_index(self._index[task_id])

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._index

    def __len__(self) -> int:
        return len(self.task_ids)

    def predecessors(self, task_id: str) -> list[str]:
        """Direct predecessors of a task, in tie-break order."""
        return [self.task_ids[i] for i in self._preds[self._index[task_id]]]

    def successors(self, task_id: str) -> list[str]:
        """Tasks directly waiting on ``task_id``, in tie-break order."""
        return [self.task_ids[i] for i in self._succs[self._index[task_id]]]

    def validate(self) -> None:
        """Check references and acyclicity.

        Raises:
            DanglingReferenceError: If a predecessor, assignee, or focus override
                names something that does not exist
            CycleDetectedError: If the dependencies contain a cycle
        """
        if self._dangling:
            owner, reference, kind = self._dangling[0]
            raise DanglingReferenceError(owner, reference, kind)

        if self._member_names is not None:
            for task in self._tasks:
                for assignee in task.assignees:
                    if assignee not in self._member_names:
                        raise DanglingReferenceError(task.id, assignee, "assignee")
                for name in task.focus_overrides:
                    if name not in task.assignees:
                        raise DanglingReferenceError(task.id, name, "focus_override")

        cycle = self.find_cycle()
        if cycle is not None:
            raise CycleDetectedError(cycle)

    def find_cycle(self) -> list[str] | None:
        """Return one cycle as a list of task ids (first id repeated last), or None."""
        color = [_WHITE] * len(self.task_ids)

        for root in sorted(range(len(self.task_ids)), key=self._key_of_index):
            if color[root] != _WHITE:
                continue

            color[root] = _GRAY
            path = [root]
            stack = [iter(self._succs[root])]

            while stack:
                nxt = next(stack[-1], None)
                if nxt is None:
                    color[path.pop()] = _BLACK
                    stack.pop()
                    continue
                if color[nxt] == _GRAY:
                    start = path.index(nxt)
                    return [self.task_ids[i] for i in path[start:]] + [self.task_ids[nxt]]
                if color[nxt] == _WHITE:
                    color[nxt] = _GRAY
                    path.append(nxt)
                    stack.append(iter(self._succs[nxt]))

        return None

    def topological_order(self) -> list[str]:
        """Kahn's algorithm; among ready tasks the lowest sort key goes first.

        Raises:
            CycleDetectedError: If not every task can be ordered
        """
        in_degree = [len(preds) for preds in self._preds]
        heap = [(self._key_of_index(i), i) for i, d in enumerate(in_degree) if d == 0]
        heapq.heapify(heap)
        order: list[str] = []

        while heap:
            _, index = heapq.heappop(heap)
            order.append(self.task_ids[index])
            for succ in self._succs[index]:
                in_degree[succ] -= 1
                if in_degree[succ] == 0:
                    heapq.heappush(heap, (self._key_of_index(succ), succ))

        if len(order) != len(self.task_ids):
            raise CycleDetectedError(self.find_cycle() or [])

        return order

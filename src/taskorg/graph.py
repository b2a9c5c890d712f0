"""
TaskDependencyGraph - "must complete before" relationships between tasks.

An edge A -> B reads "A depends on B": B has to be finished before A can start.
Edges that would close a cycle are refused when they are added, so the graph
stays a DAG under normal use.
"""
from collections import deque
from typing import Dict, List, Optional, Set, Iterable, Any

from taskorg.errors import CycleDetectedError, UnknownTaskError
from taskorg.logs import get_logger
from taskorg.models import TaskRecord

log = get_logger("graph")

class TaskDependencyGraph:

    def __init__(self):
        self._tasks: Dict[str, TaskRecord] = {}
        self._dependencies: Dict[str, List[str]] = {}

    def add_task(self, task: TaskRecord) -> None:
        """Register a task, or refresh its record. Existing edges are kept."""
        self._tasks[task.id] = task
        self._dependencies.setdefault(task.id, [])

    def has_task(self, task_id: str) -> bool:
        return task_id in self._tasks

    def get_task(self, task_id: str) -> Optional[TaskRecord]:
        return self._tasks.get(task_id)

    @property
    def task_ids(self) -> List[str]:
        return list(self._tasks)

    def __len__(self) -> int:
        return len(self._tasks)

    def add_dependency(self, from_id: str, to_id: str) -> None:
        """Record that `from_id` depends on `to_id`."""
        for task_id in (from_id, to_id):
            if task_id not in self._tasks:
                raise UnknownTaskError(f"Task {task_id} is not registered in the dependency graph")

        if self._reaches(to_id, from_id):
            raise CycleDetectedError(f"{from_id} -> {to_id} would create a dependency cycle")

        deps = self._dependencies[from_id]
        if to_id not in deps:
            deps.append(to_id)
            log.debug(f"Added dependency {from_id} -> {to_id}")

    def _reaches(self, start: str, target: str) -> bool:
        """Breadth-first search along dependency edges from start."""
        visited = {start}
        queue = deque([start])
        while queue:
            current = queue.popleft()
            if current == target:
                return True
            for dep in self._dependencies.get(current, []):
                if dep not in visited:
                    visited.add(dep)
                    queue.append(dep)
        return False

    def remove_dependency(self, from_id: str, to_id: str) -> bool:
        deps = self._dependencies.get(from_id)
        if deps and to_id in deps:
            deps.remove(to_id)
            return True
        return False

    def remove_task(self, task_id: str) -> bool:
        """Drop a task and strip it from every other task's dependency list."""
        if task_id not in self._tasks:
            return False
        del self._tasks[task_id]
        self._dependencies.pop(task_id, None)
        for deps in self._dependencies.values():
            if task_id in deps:
                deps[:] = [dep for dep in deps if dep != task_id]
        return True

    def dependencies_of(self, task_id: str) -> List[str]:
        return list(self._dependencies.get(task_id, []))

    def dependents_of(self, task_id: str) -> List[str]:
        return [tid for tid, deps in self._dependencies.items() if task_id in deps]

    def dependency_count(self) -> int:
        return sum(len(deps) for deps in self._dependencies.values())

    def topological_order(self) -> List[str]:
        """
        Kahn's algorithm: tasks without pending dependencies come first.

        The in-degree of a task is the number of tasks it depends on; finishing
        a task releases its dependents. A result shorter than the task count
        means the graph has a cycle.
        """
        in_degree = {tid: len(self._dependencies.get(tid, [])) for tid in self._tasks}
        dependents: Dict[str, List[str]] = {tid: [] for tid in self._tasks}
        for tid, deps in self._dependencies.items():
            for dep in deps:
                dependents.setdefault(dep, []).append(tid)

        queue = deque(tid for tid, degree in in_degree.items() if degree == 0)
        order = []
        while queue:
            current = queue.popleft()
            order.append(current)
            for dependent in dependents.get(current, []):
                in_degree[dependent] -= 1
                if in_degree[dependent] == 0:
                    queue.append(dependent)
        return order

    def has_cycle(self) -> bool:
        return len(self.topological_order()) != len(self._tasks)

    def _hours(self, task_id: str) -> int:
        task = self._tasks.get(task_id)
        return task.estimated_hours if task is not None else 1

    def critical_path(self) -> List[str]:
        """
        Longest chain of dependent tasks, weighted by estimated hours.

        Returned dependency-first: the first id has to be done before the
        second, and so on. Empty for an empty graph.
        """
        order = self.topological_order()
        if len(order) != len(self._tasks):
            raise CycleDetectedError("Critical path is undefined for a cyclic dependency graph")

        finish: Dict[str, int] = {}
        previous: Dict[str, Optional[str]] = {}
        for tid in order:
            best: Optional[str] = None
            for dep in self._dependencies[tid]:
                if best is None or finish[dep] > finish[best]:
                    best = dep
            finish[tid] = self._hours(tid) + (finish[best] if best is not None else 0)
            previous[tid] = best

        end = None
        for tid in order:
            if end is None or finish[tid] > finish[end]:
                end = tid

        path = []
        while end is not None:
            path.append(end)
            end = previous[end]
        path.reverse()
        return path

    def critical_path_hours(self) -> int:
        return sum(self._hours(tid) for tid in self.critical_path())

    def can_run(self, task_id: str, completed: Set[str]) -> bool:
        return all(dep in completed for dep in self._dependencies.get(task_id, []))

    def ready_tasks(self, completed: Iterable[str]) -> List[str]:
        """Tasks not yet completed whose every dependency is completed."""
        done = set(completed)
        return [tid for tid in self._tasks if tid not in done and self.can_run(tid, done)]

    def statistics(self) -> Dict[str, Any]:
        cyclic = self.has_cycle()
        return {
            'tasks': len(self._tasks),
            'dependencies': self.dependency_count(),
            'has_cycle': cyclic,
            'critical_path': [] if cyclic else self.critical_path(),
        }

    def describe(self) -> str:
        lines = []
        for tid, deps in self._dependencies.items():
            task = self._tasks.get(tid)
            label = f"{tid} ({task.description if task else 'unknown task'})"
            if not deps:
                lines.append(f"{label} -> no dependencies")
                continue
            named = []
            for dep in deps:
                dep_task = self._tasks.get(dep)
                named.append(f"{dep} ({dep_task.description if dep_task else 'unknown task'})")
            lines.append(f"{label} -> depends on: {', '.join(named)}")
        return "\n".join(lines)

    def copy(self) -> 'TaskDependencyGraph':
        clone = TaskDependencyGraph()
        clone._tasks = dict(self._tasks)
        clone._dependencies = {tid: list(deps) for tid, deps in self._dependencies.items()}
        return clone

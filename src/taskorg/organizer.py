"""
TaskOrganizer - Central owner of the in-memory task structures.

Tasks are classified into one of three containers (an urgent stack, a
scheduled FIFO queue and a departmental list) and may additionally be promoted
into a priority index. A lookup map and a dependency graph cover every task.
Each mutation is mirrored through a PersistenceGateway; when the gateway
refuses it, the in-memory state is put back the way it was.

Instances are not thread-safe. Callers that share one organizer must serialize
mutations themselves.
"""
import heapq
import itertools
from collections import deque
from typing import Any, Callable, Deque, Dict, List, NamedTuple, Optional, Tuple, Union

from taskorg.data.gateway import PersistenceGateway
from taskorg.errors import (
    CycleDetectedError, DuplicateIdError, EmptyContainerError, FatalError,
    IndexOutOfRangeError, NotFoundError, PersistenceFailureError,
    RecoverableError, UnknownTaskError
)
from taskorg.graph import TaskDependencyGraph
from taskorg.logs import get_logger
from taskorg.models import CLASSIFICATION_KINDS, TaskKind, TaskRecord
from taskorg import ordering

log = get_logger("organizer")

PriorityEntry = Tuple[int, str, int, TaskRecord]

UPDATABLE_FIELDS = ('description', 'department', 'urgency', 'estimated_hours', 'assigned_employee_id')

class _State(NamedTuple):
    urgent: List[TaskRecord]
    scheduled: Deque[TaskRecord]
    departmental: List[TaskRecord]
    priority: List[PriorityEntry]
    by_id: Dict[str, TaskRecord]
    graph: TaskDependencyGraph

class TaskOrganizer:

    def __init__(self, gateway: PersistenceGateway):
        self._gateway = gateway
        self._urgent: List[TaskRecord] = []
        self._scheduled: Deque[TaskRecord] = deque()
        self._departmental: List[TaskRecord] = []
        self._priority: List[PriorityEntry] = []
        self._sequence = itertools.count()
        self._by_id: Dict[str, TaskRecord] = {}
        self._graph = TaskDependencyGraph()

    @property
    def gateway(self) -> PersistenceGateway:
        return self._gateway

    @property
    def graph(self) -> TaskDependencyGraph:
        return self._graph

    # --- state handling ---

    def _snapshot_state(self) -> _State:
        return _State(
            list(self._urgent),
            deque(self._scheduled),
            list(self._departmental),
            list(self._priority),
            dict(self._by_id),
            self._graph.copy(),
        )

    def _restore_state(self, state: _State) -> None:
        self._urgent = state.urgent
        self._scheduled = state.scheduled
        self._departmental = state.departmental
        self._priority = state.priority
        self._by_id = state.by_id
        self._graph = state.graph

    def _persist(self, state: _State, action: str, call: Callable[..., bool], *args) -> None:
        """Run a gateway call; on refusal or error restore `state` and raise."""
        try:
            stored = call(*args)
        except FatalError:
            self._restore_state(state)
            log.critical(f"Fatal storage error during {action}, in-memory changes rolled back")
            raise
        except RecoverableError as e:
            self._restore_state(state)
            log.error(f"Could not {action}: {e}")
            raise PersistenceFailureError(f"Could not {action}: {e}") from e
        except Exception as e:
            self._restore_state(state)
            log.error(f"Could not {action}, unexpected storage error: {e}")
            raise PersistenceFailureError(f"Could not {action}: {e}") from e

        if not stored:
            self._restore_state(state)
            log.error(f"Could not {action}: storage refused the change")
            raise PersistenceFailureError(f"Could not {action}: storage refused the change")

    def _container(self, kind: TaskKind):
        if kind == TaskKind.URGENT:
            return self._urgent
        if kind == TaskKind.SCHEDULED:
            return self._scheduled
        if kind == TaskKind.DEPARTMENTAL:
            return self._departmental
        raise ValueError(f"{kind.value} is not a classification container")

    def _register(self, task: TaskRecord) -> None:
        self._by_id[task.id] = task
        self._graph.add_task(task)

    def _push_priority(self, task: TaskRecord) -> None:
        rank, due_date = task.priority_key()
        heapq.heappush(self._priority, (rank, due_date, next(self._sequence), task))

    def _remove_everywhere(self, task_id: str) -> None:
        self._urgent = [t for t in self._urgent if t.id != task_id]
        self._scheduled = deque(t for t in self._scheduled if t.id != task_id)
        self._departmental = [t for t in self._departmental if t.id != task_id]
        self._priority = [entry for entry in self._priority if entry[3].id != task_id]
        heapq.heapify(self._priority)
        self._by_id.pop(task_id, None)
        self._graph.remove_task(task_id)

    def _delete(self, task_id: str) -> None:
        state = self._snapshot_state()
        self._remove_everywhere(task_id)
        self._persist(state, f"delete task {task_id}", self._gateway.delete_task, task_id)
        log.info(f"Removed task {task_id}")

    # --- classification ---

    def classify(self, task: TaskRecord, kind: Union[TaskKind, str]) -> None:
        """
        Place a task into the urgent, scheduled or departmental container.

        The duplicate check only covers the target container, so the same id
        may sit in two different containers.

        Raises:
            DuplicateIdError: the target container already holds the id.
            PersistenceFailureError: the gateway refused the save.
        """
        kind = TaskKind.parse(kind)
        if kind not in CLASSIFICATION_KINDS:
            raise ValueError(f"Tasks cannot be classified as {kind.value}; use promote_to_priority")
        container = self._container(kind)
        if any(t.id == task.id for t in container):
            log.warning(f"Rejected duplicate task {task.id} in {kind.value}")
            raise DuplicateIdError(f"Task {task.id} is already in the {kind.value} container")

        if task.is_prioritized:
            task = task.without_priority()

        state = self._snapshot_state()
        self._container(kind).append(task)
        self._register(task)
        self._persist(state, f"save task {task.id}", self._gateway.save_task, task, kind)
        log.info(f"Classified task {task.id} as {kind.value}")

    def push_urgent(self, task: TaskRecord) -> None:
        self.classify(task, TaskKind.URGENT)

    def enqueue_scheduled(self, task: TaskRecord) -> None:
        self.classify(task, TaskKind.SCHEDULED)

    def append_departmental(self, task: TaskRecord) -> None:
        self.classify(task, TaskKind.DEPARTMENTAL)

    def promote_to_priority(self, task: TaskRecord, rank: int, due_date: str) -> TaskRecord:
        """Push a prioritized copy of `task` onto the priority index and return it."""
        prioritized = task.with_priority(rank, due_date)
        stored = task.id in self._by_id

        state = self._snapshot_state()
        self._push_priority(prioritized)
        self._register(prioritized)
        if stored:
            self._persist(state, f"promote task {task.id}", self._gateway.update_task, task.id, prioritized)
        else:
            self._persist(state, f"save task {task.id}", self._gateway.save_task, prioritized, TaskKind.PRIORITY)
        log.info(f"Promoted task {task.id} to priority {rank} due {due_date}")
        return prioritized

    # --- peek / pop ---

    def peek_urgent(self) -> TaskRecord:
        if not self._urgent:
            raise EmptyContainerError("The urgent stack is empty")
        return self._urgent[-1]

    def pop_urgent(self) -> TaskRecord:
        task = self.peek_urgent()
        self._delete(task.id)
        return task

    def peek_scheduled(self) -> TaskRecord:
        if not self._scheduled:
            raise EmptyContainerError("The scheduled queue is empty")
        return self._scheduled[0]

    def pop_scheduled(self) -> TaskRecord:
        task = self.peek_scheduled()
        self._delete(task.id)
        return task

    def peek_highest_priority(self) -> TaskRecord:
        if not self._priority:
            raise EmptyContainerError("The priority index is empty")
        return self._priority[0][3]

    def pop_highest_priority(self) -> TaskRecord:
        task = self.peek_highest_priority()
        self._delete(task.id)
        return task

    def departmental_at(self, index: int) -> TaskRecord:
        if not 0 <= index < len(self._departmental):
            raise IndexOutOfRangeError(
                f"Index {index} out of range for {len(self._departmental)} departmental tasks"
            )
        return self._departmental[index]

    def departmental_by_department(self, name: str) -> List[TaskRecord]:
        wanted = name.strip().lower()
        return [t for t in self._departmental if t.department.lower() == wanted]

    def find_by_id(self, task_id: str) -> Optional[TaskRecord]:
        return self._by_id.get(task_id)

    def kinds_of(self, task_id: str) -> List[TaskKind]:
        kinds = []
        if any(t.id == task_id for t in self._urgent):
            kinds.append(TaskKind.URGENT)
        if any(t.id == task_id for t in self._scheduled):
            kinds.append(TaskKind.SCHEDULED)
        if any(t.id == task_id for t in self._departmental):
            kinds.append(TaskKind.DEPARTMENTAL)
        if any(entry[3].id == task_id for entry in self._priority):
            kinds.append(TaskKind.PRIORITY)
        return kinds

    # --- edits ---

    def remove_task(self, task_id: str) -> TaskRecord:
        """Remove a task from every structure; raises NotFoundError for unknown ids."""
        task = self._by_id.get(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found")
        self._delete(task_id)
        return task

    def update_task(self, task_id: str, **changes) -> TaskRecord:
        """
        Apply field changes to a task and to every copy of it in the containers.

        Only description, department, urgency, estimated_hours and
        assigned_employee_id can be changed.
        """
        current = self._by_id.get(task_id)
        if current is None:
            raise NotFoundError(f"Task {task_id} not found")
        unknown = set(changes) - set(UPDATABLE_FIELDS)
        if unknown:
            raise ValueError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        updated = TaskRecord.model_validate({**current.model_dump(), **changes})

        def refresh(task: TaskRecord) -> TaskRecord:
            if task.id != task_id:
                return task
            return updated.model_copy(update={'priority': task.priority})

        state = self._snapshot_state()
        self._urgent = [refresh(t) for t in self._urgent]
        self._scheduled = deque(refresh(t) for t in self._scheduled)
        self._departmental = [refresh(t) for t in self._departmental]
        self._priority = [entry[:3] + (refresh(entry[3]),) for entry in self._priority]
        self._register(updated)
        self._persist(state, f"update task {task_id}", self._gateway.update_task, task_id, updated)
        log.info(f"Updated task {task_id}: {', '.join(sorted(changes))}")
        return updated

    def assign_employee(self, task_id: str, employee_id: Optional[str]) -> TaskRecord:
        return self.update_task(task_id, assigned_employee_id=employee_id)

    # --- dependencies ---

    def _require_known(self, *task_ids: str) -> None:
        for task_id in task_ids:
            if task_id not in self._by_id:
                raise UnknownTaskError(f"Task {task_id} not found")

    def add_dependency(self, from_id: str, to_id: str) -> None:
        """Record that `from_id` cannot start before `to_id` is done."""
        self._require_known(from_id, to_id)
        if to_id in self._graph.dependencies_of(from_id):
            return

        state = self._snapshot_state()
        try:
            self._graph.add_dependency(from_id, to_id)
        except CycleDetectedError:
            log.warning(f"Rejected dependency {from_id} -> {to_id}: it would create a cycle")
            raise
        self._persist(state, f"save dependencies of {from_id}", self._gateway.save_dependencies,
                      from_id, self._graph.dependencies_of(from_id))
        log.info(f"Task {from_id} now depends on {to_id}")

    def remove_dependency(self, from_id: str, to_id: str) -> bool:
        self._require_known(from_id, to_id)
        state = self._snapshot_state()
        if not self._graph.remove_dependency(from_id, to_id):
            return False
        self._persist(state, f"save dependencies of {from_id}", self._gateway.save_dependencies,
                      from_id, self._graph.dependencies_of(from_id))
        log.info(f"Task {from_id} no longer depends on {to_id}")
        return True

    # --- views ---

    def urgent_tasks(self) -> List[TaskRecord]:
        """Urgent tasks, top of the stack first."""
        return list(reversed(self._urgent))

    def scheduled_tasks(self) -> List[TaskRecord]:
        return list(self._scheduled)

    def departmental_tasks(self) -> List[TaskRecord]:
        return list(self._departmental)

    def prioritized_tasks(self) -> List[TaskRecord]:
        """Prioritized tasks in the order they would be popped."""
        return [entry[3] for entry in sorted(self._priority, key=lambda entry: entry[:3])]

    def snapshot(self) -> List[TaskRecord]:
        """Stack bottom to top, then queue front to back, then the departmental list."""
        return list(self._urgent) + list(self._scheduled) + list(self._departmental)

    def sort_snapshot_by_urgency_then_department(self) -> List[TaskRecord]:
        return ordering.sort_by_urgency_then_department(self.snapshot())

    def total_estimated_hours(self) -> int:
        return ordering.total_hours(self.snapshot())

    def distribution(self) -> List[TaskRecord]:
        return ordering.distribute_by_midpoint_split(self.snapshot())

    def distribute_to_teams(self, teams: List[str]) -> Dict[str, List[TaskRecord]]:
        return ordering.distribute_to_teams(self.snapshot(), teams)

    def statistics(self) -> Dict[str, Any]:
        tasks = self.snapshot()
        return {
            'urgent': len(self._urgent),
            'scheduled': len(self._scheduled),
            'departmental': len(self._departmental),
            'prioritized': len(self._priority),
            'tasks': len(self._by_id),
            'total_hours': ordering.total_hours(tasks),
            'departments': ordering.department_statistics(tasks),
            'dependencies': self._graph.dependency_count(),
        }

    def __len__(self) -> int:
        return len(self._by_id)

    # --- loading ---

    def clear(self) -> None:
        self._urgent = []
        self._scheduled = deque()
        self._departmental = []
        self._priority = []
        self._by_id = {}
        self._graph = TaskDependencyGraph()

    def load(self) -> None:
        """Rebuild every structure from the gateway, replacing the current state."""
        self.clear()
        prioritized_ids = set()

        for kind in CLASSIFICATION_KINDS:
            container = self._container(kind)
            for task in self._gateway.load_tasks_by_kind(kind):
                if any(t.id == task.id for t in container):
                    log.warning(f"Skipping duplicate stored task {task.id} in {kind.value}")
                    continue
                container.append(task.without_priority())
                self._register(task)
                if task.is_prioritized and task.id not in prioritized_ids:
                    self._push_priority(task)
                    prioritized_ids.add(task.id)

        for task in self._gateway.load_tasks_by_kind(TaskKind.PRIORITY):
            if not task.is_prioritized:
                log.warning(f"Skipping stored priority task {task.id} without a due date")
                continue
            if task.id not in prioritized_ids:
                self._push_priority(task)
                prioritized_ids.add(task.id)
            self._register(task)

        for from_id, to_ids in self._gateway.load_dependencies().items():
            for to_id in to_ids:
                try:
                    self._graph.add_dependency(from_id, to_id)
                except (UnknownTaskError, CycleDetectedError) as e:
                    log.warning(f"Skipping stored dependency {from_id} -> {to_id}: {e}")

        log.info(f"Loaded {len(self._by_id)} tasks "
                 f"({len(self._urgent)} urgent, {len(self._scheduled)} scheduled, "
                 f"{len(self._departmental)} departmental, {len(self._priority)} prioritized)")

import abc
from typing import Dict, List, Iterable

from taskorg.logs import get_logger
from taskorg.models import (
    TaskRecord, EmployeeRecord, TaskDocument, EmployeeDocument, TaskKind, next_id
)

log = get_logger("data.gateway")

class PersistenceGateway(abc.ABC):
    """
    Storage contract behind the task organizer.

    Mutating calls return True when the change was stored and False when the
    store refused it; the caller is expected to undo its in-memory change on
    False.
    """

    @abc.abstractmethod
    def load_all_tasks(self) -> List[TaskRecord]:
        pass

    @abc.abstractmethod
    def load_tasks_by_kind(self, kind: TaskKind) -> List[TaskRecord]:
        """Tasks stored under `kind`, in the order they were saved."""
        pass

    @abc.abstractmethod
    def save_task(self, task: TaskRecord, kind: TaskKind) -> bool:
        pass

    @abc.abstractmethod
    def update_task(self, task_id: str, task: TaskRecord) -> bool:
        """
        Overwrite the stored fields of every document with `task_id`.

        The stored kind and dependencies are kept. Priority fields are only
        overwritten when `task` is prioritized.
        """
        pass

    @abc.abstractmethod
    def delete_task(self, task_id: str) -> bool:
        """Remove every document with `task_id` and drop it from other dependency lists."""
        pass

    @abc.abstractmethod
    def load_all_employees(self) -> List[EmployeeRecord]:
        pass

    @abc.abstractmethod
    def save_employee(self, employee: EmployeeRecord) -> bool:
        pass

    @abc.abstractmethod
    def next_task_id(self) -> str:
        pass

    @abc.abstractmethod
    def next_employee_id(self) -> str:
        pass

    @abc.abstractmethod
    def load_dependencies(self) -> Dict[str, List[str]]:
        """Map of task id to the ids it depends on, for tasks that have any."""
        pass

    @abc.abstractmethod
    def save_dependencies(self, task_id: str, dependencies: List[str]) -> bool:
        pass

class MemoryGateway(PersistenceGateway):
    """
    Gateway keeping documents in insertion-ordered lists.

    Every mutation builds a new document list and hands it to `_commit_tasks`
    or `_commit_employees`; subclasses override those to write the list out
    and return False to refuse it.
    """

    def __init__(self, tasks: Iterable[TaskDocument] = (), employees: Iterable[EmployeeDocument] = ()):
        self._tasks: List[TaskDocument] = list(tasks)
        self._employees: List[EmployeeDocument] = list(employees)

    def _commit_tasks(self, documents: List[TaskDocument]) -> bool:
        self._tasks = documents
        return True

    def _commit_employees(self, documents: List[EmployeeDocument]) -> bool:
        self._employees = documents
        return True

    @property
    def task_documents(self) -> List[TaskDocument]:
        return list(self._tasks)

    @property
    def employee_documents(self) -> List[EmployeeDocument]:
        return list(self._employees)

    def load_all_tasks(self) -> List[TaskRecord]:
        return [doc.to_record() for doc in self._tasks]

    def load_tasks_by_kind(self, kind: TaskKind) -> List[TaskRecord]:
        kind = TaskKind.parse(kind)
        return [doc.to_record() for doc in self._tasks if doc.kind == kind]

    def save_task(self, task: TaskRecord, kind: TaskKind) -> bool:
        document = TaskDocument.from_record(task, TaskKind.parse(kind))
        return self._commit_tasks(self._tasks + [document])

    def update_task(self, task_id: str, task: TaskRecord) -> bool:
        changes = {
            'description': task.description,
            'department': task.department,
            'urgency': task.urgency_label,
            'estimated_hours': task.estimated_hours,
            'assigned_employee_id': task.assigned_employee_id,
        }
        if task.priority is not None:
            changes['priority'] = task.priority.rank
            changes['due_date'] = task.priority.due_date

        found = False
        documents = []
        for doc in self._tasks:
            if doc.id == task_id:
                doc = doc.model_copy(update=changes)
                found = True
            documents.append(doc)
        if not found:
            log.warning(f"No stored task {task_id} to update")
            return False
        return self._commit_tasks(documents)

    def delete_task(self, task_id: str) -> bool:
        documents = []
        for doc in self._tasks:
            if doc.id == task_id:
                continue
            if task_id in doc.dependencies:
                doc = doc.model_copy(update={'dependencies': [d for d in doc.dependencies if d != task_id]})
            documents.append(doc)
        return self._commit_tasks(documents)

    def load_all_employees(self) -> List[EmployeeRecord]:
        return [doc.to_record() for doc in self._employees]

    def save_employee(self, employee: EmployeeRecord) -> bool:
        return self._commit_employees(self._employees + [EmployeeDocument.from_record(employee)])

    def next_task_id(self) -> str:
        return next_id("T", (doc.id for doc in self._tasks))

    def next_employee_id(self) -> str:
        return next_id("E", (doc.id for doc in self._employees), aliases=("EMP",))

    def load_dependencies(self) -> Dict[str, List[str]]:
        dependencies: Dict[str, List[str]] = {}
        for doc in self._tasks:
            if not doc.dependencies:
                continue
            merged = dependencies.setdefault(doc.id, [])
            for dep in doc.dependencies:
                if dep not in merged:
                    merged.append(dep)
        return dependencies

    def save_dependencies(self, task_id: str, dependencies: List[str]) -> bool:
        found = False
        documents = []
        for doc in self._tasks:
            if doc.id == task_id:
                doc = doc.model_copy(update={'dependencies': list(dependencies)})
                found = True
            documents.append(doc)
        if not found:
            log.warning(f"No stored task {task_id} to attach dependencies to")
            return False
        return self._commit_tasks(documents)

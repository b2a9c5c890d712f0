"""
Workspace - Ties the file store, the task organizer and the employee directory
together for one data directory.
"""
import os
from pathlib import Path
from typing import Optional, Union

from taskorg.directory import EmployeeDirectory
from taskorg.errors import DuplicateIdError, NotFoundError, PersistenceFailureError
from taskorg.logs import get_logger
from taskorg.models import EmployeeRecord, TaskKind, TaskRecord, Urgency
from taskorg.organizer import TaskOrganizer
from .store import YAMLGateway

log = get_logger("data")

DEFAULT_DATA_DIR = Path(".taskorg")

def resolve_data_dir(data_dir: Union[Path, str, None] = None) -> Path:
    """Explicit argument first, then TASKORG_DATA_DIR, then ./.taskorg."""
    return Path(data_dir or os.getenv("TASKORG_DATA_DIR") or DEFAULT_DATA_DIR)

class Workspace:
    """Main context object providing access to tasks and employees of a data directory."""

    def __init__(self, data_dir: Union[Path, str, None] = None):
        self.data_dir = resolve_data_dir(data_dir)
        self.gateway = YAMLGateway(self.data_dir)
        self.organizer = TaskOrganizer(self.gateway)
        self.organizer.load()
        self.directory = EmployeeDirectory()
        for employee in self.gateway.load_all_employees():
            try:
                self.directory.insert(employee)
            except DuplicateIdError as e:
                log.warning(f"Skipping stored employee: {e}")

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit. Changes are stored as they happen, nothing is flushed here."""
        if exc_type is not None:
            log.debug(f"Leaving workspace {self.data_dir} after {exc_type.__name__}: {exc_val}")
        return False

    def initialize(self) -> None:
        self.gateway.initialize()

    def create_task(self, description: str, department: str, urgency: Union[Urgency, str] = Urgency.MEDIUM,
                    hours: int = 1, kind: Union[TaskKind, str] = TaskKind.DEPARTMENTAL) -> TaskRecord:
        """Allocate the next task id and classify a new task under `kind`."""
        task = TaskRecord(
            id=self.gateway.next_task_id(),
            description=description,
            department=department,
            urgency=urgency,
            estimated_hours=hours,
        )
        self.organizer.classify(task, kind)
        return task

    def promote(self, task_id: str, rank: int, due_date: str) -> TaskRecord:
        task = self.organizer.find_by_id(task_id)
        if task is None:
            raise NotFoundError(f"Task {task_id} not found")
        return self.organizer.promote_to_priority(task, rank, due_date)

    def hire(self, name: str, department: str) -> EmployeeRecord:
        """Store a new employee, then add it to the directory."""
        employee = EmployeeRecord(id=self.gateway.next_employee_id(), name=name, department=department)
        if not self.gateway.save_employee(employee):
            raise PersistenceFailureError(f"Could not save employee {employee.id}")
        self.directory.insert(employee)
        log.info(f"Hired {employee.id} ({employee.name}, {employee.department})")
        return employee

    def assign(self, task_id: str, employee_id: str) -> TaskRecord:
        if self.organizer.find_by_id(task_id) is None:
            raise NotFoundError(f"Task {task_id} not found")
        if self.directory.search_by_id(employee_id) is None:
            raise NotFoundError(f"Employee {employee_id} not found")
        return self.organizer.assign_employee(task_id, employee_id)

    def employee_name(self, employee_id: Optional[str]) -> Optional[str]:
        if not employee_id:
            return None
        employee = self.directory.search_by_id(employee_id)
        return employee.name if employee else None

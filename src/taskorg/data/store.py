"""
YAMLGateway - File-backed persistence gateway.

Tasks live in `<data_dir>/tasks.yml` under a `tareas` list and employees in
`<data_dir>/employees.yml` under an `empleados` list. Every change rewrites the
affected file atomically; the in-memory documents are only replaced once the
write went through.
"""
from pathlib import Path
from typing import List, Union

from pydantic import ValidationError

from taskorg.errors import CorruptionError, FileOperationError
from taskorg.logs import get_logger
from taskorg.models import TaskDocument, EmployeeDocument, TaskFile, EmployeeFile
from .gateway import MemoryGateway
from .io import atomic_write, load_yaml_file
from .validate import task_file_schema, employee_file_schema, validate_or_raise

log = get_logger("data.store")

TASKS_FILE = "tasks.yml"
EMPLOYEES_FILE = "employees.yml"

class YAMLGateway(MemoryGateway):

    def __init__(self, data_dir: Union[Path, str]):
        self.data_dir = Path(data_dir)
        self.tasks_path = self.data_dir / TASKS_FILE
        self.employees_path = self.data_dir / EMPLOYEES_FILE
        super().__init__(self._read_tasks(), self._read_employees())
        log.debug(f"Opened store at {self.data_dir}: {len(self._tasks)} tasks, {len(self._employees)} employees")

    def _read_tasks(self) -> List[TaskDocument]:
        data = load_yaml_file(self.tasks_path)
        if data is None:
            return []
        validate_or_raise(data, task_file_schema(), str(self.tasks_path))
        try:
            tasks = TaskFile.model_validate(data).tasks
            for doc in tasks:
                doc.to_record()
        except ValidationError as e:
            raise CorruptionError(f"{self.tasks_path} holds invalid tasks: {e}") from e
        return tasks

    def _read_employees(self) -> List[EmployeeDocument]:
        data = load_yaml_file(self.employees_path)
        if data is None:
            return []
        validate_or_raise(data, employee_file_schema(), str(self.employees_path))
        try:
            employees = EmployeeFile.model_validate(data).employees
            for doc in employees:
                doc.to_record()
        except ValidationError as e:
            raise CorruptionError(f"{self.employees_path} holds invalid employees: {e}") from e
        return employees

    def _write(self, path: Path, key: str, documents) -> bool:
        data = {key: [doc.to_dict() for doc in documents]}
        try:
            atomic_write(path, data, create_dirs=True)
        except FileOperationError as e:
            log.error(f"Change not stored, {path} could not be written: {e}")
            return False
        return True

    def _commit_tasks(self, documents: List[TaskDocument]) -> bool:
        if not self._write(self.tasks_path, "tareas", documents):
            return False
        return super()._commit_tasks(documents)

    def _commit_employees(self, documents: List[EmployeeDocument]) -> bool:
        if not self._write(self.employees_path, "empleados", documents):
            return False
        return super()._commit_employees(documents)

    def initialize(self) -> None:
        """Create the data directory and write out both files, keeping what they hold."""
        for path, key, documents in ((self.tasks_path, "tareas", self._tasks),
                                     (self.employees_path, "empleados", self._employees)):
            if not path.exists():
                atomic_write(path, {key: [doc.to_dict() for doc in documents]}, create_dirs=True)
                log.info(f"Created {path}")

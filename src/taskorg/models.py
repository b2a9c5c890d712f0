from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import date
from enum import Enum
from typing import Optional, List, Dict, Union, Iterable, Tuple, Any
import re

TASK_ID_PATTERN = re.compile(r'^T\d+$')
EMPLOYEE_ID_PATTERN = re.compile(r'^(?:E|EMP)\d+$')
DATE_PATTERN = re.compile(r'^\d{4}-\d{2}-\d{2}$')

class Urgency(Enum):
    CRITICAL = "Critical"
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def parse(cls, value) -> Optional['Urgency']:
        """Resolve an urgency label, including the legacy Spanish labels. None if unknown."""
        if isinstance(value, cls):
            return value
        if value is None:
            return None
        return _URGENCY_ALIASES.get(str(value).strip().lower())

_URGENCY_ALIASES = {
    "critical": Urgency.CRITICAL,
    "crítica": Urgency.CRITICAL,
    "critica": Urgency.CRITICAL,
    "high": Urgency.HIGH,
    "alta": Urgency.HIGH,
    "medium": Urgency.MEDIUM,
    "media": Urgency.MEDIUM,
    "low": Urgency.LOW,
    "baja": Urgency.LOW,
}

URGENCY_ORDER = (Urgency.CRITICAL, Urgency.HIGH, Urgency.MEDIUM, Urgency.LOW)

def urgency_rank(value) -> int:
    """Sort rank of an urgency: Critical first, unknown labels last."""
    urgency = Urgency.parse(value)
    if urgency is None:
        return len(URGENCY_ORDER)
    return URGENCY_ORDER.index(urgency)

PRIORITY_LABELS = {1: "Critical", 2: "High", 3: "Medium", 4: "Low"}

def priority_label(rank: int) -> str:
    return PRIORITY_LABELS.get(rank, "Undefined")

class TaskKind(Enum):
    """Container a task is classified into. Values are the stored `tipo` strings."""
    URGENT = "urgente"
    SCHEDULED = "programada"
    DEPARTMENTAL = "departamento"
    PRIORITY = "prioridad"

    @classmethod
    def parse(cls, value) -> 'TaskKind':
        if isinstance(value, cls):
            return value
        key = str(value).strip().lower()
        for kind in cls:
            if key in (kind.value, kind.name.lower()):
                return kind
        raise ValueError(f"Unknown task kind: {value}")

CLASSIFICATION_KINDS = (TaskKind.URGENT, TaskKind.SCHEDULED, TaskKind.DEPARTMENTAL)

def next_id(prefix: str, existing_ids: Iterable[str], aliases: Iterable[str] = ()) -> str:
    """Return `<prefix><max+1>` over the ids matching `<prefix>\\d+` (or an alias prefix)."""
    prefixes = "|".join(re.escape(p) for p in (prefix, *aliases))
    pattern = re.compile(rf'^(?:{prefixes})(\d+)$')
    highest = 0
    for existing in existing_ids:
        match = pattern.match(existing or "")
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}{highest + 1}"

class TaskRecord(BaseModel):
    """A unit of work. Identity and equality are by id alone.

    A record whose `priority` is set is the prioritized variant used by the
    priority index; its total order is (rank, due date).
    """

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(description="Unique task identifier, T<number>")
    description: str = Field(description="What has to be done")
    department: str = Field(description="Department responsible for the task")
    urgency: Union[Urgency, str] = Field(
        default=Urgency.MEDIUM,
        description="Urgency level; unknown legacy labels are kept verbatim"
    )
    estimated_hours: int = Field(default=1, gt=0, description="Estimated effort in hours")
    assigned_employee_id: Optional[str] = Field(default=None, description="Id of the assigned employee")
    priority: Optional['TaskRecord.Priority'] = Field(
        default=None,
        description="Priority extension, set only on prioritized records"
    )

    @field_validator('id')
    @classmethod
    def validate_id(cls, v):
        if not TASK_ID_PATTERN.match(v):
            raise ValueError(f"Invalid task id format: {v}")
        return v

    @field_validator('description')
    @classmethod
    def validate_description(cls, v):
        if not v.strip():
            raise ValueError("description must not be empty")
        return v

    @field_validator('urgency', mode='before')
    @classmethod
    def normalize_urgency(cls, v):
        parsed = Urgency.parse(v)
        return parsed if parsed is not None else v

    def __eq__(self, other):
        if not isinstance(other, TaskRecord):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    @property
    def urgency_label(self) -> str:
        return self.urgency.value if isinstance(self.urgency, Urgency) else self.urgency

    @property
    def is_prioritized(self) -> bool:
        return self.priority is not None

    def with_priority(self, rank: int, due_date: str) -> 'TaskRecord':
        """Return a prioritized copy of this task."""
        return self.model_copy(update={'priority': TaskRecord.Priority(rank=rank, due_date=due_date)})

    def without_priority(self) -> 'TaskRecord':
        return self.model_copy(update={'priority': None})

    def priority_key(self) -> Tuple[int, str]:
        if self.priority is None:
            raise ValueError(f"Task {self.id} has no priority")
        return (self.priority.rank, self.priority.due_date)

    class Priority(BaseModel):
        rank: int = Field(ge=1, description="Priority rank, 1 is the highest")
        due_date: str = Field(description="Due date as an ISO date (yyyy-mm-dd)")

        @field_validator('due_date')
        @classmethod
        def validate_due_date(cls, v):
            if not DATE_PATTERN.match(v):
                raise ValueError(f"Invalid due date format: {v}")
            try:
                date.fromisoformat(v)
            except ValueError as e:
                raise ValueError(f"Invalid due date format: {v}") from e
            return v

        @property
        def label(self) -> str:
            return priority_label(self.rank)

TaskRecord.model_rebuild()

class EmployeeRecord(BaseModel):
    """An employee. Identity and equality are by id alone."""

    model_config = ConfigDict(validate_assignment=True)

    id: str = Field(description="Unique employee identifier, E<number>")
    name: str = Field(description="Full name")
    department: str = Field(description="Department the employee belongs to")

    @field_validator('id')
    @classmethod
    def validate_id(cls, v):
        if not EMPLOYEE_ID_PATTERN.match(v):
            raise ValueError(f"Invalid employee id format: {v}")
        return v

    @field_validator('name')
    @classmethod
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError("name must not be empty")
        return v

    def __eq__(self, other):
        if not isinstance(other, EmployeeRecord):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

class TaskDocument(BaseModel):
    """Stored shape of a task, keyed the way existing datasets name the fields."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(pattern=r'^T\d+$', description="Unique task identifier")
    description: str = Field(alias="descripcion", min_length=1, description="Task description")
    department: str = Field(alias="departamento", description="Responsible department")
    urgency: str = Field(alias="urgencia", description="Urgency label")
    estimated_hours: int = Field(default=1, gt=0, alias="horasEstimadas", description="Estimated hours")
    assigned_employee_id: Optional[str] = Field(
        default=None, alias="empleadoAsignado", description="Assigned employee id"
    )
    kind: TaskKind = Field(alias="tipo", description="Container the task was classified into")
    priority: Optional[int] = Field(default=None, alias="prioridad", description="Priority rank")
    due_date: Optional[str] = Field(
        default=None, alias="fechaEntrega", pattern=r'^\d{4}-\d{2}-\d{2}$', description="Due date (yyyy-mm-dd)"
    )
    dependencies: List[str] = Field(
        default_factory=list, alias="dependencias", description="Ids this task depends on"
    )

    @field_validator('due_date')
    @classmethod
    def validate_due_date(cls, v):
        if v is not None:
            try:
                date.fromisoformat(v)
            except ValueError as e:
                raise ValueError(f"Invalid due date: {v}") from e
        return v

    @classmethod
    def from_record(cls, task: TaskRecord, kind: TaskKind,
                    dependencies: Optional[List[str]] = None) -> 'TaskDocument':
        return cls(
            id=task.id,
            description=task.description,
            department=task.department,
            urgency=task.urgency_label,
            estimated_hours=task.estimated_hours,
            assigned_employee_id=task.assigned_employee_id,
            kind=kind,
            priority=task.priority.rank if task.priority else None,
            due_date=task.priority.due_date if task.priority else None,
            dependencies=list(dependencies or []),
        )

    def to_record(self) -> TaskRecord:
        task = TaskRecord(
            id=self.id,
            description=self.description,
            department=self.department,
            urgency=self.urgency,
            estimated_hours=self.estimated_hours,
            assigned_employee_id=self.assigned_employee_id,
        )
        # A due date marks a prioritized task; the rank defaults to 2 (High)
        if self.due_date is not None:
            task = task.with_priority(self.priority or 2, self.due_date)
        return task

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(mode='json', by_alias=True, exclude_none=True)
        if not data.get("dependencias"):
            data.pop("dependencias", None)
        return data

class EmployeeDocument(BaseModel):
    """Stored shape of an employee."""

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(pattern=r'^(?:E|EMP)\d+$', description="Unique employee identifier")
    name: str = Field(alias="nombre", min_length=1, description="Full name")
    department: str = Field(alias="departamento", description="Department")

    @classmethod
    def from_record(cls, employee: EmployeeRecord) -> 'EmployeeDocument':
        return cls(id=employee.id, name=employee.name, department=employee.department)

    def to_record(self) -> EmployeeRecord:
        return EmployeeRecord(id=self.id, name=self.name, department=self.department)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode='json', by_alias=True)

class TaskFile(BaseModel):
    """Contents of tasks.yml."""

    tasks: List[TaskDocument] = Field(default_factory=list, alias="tareas", description="Stored tasks")

class EmployeeFile(BaseModel):
    """Contents of employees.yml."""

    employees: List[EmployeeDocument] = Field(
        default_factory=list, alias="empleados", description="Stored employees"
    )

"""
taskorg - Task organization for a small company.

Tasks are classified into an urgent stack, a scheduled queue or a departmental
list, can be promoted into a priority index, are linked by dependencies and
are assigned to employees kept in a department-ordered directory.
"""

from .version import VERSION
from .models import (
    Urgency,
    TaskKind,
    TaskRecord,
    EmployeeRecord,
)
from .directory import EmployeeDirectory
from .graph import TaskDependencyGraph
from .organizer import TaskOrganizer
from .data import PersistenceGateway, MemoryGateway, YAMLGateway

__version__ = VERSION

__all__ = [
    "VERSION",
    "Urgency",
    "TaskKind",
    "TaskRecord",
    "EmployeeRecord",
    "EmployeeDirectory",
    "TaskDependencyGraph",
    "TaskOrganizer",
    "PersistenceGateway",
    "MemoryGateway",
    "YAMLGateway",
]

"""Unit tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from taskorg.models import (
    Urgency, TaskKind, TaskRecord, EmployeeRecord, TaskDocument, EmployeeDocument,
    TaskFile, urgency_rank, priority_label, next_id
)


def make_task(task_id="T1", **overrides):
    fields = dict(id=task_id, description="Fix login", department="IT", urgency="High", estimated_hours=3)
    fields.update(overrides)
    return TaskRecord(**fields)


class TestUrgency:
    """Test urgency parsing and ranking."""

    def test_parse_english_and_legacy_labels(self):
        """Test that English and legacy labels resolve to the same level."""
        assert Urgency.parse("Critical") is Urgency.CRITICAL
        assert Urgency.parse("crítica") is Urgency.CRITICAL
        assert Urgency.parse("Alta") is Urgency.HIGH
        assert Urgency.parse(" media ") is Urgency.MEDIUM
        assert Urgency.parse("BAJA") is Urgency.LOW
        assert Urgency.parse(Urgency.LOW) is Urgency.LOW

    def test_parse_unknown(self):
        """Test that unknown labels parse to None."""
        assert Urgency.parse("Whenever") is None
        assert Urgency.parse(None) is None

    def test_rank_puts_unknown_last(self):
        """Test the urgency sort rank."""
        assert urgency_rank(Urgency.CRITICAL) == 0
        assert urgency_rank("High") == 1
        assert urgency_rank("Media") == 2
        assert urgency_rank(Urgency.LOW) == 3
        assert urgency_rank("Someday") == 4


class TestTaskKind:
    """Test TaskKind parsing."""

    def test_parse_stored_values_and_names(self):
        """Test parsing stored values and English names."""
        assert TaskKind.parse("urgente") is TaskKind.URGENT
        assert TaskKind.parse("scheduled") is TaskKind.SCHEDULED
        assert TaskKind.parse("Departmental") is TaskKind.DEPARTMENTAL
        assert TaskKind.parse("prioridad") is TaskKind.PRIORITY

    def test_parse_invalid(self):
        """Test that an unknown kind raises."""
        with pytest.raises(ValueError, match="Unknown task kind"):
            TaskKind.parse("backlog")


class TestTaskRecord:
    """Test TaskRecord model."""

    def test_valid_task(self):
        """Test creating a valid task."""
        task = make_task()
        assert task.urgency is Urgency.HIGH
        assert task.urgency_label == "High"
        assert task.assigned_employee_id is None
        assert not task.is_prioritized

    def test_defaults(self):
        """Test default urgency and hours."""
        task = TaskRecord(id="T7", description="Audit", department="Finance")
        assert task.urgency is Urgency.MEDIUM
        assert task.estimated_hours == 1

    def test_unknown_urgency_is_kept(self):
        """Test that an unknown urgency label survives as a string."""
        task = make_task(urgency="Someday")
        assert task.urgency == "Someday"
        assert task.urgency_label == "Someday"

    def test_invalid_fields(self):
        """Test field validation."""
        with pytest.raises(ValidationError, match="Invalid task id format"):
            make_task(task_id="X1")
        with pytest.raises(ValidationError, match="description must not be empty"):
            make_task(description="   ")
        with pytest.raises(ValidationError):
            make_task(estimated_hours=0)

    def test_assignment_is_validated(self):
        """Test that field edits are validated."""
        task = make_task()
        with pytest.raises(ValidationError):
            task.estimated_hours = -2

    def test_identity_by_id(self):
        """Test that equality and hashing use the id only."""
        a = make_task(description="One")
        b = make_task(description="Two", department="HR")
        assert a == b
        assert len({a, b}) == 1
        assert make_task("T2") != a


class TestPriority:
    """Test the prioritized task variant."""

    def test_with_priority(self):
        """Test wrapping a task with a priority."""
        task = make_task()
        prioritized = task.with_priority(1, "2024-05-01")
        assert prioritized.is_prioritized
        assert prioritized.priority.label == "Critical"
        assert prioritized.priority_key() == (1, "2024-05-01")
        assert not task.is_prioritized
        assert not prioritized.without_priority().is_prioritized

    def test_priority_order(self):
        """Test ordering by rank, then due date."""
        a = make_task("T1").with_priority(2, "2024-01-10")
        b = make_task("T2").with_priority(1, "2024-12-31")
        c = make_task("T3").with_priority(1, "2024-06-01")
        ordered = sorted([a, b, c], key=lambda t: t.priority_key())
        assert [t.id for t in ordered] == ["T3", "T2", "T1"]

    def test_invalid_priority(self):
        """Test rank and due date validation."""
        with pytest.raises(ValidationError):
            make_task().with_priority(0, "2024-01-01")
        with pytest.raises(ValidationError, match="Invalid due date format"):
            make_task().with_priority(1, "01/02/2024")
        with pytest.raises(ValidationError, match="Invalid due date format"):
            make_task().with_priority(1, "2024-02-30")

    def test_priority_key_requires_priority(self):
        """Test that an unprioritized task has no priority key."""
        with pytest.raises(ValueError, match="has no priority"):
            make_task().priority_key()

    def test_priority_labels(self):
        """Test priority rank labels."""
        assert [priority_label(r) for r in (1, 2, 3, 4, 5)] == ["Critical", "High", "Medium", "Low", "Undefined"]


class TestEmployeeRecord:
    """Test EmployeeRecord model."""

    def test_valid_ids(self):
        """Test current and legacy id formats."""
        assert EmployeeRecord(id="E1", name="Ana", department="IT").id == "E1"
        assert EmployeeRecord(id="EMP12", name="Luis", department="HR").id == "EMP12"

    def test_invalid_employee(self):
        """Test id and name validation."""
        with pytest.raises(ValidationError, match="Invalid employee id format"):
            EmployeeRecord(id="X1", name="Ana", department="IT")
        with pytest.raises(ValidationError, match="name must not be empty"):
            EmployeeRecord(id="E1", name="", department="IT")


class TestDocuments:
    """Test the stored document shapes."""

    def test_task_document_keys(self):
        """Test that documents dump with the stored key names."""
        task = make_task(assigned_employee_id="E3")
        data = TaskDocument.from_record(task, TaskKind.URGENT, ["T2"]).to_dict()
        assert data == {
            "id": "T1",
            "descripcion": "Fix login",
            "departamento": "IT",
            "urgencia": "High",
            "horasEstimadas": 3,
            "empleadoAsignado": "E3",
            "tipo": "urgente",
            "dependencias": ["T2"],
        }

    def test_task_document_optional_fields(self):
        """Test that empty optional fields are left out."""
        data = TaskDocument.from_record(make_task(), TaskKind.DEPARTMENTAL).to_dict()
        assert "empleadoAsignado" not in data
        assert "dependencias" not in data
        assert "prioridad" not in data

    def test_prioritized_document(self):
        """Test that a due date marks a prioritized record."""
        doc = TaskDocument.model_validate({
            "id": "T4", "descripcion": "Close books", "departamento": "Finance",
            "urgencia": "Alta", "tipo": "prioridad", "prioridad": 1, "fechaEntrega": "2024-03-31",
        })
        task = doc.to_record()
        assert task.urgency is Urgency.HIGH
        assert task.estimated_hours == 1
        assert task.priority_key() == (1, "2024-03-31")

    def test_due_date_without_rank_defaults_to_high(self):
        """Test the default rank of a stored due date."""
        doc = TaskDocument.model_validate({
            "id": "T5", "descripcion": "Report", "departamento": "Sales",
            "urgencia": "Low", "tipo": "urgente", "fechaEntrega": "2024-03-31",
        })
        assert doc.to_record().priority_key() == (2, "2024-03-31")

    def test_employee_document(self):
        """Test the employee document shape."""
        employee = EmployeeRecord(id="E2", name="Marta", department="Legal")
        data = EmployeeDocument.from_record(employee).to_dict()
        assert data == {"id": "E2", "nombre": "Marta", "departamento": "Legal"}
        assert EmployeeDocument.model_validate(data).to_record() == employee

    def test_task_file(self):
        """Test loading a task file by its stored key."""
        tasks = TaskFile.model_validate({"tareas": [
            {"id": "T1", "descripcion": "a", "departamento": "IT", "urgencia": "Low", "tipo": "programada"}
        ]}).tasks
        assert tasks[0].kind is TaskKind.SCHEDULED


class TestNextId:
    """Test id allocation."""

    def test_next_id(self):
        """Test that the next id follows the highest numeric suffix."""
        assert next_id("T", []) == "T1"
        assert next_id("T", ["T1", "T9", "T3"]) == "T10"
        assert next_id("T", ["T2", "E40", "Tx"]) == "T3"

    def test_legacy_aliases_count(self):
        """Test that legacy employee ids count towards the next id."""
        assert next_id("E", ["E1", "EMP7"], aliases=("EMP",)) == "E8"
        assert next_id("E", ["EMP3"]) == "E1"

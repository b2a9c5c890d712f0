from typing import Any, Dict
from jsonschema import validate, ValidationError, SchemaError

from taskorg.errors import CorruptionError
from taskorg.logs import get_logger
from taskorg.models import TaskFile, EmployeeFile

log = get_logger("data.validate")

def task_file_schema() -> Dict[str, Any]:
    """JSON Schema of tasks.yml, generated from the document models."""
    return TaskFile.model_json_schema(by_alias=True)

def employee_file_schema() -> Dict[str, Any]:
    """JSON Schema of employees.yml, generated from the document models."""
    return EmployeeFile.model_json_schema(by_alias=True)

def validate_data(data: Any, schema: Dict[str, Any], label: str) -> bool:
    """
    Validate loaded data against a schema.

    Args:
        data: The parsed file contents.
        schema: The JSON Schema to check against.
        label: Name used in log messages, usually the file path.

    Returns:
        True if the data is valid, False otherwise.
    """
    try:
        validate(instance=data, schema=schema)
        log.debug(f"'{label}' is VALID")
        return True
    except ValidationError as e:
        log.error(f"'{label}' FAILED validation: {e.message}")
        return False
    except SchemaError as e:
        log.error(f"Validation failed: the schema itself is invalid. Error: {e.message}")
        return False

def validate_or_raise(data: Any, schema: Dict[str, Any], label: str) -> None:
    if not validate_data(data, schema, label):
        raise CorruptionError(f"{label} does not match its schema")

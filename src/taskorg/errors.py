class TaskOrgError(Exception):
    """Base exception for all taskorg errors."""
    pass

class RecoverableError(TaskOrgError):
    """An error the caller can act on without losing data."""
    pass

class FatalError(TaskOrgError):
    """An error that requires application termination or major intervention."""
    pass

class CorruptionError(FatalError):
    """Stored data is unreadable or does not match its schema."""
    pass

class FileOperationError(RecoverableError):
    """File operation failed but can be retried."""
    pass

class PersistenceFailureError(RecoverableError):
    """The persistence gateway refused a change; in-memory state was rolled back."""
    pass

class DuplicateIdError(RecoverableError):
    """An id is already present in the target container."""
    pass

class EmptyContainerError(RecoverableError):
    """A peek or pop was attempted on an empty container."""
    pass

class IndexOutOfRangeError(RecoverableError, IndexError):
    """Index access outside [0, size)."""
    pass

class NotFoundError(RecoverableError, LookupError):
    """A referenced task or employee does not exist."""
    pass

class UnknownTaskError(RecoverableError, LookupError):
    """A dependency references a task that is not registered."""
    pass

class CycleDetectedError(RecoverableError):
    """Adding a dependency would close a cycle."""
    pass

import pytest

from taskorg.data.gateway import MemoryGateway
from taskorg.errors import FileOperationError
from taskorg.models import TaskRecord
from taskorg.organizer import TaskOrganizer


class FlakyGateway(MemoryGateway):
    """Memory gateway whose next commits can be refused or made to raise."""

    def __init__(self):
        super().__init__()
        self.refuse = False
        self.explode = False
        self.disconnect = False

    def _commit_tasks(self, documents):
        if self.explode:
            raise FileOperationError("disk unplugged")
        if self.disconnect:
            raise ConnectionError("store went away")
        if self.refuse:
            return False
        return super()._commit_tasks(documents)


def make_task(n, department="IT", urgency="Medium", hours=1, **extra):
    fields = dict(id=f"T{n}", description=f"Task {n}", department=department,
                  urgency=urgency, estimated_hours=hours)
    fields.update(extra)
    return TaskRecord(**fields)


@pytest.fixture
def gateway():
    return FlakyGateway()


@pytest.fixture
def organizer(gateway):
    return TaskOrganizer(gateway)

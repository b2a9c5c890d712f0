"""
EmployeeDirectory - binary tree of employees keyed by department name.

Nodes live in an arena (a plain list) and refer to their children by index.
Insertion goes left only when the new department sorts strictly before the
current node's, so equal departments chain down the right side. The tree is
never rebalanced.
"""
from typing import Iterator, List, Optional, Iterable

from taskorg.errors import DuplicateIdError
from taskorg.logs import get_logger
from taskorg.models import EmployeeRecord

log = get_logger("directory")

class _Node:
    __slots__ = ("record", "left", "right")

    def __init__(self, record: EmployeeRecord):
        self.record = record
        self.left: Optional[int] = None
        self.right: Optional[int] = None

class EmployeeDirectory:
    """Employees organized in a department-keyed binary tree."""

    def __init__(self):
        self._nodes: List[_Node] = []
        self._root: Optional[int] = None

    @classmethod
    def from_records(cls, records: Iterable[EmployeeRecord]) -> 'EmployeeDirectory':
        directory = cls()
        for record in records:
            directory.insert(record)
        return directory

    def insert(self, employee: EmployeeRecord) -> None:
        if self.search_by_id(employee.id) is not None:
            raise DuplicateIdError(f"Employee {employee.id} is already in the directory")

        index = len(self._nodes)
        self._nodes.append(_Node(employee))
        if self._root is None:
            self._root = index
            log.debug(f"Inserted {employee.id} as root")
            return

        current = self._nodes[self._root]
        while True:
            if employee.department < current.record.department:
                if current.left is None:
                    current.left = index
                    break
                current = self._nodes[current.left]
            else:
                if current.right is None:
                    current.right = index
                    break
                current = self._nodes[current.right]
        log.debug(f"Inserted {employee.id} ({employee.department})")

    def _preorder(self) -> Iterator[_Node]:
        stack = [self._root] if self._root is not None else []
        while stack:
            node = self._nodes[stack.pop()]
            yield node
            # Right pushed first so the left subtree is visited first
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)

    def search_by_department(self, name: Optional[str],
                             out: Optional[List[EmployeeRecord]] = None) -> List[EmployeeRecord]:
        """
        Collect employees of a department into `out` (a new list if omitted).

        A blank name collects every employee. Matching is case-insensitive and
        visits the whole tree, since equal keys are not confined to one branch.
        """
        result = out if out is not None else []
        wanted = (name or "").strip()
        for node in self._preorder():
            if not wanted or node.record.department.lower() == wanted.lower():
                result.append(node.record)
        return result

    def search_by_id(self, employee_id: str) -> Optional[EmployeeRecord]:
        for node in self._preorder():
            if node.record.id == employee_id:
                return node.record
        return None

    def count(self) -> int:
        return sum(1 for _ in self._preorder())

    def height(self) -> int:
        if self._root is None:
            return 0
        tallest = 0
        stack = [(self._root, 1)]
        while stack:
            index, depth = stack.pop()
            tallest = max(tallest, depth)
            node = self._nodes[index]
            for child in (node.left, node.right):
                if child is not None:
                    stack.append((child, depth + 1))
        return tallest

    def is_empty(self) -> bool:
        return self._root is None

    @property
    def root(self) -> Optional[EmployeeRecord]:
        return self._nodes[self._root].record if self._root is not None else None

    def render(self) -> str:
        """Sideways drawing: right subtree above, left below, four spaces per level."""
        lines = []
        stack = []
        index, level = self._root, 0
        while stack or index is not None:
            while index is not None:
                stack.append((index, level))
                index, level = self._nodes[index].right, level + 1
            index, level = stack.pop()
            node = self._nodes[index]
            lines.append(f"{'    ' * level}{node.record.name} ({node.record.department})")
            index, level = node.left, level + 1
        return "\n".join(lines) + ("\n" if lines else "")

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[EmployeeRecord]:
        return (node.record for node in self._preorder())

    def __str__(self) -> str:
        return self.render()

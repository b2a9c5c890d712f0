"""
Ordering, aggregation and distribution helpers over task snapshots.

Everything here is a pure function: inputs are never mutated.
"""
from typing import Dict, List, Optional, Sequence, Iterable

from taskorg.models import TaskRecord, urgency_rank

def sort_by_urgency_then_department(tasks: Iterable[TaskRecord]) -> List[TaskRecord]:
    """Critical first, unknown urgencies last; department ascending within a level."""
    return sorted(tasks, key=lambda t: (urgency_rank(t.urgency), t.department))

def sort_by_priority(tasks: Iterable[TaskRecord]) -> List[TaskRecord]:
    """Prioritized records by (rank, due date); stable on ties."""
    return sorted(tasks, key=lambda t: t.priority_key())

def total_hours(tasks: Iterable[TaskRecord]) -> int:
    total = 0
    for task in tasks:
        total += task.estimated_hours
    return total

def average_hours(tasks: Sequence[TaskRecord]) -> float:
    if not tasks:
        return 0.0
    return total_hours(tasks) / len(tasks)

def longest_task(tasks: Iterable[TaskRecord]) -> Optional[TaskRecord]:
    return max(tasks, key=lambda t: t.estimated_hours, default=None)

def department_statistics(tasks: Iterable[TaskRecord]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for task in tasks:
        counts[task.department] = counts.get(task.department, 0) + 1
    return counts

def distribute_by_midpoint_split(tasks: Sequence[TaskRecord]) -> List[TaskRecord]:
    """
    Pre-order walk over a balanced binary split of `tasks`.

    The midpoint of a range is visited before its left and right halves, e.g.
    [a, b, c, d, e] -> [c, a, b, d, e].
    """
    items = list(tasks)
    if len(items) <= 1:
        return items
    order: List[TaskRecord] = []

    def visit(lo: int, hi: int) -> None:
        if lo > hi:
            return
        mid = (lo + hi) // 2
        order.append(items[mid])
        visit(lo, mid - 1)
        visit(mid + 1, hi)

    visit(0, len(items) - 1)
    return order

def distribute_to_teams(tasks: Sequence[TaskRecord], teams: Sequence[str]) -> Dict[str, List[TaskRecord]]:
    """
    Hand tasks out to teams with the midpoint split; the task found at
    recursion depth d goes to teams[d % len(teams)].
    """
    distribution: Dict[str, List[TaskRecord]] = {team: [] for team in teams}
    items = list(tasks)
    if not items or not teams:
        return distribution

    def visit(lo: int, hi: int, depth: int) -> None:
        if lo > hi:
            return
        mid = (lo + hi) // 2
        distribution[teams[depth % len(teams)]].append(items[mid])
        visit(lo, mid - 1, depth + 1)
        visit(mid + 1, hi, depth + 1)

    visit(0, len(items) - 1, 0)
    return distribution

def format_hours(hours: int) -> str:
    """Readable duration: '1 hour', '5 hours', '2 days and 3 hours'."""
    if hours < 24:
        return f"{hours} hour" if hours == 1 else f"{hours} hours"
    days, remainder = divmod(hours, 24)
    text = f"{days} day" if days == 1 else f"{days} days"
    if remainder > 0:
        text += f" and {remainder} hour" if remainder == 1 else f" and {remainder} hours"
    return text

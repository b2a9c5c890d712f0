"""
Command Line Interface for taskorg.
"""

import functools
import sys

import click
from pydantic import ValidationError

from .version import VERSION
from .data.core import Workspace, resolve_data_dir
from .errors import TaskOrgError
from .models import TaskRecord, Urgency
from . import ordering

KIND_CHOICES = ['urgent', 'scheduled', 'departmental']


def handle_errors(func):
    """Report domain and validation errors as a message and exit with status 1."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ValidationError as e:
            for error in e.errors():
                location = ".".join(str(part) for part in error['loc'])
                click.echo(f"❌ Invalid {location or 'value'}: {error['msg']}")
            sys.exit(1)
        except (TaskOrgError, ValueError) as e:
            click.echo(f"❌ {e}")
            sys.exit(1)
    return wrapper


def _workspace(ctx) -> Workspace:
    return Workspace(ctx.obj['data_dir'])


def _format_task(task: TaskRecord, workspace: Workspace = None) -> str:
    line = f"{task.id}  {task.description} [{task.department}] {task.urgency_label}, {ordering.format_hours(task.estimated_hours)}"
    if task.priority is not None:
        line += f", priority {task.priority.label} due {task.priority.due_date}"
    if task.assigned_employee_id:
        name = workspace.employee_name(task.assigned_employee_id) if workspace else None
        line += f" -> {name} ({task.assigned_employee_id})" if name else f" -> {task.assigned_employee_id}"
    return line


def _echo_tasks(tasks, workspace: Workspace = None, empty: str = "📭 No tasks"):
    if not tasks:
        click.echo(empty)
        return
    for task in tasks:
        click.echo(f"   {_format_task(task, workspace)}")


@click.group()
@click.version_option(version=VERSION, prog_name="taskorg")
@click.option('--data-dir', envvar='TASKORG_DATA_DIR', type=click.Path(file_okay=False),
              help='Directory holding tasks.yml and employees.yml (default: .taskorg)')
@click.pass_context
def main(ctx, data_dir):
    """
    taskorg - Organize tasks into urgent, scheduled and departmental queues.

    Tasks can also be promoted into a priority index, linked by dependencies
    and assigned to employees.
    """
    ctx.ensure_object(dict)
    ctx.obj['data_dir'] = resolve_data_dir(data_dir)


@main.command()
@click.pass_context
@handle_errors
def init(ctx):
    """Initialize a taskorg data directory."""
    data_dir = ctx.obj['data_dir']
    if (data_dir / 'tasks.yml').exists() and (data_dir / 'employees.yml').exists():
        click.echo(f"❌ Already initialized ({data_dir} holds tasks.yml and employees.yml)")
        return

    click.echo(f"🚀 Initializing taskorg data in {data_dir}")
    _workspace(ctx).initialize()
    click.echo("📋 Created tasks.yml and employees.yml")
    click.echo("✅ Data directory initialized successfully!")
    click.echo("💡 Use 'taskorg status' to verify your setup")


@main.command()
@click.pass_context
@handle_errors
def status(ctx):
    """Show the data directory and a summary of its contents."""
    click.echo("🔧 taskorg")
    click.echo(f"📦 Version: {VERSION}")
    click.echo("")

    data_dir = ctx.obj['data_dir']
    if not data_dir.exists():
        click.echo(f"❌ No data directory at {data_dir}")
        click.echo("💡 Run 'taskorg init' to create one")
        return

    with _workspace(ctx) as ws:
        stats = ws.organizer.statistics()
        click.echo(f"📍 Location: {data_dir}")
        click.echo(f"   🔥 Urgent: {stats['urgent']}")
        click.echo(f"   📅 Scheduled: {stats['scheduled']}")
        click.echo(f"   🏢 Departmental: {stats['departmental']}")
        click.echo(f"   ⭐ Prioritized: {stats['prioritized']}")
        click.echo(f"   🔗 Dependencies: {stats['dependencies']}")
        click.echo(f"   👥 Employees: {ws.directory.count()}")
        click.echo(f"   ⏱️  Estimated work: {ordering.format_hours(stats['total_hours'])}")
        for department, count in sorted(stats['departments'].items()):
            click.echo(f"   • {department}: {count} task(s)")


# --- tasks ---

@main.group()
def task():
    """Create, inspect and remove tasks."""
    pass


@task.command('add')
@click.argument('description')
@click.option('-d', '--department', required=True, help='Responsible department')
@click.option('-u', '--urgency', default=Urgency.MEDIUM.value, show_default=True,
              help='Critical, High, Medium or Low')
@click.option('--hours', type=click.IntRange(min=1), default=1, show_default=True, help='Estimated hours')
@click.option('-k', '--kind', type=click.Choice(KIND_CHOICES), default='departmental', show_default=True,
              help='Container the task goes into')
@click.pass_context
@handle_errors
def add_task(ctx, description, department, urgency, hours, kind):
    """Add a new task."""
    with _workspace(ctx) as ws:
        created = ws.create_task(description, department, urgency, hours, kind)
        click.echo(f"✅ Added {created.id} to {kind}")


@task.command('show')
@click.argument('task_id')
@click.pass_context
@handle_errors
def show_task(ctx, task_id):
    """Show a task, where it is classified and what it depends on."""
    with _workspace(ctx) as ws:
        found = ws.organizer.find_by_id(task_id)
        if found is None:
            click.echo(f"❌ Task {task_id} not found")
            sys.exit(1)
        click.echo(_format_task(found, ws))
        kinds = ", ".join(kind.name.lower() for kind in ws.organizer.kinds_of(task_id))
        click.echo(f"   📂 In: {kinds or 'nothing'}")
        deps = ws.organizer.graph.dependencies_of(task_id)
        click.echo(f"   🔗 Depends on: {', '.join(deps) if deps else 'nothing'}")


@task.command('remove')
@click.argument('task_id')
@click.pass_context
@handle_errors
def remove_task(ctx, task_id):
    """Remove a task from every container."""
    with _workspace(ctx) as ws:
        removed = ws.organizer.remove_task(task_id)
        click.echo(f"🗑️  Removed {removed.id} ({removed.description})")


@task.command('assign')
@click.argument('task_id')
@click.argument('employee_id')
@click.pass_context
@handle_errors
def assign_task(ctx, task_id, employee_id):
    """Assign a task to an employee."""
    with _workspace(ctx) as ws:
        updated = ws.assign(task_id, employee_id)
        click.echo(f"✅ {_format_task(updated, ws)}")


# --- containers ---

@main.group()
def urgent():
    """Urgent stack (last in, first out)."""
    pass


@urgent.command('peek')
@click.pass_context
@handle_errors
def urgent_peek(ctx):
    """Show the most recent urgent task."""
    with _workspace(ctx) as ws:
        click.echo(_format_task(ws.organizer.peek_urgent(), ws))


@urgent.command('pop')
@click.pass_context
@handle_errors
def urgent_pop(ctx):
    """Take the most recent urgent task off the stack."""
    with _workspace(ctx) as ws:
        click.echo(f"🔥 {_format_task(ws.organizer.pop_urgent(), ws)}")


@main.group()
def scheduled():
    """Scheduled queue (first in, first out)."""
    pass


@scheduled.command('peek')
@click.pass_context
@handle_errors
def scheduled_peek(ctx):
    """Show the oldest scheduled task."""
    with _workspace(ctx) as ws:
        click.echo(_format_task(ws.organizer.peek_scheduled(), ws))


@scheduled.command('pop')
@click.pass_context
@handle_errors
def scheduled_pop(ctx):
    """Take the oldest scheduled task off the queue."""
    with _workspace(ctx) as ws:
        click.echo(f"📅 {_format_task(ws.organizer.pop_scheduled(), ws)}")


@main.group()
def departmental():
    """Departmental task list."""
    pass


@departmental.command('at')
@click.argument('index', type=int)
@click.pass_context
@handle_errors
def departmental_at(ctx, index):
    """Show the departmental task at INDEX (0-based)."""
    with _workspace(ctx) as ws:
        click.echo(_format_task(ws.organizer.departmental_at(index), ws))


@departmental.command('find')
@click.argument('department')
@click.pass_context
@handle_errors
def departmental_find(ctx, department):
    """List departmental tasks of DEPARTMENT."""
    with _workspace(ctx) as ws:
        _echo_tasks(ws.organizer.departmental_by_department(department), ws,
                    empty=f"📭 No departmental tasks for {department}")


# --- priority ---

@main.group()
def priority():
    """Priority index ordered by rank, then due date."""
    pass


@priority.command('promote')
@click.argument('task_id')
@click.option('-r', '--rank', type=click.IntRange(min=1), required=True, help='1 Critical, 2 High, 3 Medium, 4 Low')
@click.option('--due', required=True, help='Due date (yyyy-mm-dd)')
@click.pass_context
@handle_errors
def priority_promote(ctx, task_id, rank, due):
    """Promote an existing task into the priority index."""
    with _workspace(ctx) as ws:
        promoted = ws.promote(task_id, rank, due)
        click.echo(f"⭐ {_format_task(promoted, ws)}")


@priority.command('peek')
@click.pass_context
@handle_errors
def priority_peek(ctx):
    """Show the highest-priority task."""
    with _workspace(ctx) as ws:
        click.echo(_format_task(ws.organizer.peek_highest_priority(), ws))


@priority.command('pop')
@click.pass_context
@handle_errors
def priority_pop(ctx):
    """Take the highest-priority task out of every container."""
    with _workspace(ctx) as ws:
        click.echo(f"⭐ {_format_task(ws.organizer.pop_highest_priority(), ws)}")


@priority.command('list')
@click.pass_context
@handle_errors
def priority_list(ctx):
    """List prioritized tasks in pop order."""
    with _workspace(ctx) as ws:
        _echo_tasks(ws.organizer.prioritized_tasks(), ws, empty="📭 No prioritized tasks")


# --- reports ---

@main.group()
def report():
    """Reports over the urgent, scheduled and departmental tasks."""
    pass


@report.command('hours')
@click.pass_context
@handle_errors
def report_hours(ctx):
    """Total, average and longest estimated work."""
    with _workspace(ctx) as ws:
        tasks = ws.organizer.snapshot()
        total = ws.organizer.total_estimated_hours()
        click.echo(f"⏱️  Total: {total} hours ({ordering.format_hours(total)})")
        click.echo(f"📊 Average: {ordering.average_hours(tasks):.1f} hours per task")
        longest = ordering.longest_task(tasks)
        if longest is not None:
            click.echo(f"🐢 Longest: {_format_task(longest, ws)}")


@report.command('sorted')
@click.pass_context
@handle_errors
def report_sorted(ctx):
    """All tasks by urgency, then department."""
    with _workspace(ctx) as ws:
        _echo_tasks(ws.organizer.sort_snapshot_by_urgency_then_department(), ws)


@report.command('distribute')
@click.option('-t', '--team', 'teams', multiple=True, help='Team to hand tasks to (repeatable)')
@click.pass_context
@handle_errors
def report_distribute(ctx, teams):
    """Balanced distribution order, optionally split across teams."""
    with _workspace(ctx) as ws:
        if not teams:
            _echo_tasks(ws.organizer.distribution(), ws)
            return
        for team, assigned in ws.organizer.distribute_to_teams(list(teams)).items():
            click.echo(f"👥 {team}: {ordering.format_hours(ordering.total_hours(assigned))}")
            _echo_tasks(assigned, ws)


# --- dependencies ---

@main.group()
def deps():
    """Task dependencies ("A depends on B" means B comes first)."""
    pass


@deps.command('add')
@click.argument('task_id')
@click.argument('depends_on')
@click.pass_context
@handle_errors
def deps_add(ctx, task_id, depends_on):
    """Make TASK_ID depend on DEPENDS_ON."""
    with _workspace(ctx) as ws:
        ws.organizer.add_dependency(task_id, depends_on)
        click.echo(f"🔗 {task_id} now depends on {depends_on}")


@deps.command('remove')
@click.argument('task_id')
@click.argument('depends_on')
@click.pass_context
@handle_errors
def deps_remove(ctx, task_id, depends_on):
    """Drop the dependency of TASK_ID on DEPENDS_ON."""
    with _workspace(ctx) as ws:
        if ws.organizer.remove_dependency(task_id, depends_on):
            click.echo(f"✅ {task_id} no longer depends on {depends_on}")
        else:
            click.echo(f"💡 {task_id} did not depend on {depends_on}")


@deps.command('order')
@click.pass_context
@handle_errors
def deps_order(ctx):
    """Execution order that respects every dependency."""
    with _workspace(ctx) as ws:
        order = ws.organizer.graph.topological_order()
        if not order:
            click.echo("📭 No tasks")
            return
        click.echo(" -> ".join(order))


@deps.command('critical')
@click.pass_context
@handle_errors
def deps_critical(ctx):
    """Longest chain of dependent work."""
    with _workspace(ctx) as ws:
        graph = ws.organizer.graph
        path = graph.critical_path()
        if not path:
            click.echo("📭 No tasks")
            return
        click.echo(f"🛤️  {' -> '.join(path)}")
        click.echo(f"⏱️  {ordering.format_hours(graph.critical_path_hours())}")


@deps.command('ready')
@click.option('--done', 'completed', multiple=True, help='Id of a completed task (repeatable)')
@click.pass_context
@handle_errors
def deps_ready(ctx, completed):
    """Tasks whose dependencies are all completed."""
    with _workspace(ctx) as ws:
        ready = ws.organizer.graph.ready_tasks(completed)
        _echo_tasks([ws.organizer.find_by_id(tid) for tid in ready], ws, empty="📭 Nothing is ready")


@deps.command('show')
@click.pass_context
@handle_errors
def deps_show(ctx):
    """Every task and what it depends on."""
    with _workspace(ctx) as ws:
        text = ws.organizer.graph.describe()
        click.echo(text if text else "📭 No tasks")


# --- employees ---

@main.group()
def employee():
    """Employee directory."""
    pass


@employee.command('add')
@click.argument('name')
@click.option('-d', '--department', required=True, help='Department the employee belongs to')
@click.pass_context
@handle_errors
def employee_add(ctx, name, department):
    """Hire a new employee."""
    with _workspace(ctx) as ws:
        hired = ws.hire(name, department)
        click.echo(f"✅ Added {hired.id} {hired.name} ({hired.department})")


@employee.command('list')
@click.option('-d', '--department', default=None, help='Only list this department')
@click.pass_context
@handle_errors
def employee_list(ctx, department):
    """List employees, optionally of one department."""
    with _workspace(ctx) as ws:
        found = ws.directory.search_by_department(department)
        if not found:
            click.echo("📭 No employees")
            return
        for person in found:
            click.echo(f"   {person.id}  {person.name} ({person.department})")


@employee.command('find')
@click.argument('employee_id')
@click.pass_context
@handle_errors
def employee_find(ctx, employee_id):
    """Show one employee and the tasks assigned to them."""
    with _workspace(ctx) as ws:
        person = ws.directory.search_by_id(employee_id)
        if person is None:
            click.echo(f"❌ Employee {employee_id} not found")
            sys.exit(1)
        click.echo(f"{person.id}  {person.name} ({person.department})")
        assigned = [t for t in ws.organizer.snapshot() if t.assigned_employee_id == employee_id]
        _echo_tasks(assigned, ws, empty="📭 No assigned tasks")


@employee.command('tree')
@click.pass_context
@handle_errors
def employee_tree(ctx):
    """Draw the employee directory tree."""
    with _workspace(ctx) as ws:
        if ws.directory.is_empty():
            click.echo("📭 No employees")
            return
        click.echo(ws.directory.render(), nl=False)

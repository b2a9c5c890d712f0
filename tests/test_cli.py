"""Tests for the command line interface."""

import pytest
from click.testing import CliRunner

from taskorg.cli import main
from taskorg.version import VERSION


@pytest.fixture
def run(tmp_path):
    runner = CliRunner()

    def invoke(*args):
        return runner.invoke(main, ["--data-dir", str(tmp_path), *args])
    return invoke


class TestSetup:
    """Test init, status and version."""

    def test_version(self):
        """Test the version option."""
        result = CliRunner().invoke(main, ["--version"])
        assert result.exit_code == 0
        assert VERSION in result.output

    def test_init_and_status(self, run, tmp_path):
        """Test initializing and inspecting a data directory."""
        result = run("init")
        assert result.exit_code == 0
        assert (tmp_path / "tasks.yml").exists()
        assert (tmp_path / "employees.yml").exists()
        assert "Already initialized" in run("init").output

        run("task", "add", "Deploy", "-d", "IT", "--hours", "30", "-k", "urgent")
        result = run("status")
        assert result.exit_code == 0
        assert "Urgent: 1" in result.output
        assert "1 day and 6 hours" in result.output

    def test_status_without_data(self, tmp_path):
        """Test status outside an initialized directory."""
        result = CliRunner().invoke(main, ["--data-dir", str(tmp_path / "none"), "status"])
        assert result.exit_code == 0
        assert "No data directory" in result.output

    def test_data_dir_from_environment(self, tmp_path):
        """Test that TASKORG_DATA_DIR selects the data directory."""
        runner = CliRunner(env={"TASKORG_DATA_DIR": str(tmp_path / "env")})
        result = runner.invoke(main, ["task", "add", "Audit", "-d", "Finance"])
        assert result.exit_code == 0
        assert (tmp_path / "env" / "tasks.yml").exists()


class TestTasks:
    """Test task commands."""

    def test_add_and_show(self, run):
        """Test adding a task and showing it."""
        result = run("task", "add", "Fix login", "-d", "IT", "-u", "Alta", "--hours", "3", "-k", "scheduled")
        assert result.exit_code == 0
        assert "Added T1 to scheduled" in result.output
        result = run("task", "show", "T1")
        assert "Fix login [IT] High, 3 hours" in result.output
        assert "In: scheduled" in result.output

    def test_show_unknown(self, run):
        """Test showing a task that does not exist."""
        result = run("task", "show", "T9")
        assert result.exit_code == 1
        assert "Task T9 not found" in result.output

    def test_invalid_input(self, run):
        """Test that validation errors exit with status 1."""
        result = run("task", "add", "   ", "-d", "IT")
        assert result.exit_code == 1
        assert "description must not be empty" in result.output

    def test_remove(self, run):
        """Test removing a task."""
        run("task", "add", "Fix login", "-d", "IT")
        assert run("task", "remove", "T1").exit_code == 0
        result = run("task", "remove", "T1")
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_assign(self, run):
        """Test assigning a task to an employee."""
        run("task", "add", "Fix login", "-d", "IT")
        run("employee", "add", "Ana Ruiz", "-d", "IT")
        result = run("task", "assign", "T1", "E1")
        assert result.exit_code == 0
        assert "-> Ana Ruiz (E1)" in result.output
        assert run("task", "assign", "T1", "E7").exit_code == 1


class TestContainers:
    """Test container commands."""

    def test_urgent_stack(self, run):
        """Test urgent peek and pop."""
        run("task", "add", "First", "-d", "IT", "-k", "urgent")
        run("task", "add", "Second", "-d", "IT", "-k", "urgent")
        assert "T2" in run("urgent", "peek").output
        assert "T2" in run("urgent", "pop").output
        assert "T1" in run("urgent", "pop").output
        result = run("urgent", "pop")
        assert result.exit_code == 1
        assert "empty" in result.output

    def test_scheduled_queue(self, run):
        """Test scheduled peek and pop."""
        run("task", "add", "First", "-d", "IT", "-k", "scheduled")
        run("task", "add", "Second", "-d", "IT", "-k", "scheduled")
        assert "T1" in run("scheduled", "pop").output
        assert "T2" in run("scheduled", "peek").output

    def test_departmental(self, run):
        """Test departmental index access and filtering."""
        run("task", "add", "Audit", "-d", "Finance")
        run("task", "add", "Hire", "-d", "HR")
        assert "T2" in run("departmental", "at", "1").output
        result = run("departmental", "at", "2")
        assert result.exit_code == 1
        assert "out of range" in result.output
        result = run("departmental", "find", "finance")
        assert "T1" in result.output
        assert "T2" not in result.output

    def test_priority(self, run):
        """Test promoting, listing and popping prioritized tasks."""
        run("task", "add", "Audit", "-d", "Finance")
        run("task", "add", "Hire", "-d", "HR")
        run("priority", "promote", "T1", "-r", "2", "--due", "2024-05-01")
        run("priority", "promote", "T2", "-r", "1", "--due", "2024-06-01")
        assert "T2" in run("priority", "peek").output
        listing = run("priority", "list").output
        assert listing.index("T2") < listing.index("T1")
        assert "T2" in run("priority", "pop").output
        assert "T2" not in run("departmental", "find", "HR").output

    def test_promote_bad_date(self, run):
        """Test that a malformed due date is rejected."""
        run("task", "add", "Audit", "-d", "Finance")
        result = run("priority", "promote", "T1", "-r", "1", "--due", "tomorrow")
        assert result.exit_code == 1
        assert "Invalid due date format" in result.output


class TestReports:
    """Test report commands."""

    def test_hours_and_sorted(self, run):
        """Test the hour report and the sorted listing."""
        run("task", "add", "Low one", "-d", "Sales", "-u", "Low", "--hours", "2")
        run("task", "add", "Hot one", "-d", "IT", "-u", "Critical", "--hours", "6", "-k", "urgent")
        hours = run("report", "hours").output
        assert "Total: 8 hours" in hours
        assert "Average: 4.0 hours" in hours
        assert "Hot one" in hours.split("Longest:")[1]
        listing = run("report", "sorted").output
        assert listing.index("T2") < listing.index("T1")

    def test_distribute(self, run):
        """Test the distribution report with teams."""
        for name in ("a", "b", "c"):
            run("task", "add", name, "-d", "IT")
        result = run("report", "distribute", "-t", "red", "-t", "blue")
        assert result.exit_code == 0
        assert "red: 1 hour" in result.output
        assert "blue: 2 hours" in result.output


class TestDependencies:
    """Test dependency commands."""

    def test_dependencies(self, run):
        """Test adding, ordering and inspecting dependencies."""
        run("task", "add", "Build", "-d", "IT", "--hours", "2")
        run("task", "add", "Design", "-d", "IT", "--hours", "5")
        run("task", "add", "Ship", "-d", "IT")
        assert run("deps", "add", "T1", "T2").exit_code == 0
        assert run("deps", "add", "T3", "T1").exit_code == 0
        assert run("deps", "order").output.strip() == "T2 -> T1 -> T3"
        critical = run("deps", "critical").output
        assert "T2 -> T1 -> T3" in critical
        assert "8 hours" in critical
        ready = run("deps", "ready", "--done", "T2").output
        assert "T1" in ready
        assert "T3" not in ready
        assert "T1 (Build) -> depends on: T2 (Design)" in run("deps", "show").output

    def test_cycle_rejected(self, run):
        """Test that a cycle is reported as an error."""
        run("task", "add", "Build", "-d", "IT")
        run("task", "add", "Design", "-d", "IT")
        run("deps", "add", "T1", "T2")
        result = run("deps", "add", "T2", "T1")
        assert result.exit_code == 1
        assert "cycle" in result.output

    def test_remove_dependency(self, run):
        """Test removing a dependency."""
        run("task", "add", "Build", "-d", "IT")
        run("task", "add", "Design", "-d", "IT")
        run("deps", "add", "T1", "T2")
        assert "no longer depends" in run("deps", "remove", "T1", "T2").output
        assert "did not depend" in run("deps", "remove", "T1", "T2").output


class TestEmployees:
    """Test employee commands."""

    def test_employees(self, run):
        """Test adding, listing, finding and drawing employees."""
        run("employee", "add", "Ana", "-d", "Marketing")
        run("employee", "add", "Bruno", "-d", "Finance")
        run("employee", "add", "Carla", "-d", "Sales")
        listing = run("employee", "list").output
        assert listing.index("Ana") < listing.index("Bruno") < listing.index("Carla")
        assert "Bruno" not in run("employee", "list", "-d", "sales").output
        assert "E2  Bruno (Finance)" in run("employee", "find", "E2").output
        assert run("employee", "find", "E9").exit_code == 1
        assert run("employee", "tree").output == (
            "    Carla (Sales)\n"
            "Ana (Marketing)\n"
            "    Bruno (Finance)\n"
        )

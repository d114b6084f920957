"""Tasks and the task container.

A task is a named unit of build work. Its body is a list of actions run in
order: actions added with ``do_first`` run before the task's own ``run``
body, actions added with ``do_last`` run after it.
"""

from __future__ import annotations

import os
import subprocess
from collections.abc import Callable, Iterator
from typing import TYPE_CHECKING, Any, TypeVar

from cloverbuild.core.errors import InternalError, TaskError
from cloverbuild.core.logging import get_logger

if TYPE_CHECKING:
    from cloverbuild.host.project import Project

log = get_logger("host.tasks")

Action = Callable[["Task"], None]

T = TypeVar("T", bound="Task")


class Task:
    """A named unit of work with ordered actions and dependencies."""

    def __init__(
        self,
        name: str,
        project: Project,
        *,
        description: str | None = None,
        group: str | None = None,
    ) -> None:
        self.name = name
        self.project = project
        self.description = description
        self.group = group
        self._actions: list[Action] = [Task._run_body]
        self._depends_on: list[Task | TaskCollection | str] = []

    @property
    def path(self) -> str:
        return f":{self.name}"

    @property
    def actions(self) -> list[Action]:
        return list(self._actions)

    def do_first(self, action: Action) -> Task:
        """Prepend an action so it runs before everything else in this task."""
        self._actions.insert(0, action)
        return self

    def do_last(self, action: Action) -> Task:
        self._actions.append(action)
        return self

    def depends_on(self, *dependencies: Task | TaskCollection | str) -> Task:
        """Declare dependencies.

        Collections stay live: tasks added to the project later are picked up
        when the execution graph is populated.
        """
        self._depends_on.extend(dependencies)
        return self

    @property
    def dependencies(self) -> set[Task]:
        """Resolve declared dependencies against the current project state."""
        resolved: set[Task] = set()
        for dep in self._depends_on:
            if isinstance(dep, str):
                resolved.add(self.project.tasks.get_by_name(dep))
            elif isinstance(dep, TaskCollection):
                resolved.update(dep)
            else:
                resolved.add(dep)
        resolved.discard(self)
        return resolved

    def run(self) -> None:
        """Task body. Plain tasks only run their attached actions."""

    def _run_body(self) -> None:
        self.run()

    def execute(self) -> None:
        for action in list(self._actions):
            action(self)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} '{self.path}'>"


class TestTask(Task):
    """Runs a test command as a subprocess in the project directory.

    The command sees a ``CLASSPATH`` made of the main classes dir followed by
    the ``test_runtime`` configuration, so instrumented classes are picked up
    when they are in place.
    """

    __test__ = False  # not a pytest test class

    def __init__(
        self,
        name: str,
        project: Project,
        *,
        command: list[str] | None = None,
        description: str | None = "Runs the unit tests.",
        group: str | None = "verification",
        timeout_sec: float | None = None,
    ) -> None:
        super().__init__(name, project, description=description, group=group)
        self.command: list[str] = list(command or [])
        self.timeout_sec = timeout_sec

    def _classpath(self) -> str:
        entries: list[str] = []
        main = self.project.source_sets.get("main")
        if main is not None:
            entries.append(str(main.classes_dir))
        entries.extend(str(p) for p in self.project.configurations.get("test_runtime", []))
        return os.pathsep.join(entries)

    def run(self) -> None:
        if not self.command:
            log.info("test_command_empty", task=self.name)
            return

        log.debug("test_command", task=self.name, command=self.command)
        try:
            result = subprocess.run(
                self.command,
                cwd=self.project.project_dir,
                capture_output=True,
                text=True,
                timeout=self.timeout_sec,
                env={**os.environ, "CLASSPATH": self._classpath()},
            )
        except subprocess.TimeoutExpired as e:
            raise InternalError.timeout(f"Test task '{self.name}'", self.timeout_sec or 0) from e
        except FileNotFoundError as e:
            reason = f"command not found: {self.command[0]}"
            raise TaskError.execution_failed(self.name, reason) from e

        if result.stdout:
            log.debug("test_output", task=self.name, stdout=result.stdout[-4000:])
        if result.returncode != 0:
            log.error(
                "test_failed",
                task=self.name,
                exit_code=result.returncode,
                stderr=result.stderr[-2000:],
            )
            raise TaskError.execution_failed(
                self.name, f"test command exited with code {result.returncode}"
            )


class TaskCollection:
    """Live, filtered view over a task container."""

    def __init__(self, container: TaskContainer, predicate: Callable[[Task], bool]) -> None:
        self._container = container
        self._predicate = predicate

    def __iter__(self) -> Iterator[Task]:
        return (t for t in self._container if self._predicate(t))

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def when_task_added(self, callback: Callable[[Any], None]) -> None:
        """Call ``callback`` for every matching task added from now on."""
        self._container._add_listener(self._predicate, callback)

    def __repr__(self) -> str:
        return f"<TaskCollection {[t.name for t in self]}>"


class TaskContainer:
    """Tasks of one project, in insertion order."""

    def __init__(self, project: Project) -> None:
        self._project = project
        self._tasks: dict[str, Task] = {}
        self._listeners: list[tuple[Callable[[Task], bool], Callable[[Any], None]]] = []

    def add(
        self, name: str, task_type: type[T] = Task, **kwargs: Any  # type: ignore[assignment]
    ) -> T:
        """Create and register a task.

        Raises:
            TaskError: If a task with this name already exists.
        """
        if name in self._tasks:
            raise TaskError.duplicate(name)
        task = task_type(name, self._project, **kwargs)
        self._tasks[name] = task
        log.debug("task_added", task=name, type=task_type.__name__)
        for predicate, callback in list(self._listeners):
            if predicate(task):
                callback(task)
        return task

    def get_by_name(self, name: str) -> Task:
        task = self._tasks.get(name)
        if task is None:
            raise TaskError.not_found(name)
        return task

    def find_by_name(self, name: str) -> Task | None:
        return self._tasks.get(name)

    def with_type(self, task_type: type[Task]) -> TaskCollection:
        return TaskCollection(self, lambda t: isinstance(t, task_type))

    def _add_listener(
        self, predicate: Callable[[Task], bool], callback: Callable[[Any], None]
    ) -> None:
        self._listeners.append((predicate, callback))

    def __iter__(self) -> Iterator[Task]:
        return iter(list(self._tasks.values()))

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, name: object) -> bool:
        return name in self._tasks

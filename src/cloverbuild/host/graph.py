"""Task execution graph.

The graph is populated once per build with the requested tasks and all of
their transitive dependencies. Populating freezes the plan: from then on the
set of tasks that will run cannot change. ``when_ready`` callbacks fire once,
right after the plan is frozen and before any task executes.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from enum import Enum

from cloverbuild.core.errors import TaskError
from cloverbuild.core.logging import get_logger
from cloverbuild.host.tasks import Task

log = get_logger("host.graph")

ReadyCallback = Callable[["TaskExecutionGraph"], None]


class GraphState(Enum):
    PENDING = "pending"
    READY = "ready"


class TaskExecutionGraph:
    """Dependency-ordered, single-shot execution plan."""

    def __init__(self) -> None:
        self._state = GraphState.PENDING
        self._tasks: tuple[Task, ...] = ()
        self._dependencies: dict[Task, frozenset[Task]] = {}
        self._ready_callbacks: list[ReadyCallback] = []

    @property
    def state(self) -> GraphState:
        return self._state

    @property
    def is_ready(self) -> bool:
        return self._state is GraphState.READY

    @property
    def all_tasks(self) -> tuple[Task, ...]:
        """Tasks in execution order. Empty until populated."""
        return self._tasks

    def when_ready(self, callback: ReadyCallback) -> None:
        """Register a callback for the moment the plan is frozen.

        Raises:
            TaskError: If the graph has already been populated.
        """
        if self.is_ready:
            raise TaskError.graph_already_populated()
        self._ready_callbacks.append(callback)

    def has_task(self, task: Task | str) -> bool:
        if isinstance(task, str):
            return any(t.name == task for t in self._tasks)
        return task in self._dependencies

    def dependencies_of(self, task: Task) -> frozenset[Task]:
        """Direct dependencies of a planned task, as resolved when the plan was frozen."""
        return self._dependencies.get(task, frozenset())

    def populate(self, requested: Iterable[Task]) -> None:
        """Freeze the plan and notify ``when_ready`` callbacks.

        Raises:
            TaskError: On dependency cycles or if already populated.
        """
        if self.is_ready:
            raise TaskError.graph_already_populated()

        ordered: list[Task] = []
        dependencies: dict[Task, frozenset[Task]] = {}
        visiting: list[Task] = []

        def visit(task: Task) -> None:
            if task in dependencies:
                return
            if task in visiting:
                cycle = visiting[visiting.index(task) :] + [task]
                raise TaskError.cycle([t.path for t in cycle])
            visiting.append(task)
            deps = task.dependencies
            for dep in sorted(deps, key=lambda t: t.name):
                visit(dep)
            visiting.pop()
            dependencies[task] = frozenset(deps)
            ordered.append(task)

        for task in requested:
            visit(task)

        self._tasks = tuple(ordered)
        self._dependencies = dependencies
        self._state = GraphState.READY
        log.debug("task_graph_ready", tasks=[t.name for t in self._tasks])

        callbacks, self._ready_callbacks = self._ready_callbacks, []
        for callback in callbacks:
            callback(self)

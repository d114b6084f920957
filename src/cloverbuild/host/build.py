"""Build execution: plan the requested tasks, then run them in order.

By default the first failing task stops the build. With
``continue_on_failure`` independent tasks keep running, and only tasks that
depend (directly or transitively) on a failure are skipped.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Protocol

from cloverbuild.core.errors import CloverBuildError, TaskError
from cloverbuild.core.logging import build_context, get_logger, task_context

if TYPE_CHECKING:
    from cloverbuild.host.project import Project
    from cloverbuild.host.tasks import Task

log = get_logger("host.build")


class TaskOutcome(Enum):
    EXECUTED = "executed"
    FAILED = "failed"
    SKIPPED = "skipped"  # a dependency failed
    NOT_RUN = "not_run"  # the build stopped before reaching this task


@dataclass
class TaskResult:
    """Outcome of one planned task."""

    task_name: str
    outcome: TaskOutcome
    duration_seconds: float = 0.0
    error: CloverBuildError | None = None


@dataclass
class BuildResult:
    """Aggregated result of a build invocation."""

    requested: list[str]
    build_id: str
    tasks: list[TaskResult] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def success(self) -> bool:
        return all(r.outcome is TaskOutcome.EXECUTED for r in self.tasks)

    @property
    def failures(self) -> list[TaskResult]:
        return [r for r in self.tasks if r.outcome is TaskOutcome.FAILED]

    @property
    def executed(self) -> list[str]:
        return [r.task_name for r in self.tasks if r.outcome is TaskOutcome.EXECUTED]

    def outcome_of(self, task_name: str) -> TaskOutcome | None:
        for r in self.tasks:
            if r.task_name == task_name:
                return r.outcome
        return None


class BuildListener(Protocol):
    """Receives task lifecycle notifications (used by the CLI for status lines)."""

    def task_started(self, task: Task) -> None: ...

    def task_finished(self, task: Task, result: TaskResult) -> None: ...


def _execute(task: Task) -> TaskResult:
    start = time.perf_counter()
    try:
        task.execute()
    except CloverBuildError as e:
        error = e
    except Exception as e:
        log.error("task_crashed", exc_info=True)
        error = TaskError.execution_failed(task.name, f"{type(e).__name__}: {e}")
    else:
        return TaskResult(task.name, TaskOutcome.EXECUTED, time.perf_counter() - start)

    elapsed = time.perf_counter() - start
    log.error("task_failed", error=str(error), elapsed_s=round(elapsed, 3))
    return TaskResult(task.name, TaskOutcome.FAILED, elapsed, error)


def run_build(
    project: Project,
    task_names: Iterable[str],
    *,
    continue_on_failure: bool = False,
    listener: BuildListener | None = None,
) -> BuildResult:
    """Plan and execute the requested tasks of ``project``.

    Args:
        project: Fully configured project (plugins applied).
        task_names: Names of the tasks requested on the command line.
        continue_on_failure: Keep running tasks that do not depend on a failure.
        listener: Optional lifecycle listener.

    Returns:
        BuildResult with one entry per planned task, in execution order.

    Raises:
        TaskError: If a requested task does not exist or dependencies are cyclic.
    """
    names = list(task_names)
    with build_context() as build_id:
        return _run(project, names, build_id, continue_on_failure, listener)


def _run(
    project: Project,
    names: list[str],
    build_id: str,
    continue_on_failure: bool,
    listener: BuildListener | None,
) -> BuildResult:
    start = time.perf_counter()
    requested = [project.tasks.get_by_name(name) for name in names]
    log.info("build_started", project=project.name, tasks=names)

    graph = project.graph
    graph.populate(requested)

    result = BuildResult(requested=names, build_id=build_id)
    failed: set[Task] = set()
    halted = False

    for task in graph.all_tasks:
        if halted:
            result.tasks.append(TaskResult(task.name, TaskOutcome.NOT_RUN))
            continue
        if graph.dependencies_of(task) & failed:
            failed.add(task)
            log.info("task_skipped", task=task.name, reason="dependency_failed")
            skipped = TaskResult(task.name, TaskOutcome.SKIPPED)
            result.tasks.append(skipped)
            if listener:
                listener.task_finished(task, skipped)
            continue

        if listener:
            listener.task_started(task)
        with task_context(task.name):
            log.info("task_started")
            task_result = _execute(task)
            if task_result.outcome is TaskOutcome.EXECUTED:
                log.info("task_done", elapsed_s=round(task_result.duration_seconds, 3))
        result.tasks.append(task_result)
        if listener:
            listener.task_finished(task, task_result)

        if task_result.outcome is TaskOutcome.FAILED:
            failed.add(task)
            halted = not continue_on_failure

    result.duration_seconds = time.perf_counter() - start
    log.info(
        "build_finished",
        success=result.success,
        failures=[r.task_name for r in result.failures],
        elapsed_s=round(result.duration_seconds, 3),
    )
    return result

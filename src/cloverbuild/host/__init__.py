"""Minimal in-process build host: project model, tasks, execution graph, runner."""

from cloverbuild.host.build import (
    BuildListener,
    BuildResult,
    TaskOutcome,
    TaskResult,
    run_build,
)
from cloverbuild.host.graph import GraphState, TaskExecutionGraph
from cloverbuild.host.plugins import GroovyPlugin, JavaPlugin, Plugin, PluginContainer
from cloverbuild.host.project import Project, SourceSet
from cloverbuild.host.tasks import Task, TaskCollection, TaskContainer, TestTask

__all__ = [
    "BuildListener",
    "BuildResult",
    "GraphState",
    "GroovyPlugin",
    "JavaPlugin",
    "Plugin",
    "PluginContainer",
    "Project",
    "SourceSet",
    "Task",
    "TaskCollection",
    "TaskContainer",
    "TaskExecutionGraph",
    "TaskOutcome",
    "TaskResult",
    "TestTask",
    "run_build",
]

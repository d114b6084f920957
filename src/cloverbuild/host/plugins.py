"""Plugin protocol, the built-in java/groovy plugins and the plugin container."""

from __future__ import annotations

from collections.abc import Iterator
from typing import TYPE_CHECKING, ClassVar, Protocol

from cloverbuild.core.errors import ConfigError
from cloverbuild.core.logging import get_logger
from cloverbuild.host.tasks import TestTask

if TYPE_CHECKING:
    from cloverbuild.host.project import Project

log = get_logger("host.plugins")

TEST_TASK_NAME = "test"
TEST_RUNTIME_CONFIGURATION = "test_runtime"


class Plugin(Protocol):
    """Anything with an ``id`` that can configure a project."""

    id: ClassVar[str]

    def apply(self, project: Project) -> None: ...


class JavaPlugin:
    """Adds the main source set, the test_runtime configuration and a ``test`` task."""

    id: ClassVar[str] = "java"

    def apply(self, project: Project) -> None:
        from cloverbuild.host.project import SourceSet

        if "main" not in project.source_sets:
            project.source_sets["main"] = SourceSet(
                name="main",
                classes_dir=project.build_dir / "classes" / "main",
                java_src_dirs=[project.file("src/main/java")],
                groovy_src_dirs=[project.file("src/main/groovy")],
            )
        project.configurations.setdefault(TEST_RUNTIME_CONFIGURATION, [])
        if TEST_TASK_NAME not in project.tasks:
            project.tasks.add(TEST_TASK_NAME, TestTask)


class GroovyPlugin:
    """Marks the project as compiling Groovy; applies the java plugin."""

    id: ClassVar[str] = "groovy"

    def apply(self, project: Project) -> None:
        project.plugins.apply(JavaPlugin.id)


BUILTIN_PLUGINS: dict[str, type[Plugin]] = {
    JavaPlugin.id: JavaPlugin,
    GroovyPlugin.id: GroovyPlugin,
}


class PluginContainer:
    """Applied plugins of a project. Applying the same id twice is a no-op."""

    def __init__(self, project: Project) -> None:
        self._project = project
        self._applied: dict[str, Plugin] = {}

    def apply(self, plugin: str | Plugin) -> Plugin:
        """Apply a plugin by built-in id or as an instance.

        Raises:
            ConfigError: If ``plugin`` is an unknown id.
        """
        if isinstance(plugin, str):
            if plugin in self._applied:
                return self._applied[plugin]
            plugin_cls = BUILTIN_PLUGINS.get(plugin)
            if plugin_cls is None:
                raise ConfigError.invalid_value(
                    "project.plugins", plugin, f"unknown plugin (known: {sorted(BUILTIN_PLUGINS)})"
                )
            plugin = plugin_cls()
        elif plugin.id in self._applied:
            return self._applied[plugin.id]

        # Registered before apply() so plugins that apply each other terminate.
        self._applied[plugin.id] = plugin
        plugin.apply(self._project)
        log.debug("plugin_applied", plugin=plugin.id, project=self._project.name)
        return plugin

    def has_plugin(self, plugin_id: str) -> bool:
        return plugin_id in self._applied

    def __iter__(self) -> Iterator[Plugin]:
        return iter(list(self._applied.values()))

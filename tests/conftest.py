"""Root conftest.py for test configuration.

Ensures local src/ directory takes priority over any installed packages.
"""

import sys
from pathlib import Path

import pytest

# Insert local src directory at the beginning of sys.path
# This ensures that the local cloverbuild package is used, not any installed one
_src_dir = Path(__file__).parent.parent / "src"
if str(_src_dir) not in sys.path:
    sys.path.insert(0, str(_src_dir))

# Force reimport of cloverbuild modules if already imported
for module_name in list(sys.modules.keys()):
    if module_name.startswith("cloverbuild"):
        del sys.modules[module_name]


@pytest.fixture(autouse=True)
def _isolate_config_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep user-level config and CLOVERBUILD__ env vars out of tests."""
    import os

    for key in list(os.environ):
        if key.startswith("CLOVERBUILD__"):
            monkeypatch.delenv(key)
    monkeypatch.setattr(
        "cloverbuild.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "no-global-config.yaml"
    )

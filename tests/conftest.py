"""Pytest configuration for test environment setup.

- Forces ``DISABLE_FILE_LOGS=1`` to avoid writing log files during tests.
- Ensures the project root is available on ``sys.path`` for imports.
- Provides a ``platform_env`` fixture isolating ``PlatformConfig`` from the
  developer's environment and ``.env`` file.
"""

import os
import sys
from pathlib import Path

import pytest

os.environ.setdefault("DISABLE_FILE_LOGS", "1")  # Avoid creating log files during tests

# Ensure project root is on sys.path
ROOT = Path(__file__).resolve().parents[1]
root_str = str(ROOT)
if root_str not in sys.path:
    sys.path.insert(0, root_str)

PLATFORM_ENV_VARS = (
    "PLATFORM_BASE_URL",
    "PLATFORM_TENANT",
    "PLATFORM_COUNTRY",
    "PLATFORM_NAME",
    "PLATFORM_SESSION_COOKIE",
    "PAGE_SIZE",
    "CHUNK_SIZE",
    "REQUEST_TIMEOUT",
    "TARGET_RPM",
    "DEFAULT_GROUP_SERIAL",
    "DEFAULT_STRUCTURE_SERIAL",
)


@pytest.fixture
def platform_env(monkeypatch, tmp_path):
    """Clear platform variables and point the project root at an empty directory.

    Setting each variable before deleting it makes monkeypatch remove any
    value a test loads from a ``.env`` file during teardown.
    """
    import submission_report.config as project_config

    for name in PLATFORM_ENV_VARS:
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.setattr(project_config, "PROJECT_ROOT", tmp_path)
    return tmp_path

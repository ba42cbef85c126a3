"""Shared fixtures for side-code-export tests."""

import json
import os

import pytest

from side_export.config import ExportConfiguration, get_settings
from side_export.export.models import EmittedFile, Project
from side_export.export.plugins import PluginRegistry, reset_registry

# Keep a developer's .env or shell settings out of the tests
for _key in list(os.environ):
    if _key.startswith("SIDE_EXPORT_"):
        del os.environ[_key]


def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "smoke: mark test as smoke test (fast, critical path - included in CI)"
    )


RECORDED_URL = "https://shop.example.com"


@pytest.fixture
def project_data():
    """A recorded project document as decoded JSON."""
    return {
        "id": "project-1",
        "version": "2.0",
        "name": "Shop",
        "url": RECORDED_URL,
        "urls": [RECORDED_URL],
        "plugins": [],
        "tests": [
            {
                "id": "t-login",
                "name": "login",
                "commands": [
                    {"id": "c1", "comment": "", "command": "open", "target": "/login", "value": ""},
                    {"id": "c2", "comment": "", "command": "type", "target": "id=email", "value": "user@example.com"},
                    {"id": "c3", "comment": "", "command": "click", "target": "css=button[type=submit]", "value": ""},
                    {"id": "c4", "comment": "", "command": "assertTitle", "target": "Dashboard", "value": ""},
                ],
            },
            {
                "id": "t-checkout",
                "name": "checkout",
                "commands": [
                    {"id": "c5", "comment": "add an item", "command": "click", "target": "id=add-to-cart", "value": ""},
                    {"id": "c6", "comment": "", "command": "assertText", "target": "css=.cart-count", "value": "1"},
                ],
            },
            {
                "id": "t-logout",
                "name": "logout",
                "commands": [
                    {"id": "c7", "comment": "", "command": "click", "target": "linkText=Sign out", "value": ""},
                ],
            },
        ],
        "suites": [
            {
                "id": "s-smoke",
                "name": "smoke",
                "persistSession": False,
                "parallel": False,
                "timeout": 300,
                "tests": ["t-login"],
            },
            {
                "id": "s-regression",
                "name": "regression",
                "persistSession": False,
                "parallel": True,
                "timeout": 600,
                "tests": ["t-login", "t-checkout", "t-logout"],
            },
        ],
    }


@pytest.fixture
def project(project_data):
    """Parsed sample project."""
    return Project.from_dict(project_data)


@pytest.fixture
def project_file(tmp_path, project_data):
    """Sample project written to disk."""
    path = tmp_path / "shop.side"
    path.write_text(json.dumps(project_data), encoding="utf-8")
    return path


@pytest.fixture
def output_dir(tmp_path):
    """Directory receiving generated files."""
    return tmp_path / "out"


class StubFormat:
    """Format recording its calls; fails for names listed in ``fail_on``."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.calls = []

    async def emit_test(self, project, test_name):
        self.calls.append(("test", test_name))
        return self._emit("test", project, test_name)

    async def emit_suite(self, project, suite_name):
        self.calls.append(("suite", suite_name))
        return self._emit("suite", project, suite_name)

    def _emit(self, kind, project, name):
        if name in self.fail_on:
            raise RuntimeError(f"cannot emit {name}")
        body = f"// {kind} {name}\nopen('{project.url}/start')\n"
        return EmittedFile(body=body, filename=f"{name}.{kind}.txt")


@pytest.fixture
def stub_format():
    """Format stub that succeeds for every unit."""
    return StubFormat()


@pytest.fixture
def failing_format():
    """Build a format stub that fails for the given unit names."""

    def _make(*names):
        return StubFormat(fail_on=names)

    return _make


@pytest.fixture
def make_config(project_file, output_dir):
    """Build an ExportConfiguration for the sample project."""

    def _make(**overrides):
        values = {
            "format": "python-selenium",
            "project": str(project_file),
            "output_dir": str(output_dir),
        }
        values.update(overrides)
        return ExportConfiguration.build(**values)

    return _make


@pytest.fixture
def registry():
    """Fresh plugin registry."""
    return PluginRegistry()


@pytest.fixture(autouse=True)
def reset_global_state():
    """Reset the process-wide registry and cached settings."""
    reset_registry()
    get_settings.cache_clear()
    yield
    reset_registry()
    get_settings.cache_clear()

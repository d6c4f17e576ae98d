"""Pytest configuration for bundle-utils tests."""

import logging

import pytest

from bundle_utils.logging_setup import JsonlHandler


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Keep tests away from real settings files and system package variables."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.delenv("ORG_OSGI_FRAMEWORK_SYSTEM_PACKAGES", raising=False)
    monkeypatch.delenv("BUNDLE_UTILS_SYSTEM_PACKAGES", raising=False)

    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if isinstance(handler, JsonlHandler):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)

"""
Shared pytest fixtures for covertrace tests.

This file is automatically loaded by pytest. Fixtures defined here are
available to all test files without explicit imports.
"""

import os as _os
import pathlib as _pathlib
import unittest.mock as _mock

import pytest as _pytest

import covertrace.config as config
import covertrace.terms as terms
import covertrace.tracing as tracing


def _clean_env(config_dir: _pathlib.Path) -> dict[str, str]:
    """Environment without COVERTRACE_* keys, pointing user config at config_dir."""
    env = {k: v for k, v in _os.environ.items() if not k.startswith("COVERTRACE_")}
    env["COVERTRACE_CONFIG_DIR"] = str(config_dir)
    return env


@_pytest.fixture
def user_config_dir(tmp_path: _pathlib.Path) -> _pathlib.Path:
    """Empty directory used as the user config directory."""
    path = tmp_path / "user-config"
    path.mkdir()
    return path


@_pytest.fixture
def isolated_env(user_config_dir: _pathlib.Path):
    """
    Context manager that isolates tests from environment variables.

    Usage:
        def test_something(isolated_env):
            with isolated_env:
                settings = config.Settings.construct_without_dotenv()
    """
    return _mock.patch.dict(_os.environ, _clean_env(user_config_dir), clear=True)


@_pytest.fixture
def clean_settings(isolated_env) -> config.Settings:
    """Settings instance isolated from environment and .env file."""
    with isolated_env:
        return config.Settings.construct_without_dotenv()


@_pytest.fixture
def document() -> terms.Term:
    """The input document {"a": [1, 2], "b": "x"}, undecorated."""
    return terms.from_python({"a": [1, 2], "b": "x"})


@_pytest.fixture
def tracer() -> tracing.CoverageTracer:
    """CoverageTracer with default options."""
    return tracing.CoverageTracer()


@_pytest.fixture
def decorated(document: terms.Term, tracer: tracing.CoverageTracer) -> terms.Term:
    """The sample document, decorated by the tracer fixture."""
    tracer.decorate(document)
    return document

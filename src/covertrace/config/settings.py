"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with COVERTRACE_ prefix
3. .env file (if COVERTRACE_ENV_FILE points at one)
4. Layered YAML config files:
   - Project config: .covertrace/config.yaml (highest)
   - User config: ~/.config/covertrace/config.yaml
   - Built-in defaults: bundled defaults/config.yaml (lowest)

Nested config uses double underscore delimiter:
  COVERTRACE_COVERAGE__REPORT=leaves
  COVERTRACE_LOGGING__LEVEL=debug
"""

import os as _os
import pathlib as _pathlib
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import covertrace.config.sources as sources
import covertrace.config.types as types
import covertrace.constants as _constants


def _get_env_file() -> str | None:
    """Return COVERTRACE_ENV_FILE if it names an existing file."""
    if env_file := _os.environ.get("COVERTRACE_ENV_FILE"):
        if _pathlib.Path(env_file).exists():
            return env_file
    return None


def find_project_root(start_path: _pathlib.Path | None = None) -> _pathlib.Path:
    """
    Find the project root directory.

    Walks up from ``start_path`` looking for a covertrace config directory
    or a common project marker. Falls back to the current directory.
    """
    if start_path is None:
        start_path = _pathlib.Path.cwd()

    markers = [_constants.PROJECT_CONFIG_DIR, "pyproject.toml", "setup.py", ".git"]
    current = start_path.resolve()
    while current != current.parent:
        for marker in markers:
            if (current / marker).exists():
                return current
        current = current.parent

    return _pathlib.Path.cwd()


class Settings(_pydantic_settings.BaseSettings):
    """
    covertrace configuration settings.

    All settings can be overridden via environment variables with the
    COVERTRACE_ prefix. For nested config, use double underscore:
    COVERTRACE_COVERAGE__DIAGNOSTICS=true

    Config precedence (highest to lowest):
    1. Constructor arguments
    2. Environment variables (COVERTRACE_*)
    3. .env file
    4. Project config (.covertrace/config.yaml)
    5. User config (~/.config/covertrace/config.yaml)
    6. Built-in defaults
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix="COVERTRACE_",
        env_file=_get_env_file(),
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="allow",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[_pydantic_settings.BaseSettings],
        init_settings: _pydantic_settings.PydanticBaseSettingsSource,
        env_settings: _pydantic_settings.PydanticBaseSettingsSource,
        dotenv_settings: _pydantic_settings.PydanticBaseSettingsSource,
        file_secret_settings: _pydantic_settings.PydanticBaseSettingsSource,
    ) -> tuple[_pydantic_settings.PydanticBaseSettingsSource, ...]:
        """
        Configure settings sources with precedence:
        1. init_settings (constructor args), highest
        2. env_settings (COVERTRACE_* env vars)
        3. dotenv_settings (.env file)
        4. YAML layers
        5. (defaults via Field definitions), lowest
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            sources.YamlLayersSettingsSource(settings_cls, find_project_root()),
            file_secret_settings,
        )

    @classmethod
    def construct_without_dotenv(cls, **kwargs: _typing.Any) -> "Settings":
        """Create Settings from environment variables only, without loading .env.

        Useful for test isolation.
        """
        return cls(_env_file=None, **kwargs)  # type: ignore[call-arg]

    version: int = _pydantic.Field(default=1, description="Config schema version")

    coverage: types.CoverageConfig = _pydantic.Field(default_factory=types.CoverageConfig)
    """Coverage tracing behavior."""

    logging: types.LoggingConfig = _pydantic.Field(default_factory=types.LoggingConfig)
    """Logging settings."""

    def get_unknown_fields(self) -> dict[str, _typing.Any]:
        """
        Return every unrecognized key, top-level and nested, by dotted path.

        Useful for spotting typos in config files.
        """
        result: dict[str, _typing.Any] = dict(self.model_extra or {})
        result.update(self.coverage.collect_all_extra_fields("coverage"))
        result.update(self.logging.collect_all_extra_fields("logging"))
        return result

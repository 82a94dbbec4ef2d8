import os
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar, Token
from dataclasses import dataclass, replace
from pathlib import Path

from bookshelf.runtime.config.config_data import ConfigData
from bookshelf.runtime.config.config_template import load_templated_yaml
from bookshelf.runtime.settings import EnvironmentVariables

CONFIG_PATH_ENV = "BOOKSHELF_CONFIG"


@dataclass
class AppContext:
    """Application context containing configuration and other app-wide state."""

    config: ConfigData


def load_config(path: Path | None = None) -> ConfigData:
    """Read configuration from the YAML file, or from the environment if it is absent."""
    path = path or Path(os.getenv(CONFIG_PATH_ENV, "config.yaml"))
    if path.is_file():
        return load_templated_yaml(path)
    return EnvironmentVariables().to_config()


_default_context = AppContext(config=load_config())

_app_context: ContextVar[AppContext] = ContextVar(
    "app_context", default=_default_context
)


def get_context() -> AppContext:
    """Get the current application context."""
    return _app_context.get()


def set_context(context: AppContext) -> Token[AppContext]:
    """Set the current application context."""
    return _app_context.set(context)


def _recursive_dict_merge(base_dict: dict, override_dict: dict) -> dict:
    result = base_dict.copy()
    for key, value in override_dict.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _recursive_dict_merge(result[key], value)
        else:
            result[key] = value
    return result


def merge_configs(base_config: ConfigData, override_config: ConfigData) -> ConfigData:
    """Merge ``override_config`` into ``base_config``.

    Only fields explicitly set on the override (at any nesting level) take
    precedence; everything else is inherited from the base.
    """
    merged = _recursive_dict_merge(
        base_config.model_dump(exclude={"database": {"connection_string"}}),
        override_config.model_dump(
            exclude_unset=True, exclude={"database": {"connection_string"}}
        ),
    )
    return ConfigData.model_validate(merged)


@contextmanager
def with_context(config_override: ConfigData | None = None) -> Iterator[ConfigData]:
    """Temporarily override the application configuration.

    Example:
        with with_context(ConfigData(app=AppConfig(port=9000))):
            assert get_config().app.port == 9000
    """
    if config_override is None:
        yield get_config()
        return

    if not isinstance(config_override, ConfigData):
        raise ValueError(
            f"config_override must be ConfigData, or None, got {type(config_override)}"
        )

    merged_config = merge_configs(get_config(), config_override)
    token = set_context(replace(get_context(), config=merged_config))
    try:
        yield merged_config
    finally:
        _app_context.reset(token)


def set_config(config: ConfigData) -> None:
    """Replace the entire current configuration."""
    set_context(replace(get_context(), config=config))


def get_config() -> ConfigData:
    """Convenience function to get the current configuration."""
    return get_context().config

import os
import re
from functools import lru_cache
from pathlib import Path

import yaml
from dotenv import load_dotenv
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env from the working directory so $VAR references in app.yaml resolve
load_dotenv(Path.cwd() / ".env")

# Pattern to match $VAR_NAME environment variable references
ENV_VAR_PATTERN = re.compile(r"\$([A-Z_][A-Z0-9_]*)")

APP_CONFIG_SECTION = "forms"


def interpolate_env_vars(value):
    """Recursively replace $VAR_NAME with os.environ values."""
    if isinstance(value, str):

        def replace(match):
            var = match.group(1)
            val = os.environ.get(var)
            if val is None:
                raise ValueError(f"Environment variable ${var} not set")
            return val

        return ENV_VAR_PATTERN.sub(replace, value)
    elif isinstance(value, dict):
        return {k: interpolate_env_vars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [interpolate_env_vars(item) for item in value]
    return value


def load_app_config(config_path: Path | None = None) -> dict:
    """Load and parse app.yaml with environment variable interpolation."""
    config_path = config_path or Path.cwd() / "app.yaml"

    if not config_path.exists():
        raise FileNotFoundError(f"app.yaml not found at {config_path}")

    with open(config_path, "r") as f:
        config = yaml.safe_load(f)

    return interpolate_env_vars(config or {})


class FormSettings(BaseSettings):
    """Defaults applied to every form builder.

    Values come from FORMS_* environment variables (or .env) and may be
    overridden by the ``forms:`` section of app.yaml.
    """

    model_config = SettingsConfigDict(
        env_prefix="FORMS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_method: str = "post"
    default_button_color: str = "primary"
    id_prefix: str = ""
    locale: str = ""
    textarea_rows: int = 3

    # Hidden field names understood by the host application
    csrf_field_name: str = "_csrf"
    method_field_name: str = "_method"


@lru_cache
def get_settings() -> FormSettings:
    """Load settings from the environment and app.yaml."""
    base_settings = FormSettings()

    try:
        app_config = load_app_config()
    except FileNotFoundError:
        return base_settings

    section = app_config.get(APP_CONFIG_SECTION)
    if not isinstance(section, dict) or not section:
        return base_settings

    # Validate the YAML section through the model so bad types fail loudly
    return FormSettings.model_validate({**base_settings.model_dump(), **section})


def clear_settings_cache() -> None:
    """Forget cached settings so the next get_settings() call reloads them."""
    get_settings.cache_clear()

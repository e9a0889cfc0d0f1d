"""Application settings."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    YamlConfigSettingsSource,
)

CONFIG_FILE = "taskflow.yml"


class Settings(BaseSettings):
    """Application settings.

    Read from keyword arguments, then TASKFLOW_* environment variables,
    then an optional taskflow.yml in the working directory.
    """

    data_dir: Path = Field(
        default_factory=lambda: Path.home() / ".taskflow",
        description="Directory for the local board cache and guest flag",
    )

    supabase_url: str | None = Field(
        default=None,
        description="Supabase project URL (remote sync is off without it)",
    )

    supabase_key: str | None = Field(
        default=None,
        description="Supabase anon key",
    )

    access_token: str | None = Field(
        default=None,
        description="Signed-in user's access token",
    )

    guest: bool = Field(
        default=False,
        description="Force guest mode (local storage only)",
    )

    refresh_interval: float = Field(
        default=60.0,
        gt=0,
        description="Seconds between filter recomputes for date windows",
    )

    max_workers: int = Field(
        default=4,
        ge=1,
        description="Background threads for remote writes",
    )

    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="HTTP timeout in seconds",
    )

    verbose: int = Field(
        default=0,
        description="Verbosity level (0=off, 1=INFO, 2+=DEBUG)",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional path to write logs to file",
    )

    model_config = {
        "env_prefix": "TASKFLOW_",
        "yaml_file": CONFIG_FILE,
    }

    @field_validator("data_dir", "log_file")
    @classmethod
    def expand_home(cls, v: Path | None) -> Path | None:
        """Allow ~ in configured paths."""
        return v.expanduser() if v is not None else v

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (init_settings, env_settings, YamlConfigSettingsSource(settings_cls))

"""Configuration schema using Pydantic."""

from pathlib import Path
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class GitConfig(BaseModel):
    """Git backend configuration."""
    binary: str = "git"
    timeout: int = 60  # Seconds per git invocation
    repo_dir: str | None = None  # Run git with -C <repo_dir>; None = current directory

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: int) -> int:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v


class LoaderConfig(BaseModel):
    """Commit loader configuration."""
    max_concurrency: int = 8  # Parallel commit fetches

    @field_validator("max_concurrency")
    @classmethod
    def validate_concurrency(cls, v: int) -> int:
        """Validate at least one fetch may run."""
        if v < 1:
            raise ValueError("max_concurrency must be at least 1")
        return v


class FinalizeConfig(BaseModel):
    """Branch finalizer configuration."""
    checkout: bool = True  # Reset the working area to the new tip


class Config(BaseSettings):
    """Root configuration for regraft."""
    git: GitConfig = Field(default_factory=GitConfig)
    loader: LoaderConfig = Field(default_factory=LoaderConfig)
    finalize: FinalizeConfig = Field(default_factory=FinalizeConfig)
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="REGRAFT_",
        env_nested_delimiter="__",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # REGRAFT_* variables override values read from the config file
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and validate the log level name."""
        level = v.upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def repo_path(self) -> Path | None:
        """Get expanded repository path, if configured."""
        if self.git.repo_dir:
            return Path(self.git.repo_dir).expanduser()
        return None

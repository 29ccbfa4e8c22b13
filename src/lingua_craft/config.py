"""Application configuration using pydantic-settings."""

import functools
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict


def _find_project_root() -> Path:
    """Find project root by locating pyproject.toml."""
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return Path.cwd()


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Custom settings source that loads from config/settings.yaml."""

    def get_field_value(self, field_name: str) -> tuple[Any, str, bool]:
        """Not used - we implement __call__ instead."""
        return None, "", False

    def __call__(self) -> dict[str, Any]:
        """Load settings from YAML file."""
        yaml_path = _find_project_root() / "config" / "settings.yaml"
        if not yaml_path.exists():
            return {}

        with open(yaml_path, encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        # Flatten nested structure to match Settings field names
        flattened = {}
        if 'server' in data:
            flattened['host'] = data['server'].get('host')
            flattened['port'] = data['server'].get('port')
        if 'openai' in data:
            openai_cfg = data['openai']
            flattened['openai_base_url'] = openai_cfg.get('base_url')
            flattened['word_model'] = openai_cfg.get('word_model')
            flattened['evaluation_model'] = openai_cfg.get('evaluation_model')
            flattened['request_timeout_seconds'] = openai_cfg.get('request_timeout_seconds')
        if 'learning' in data:
            learning = data['learning']
            flattened['words_per_batch'] = learning.get('words_per_batch')
            flattened['word_temperature'] = learning.get('word_temperature')
            flattened['evaluation_temperature'] = learning.get('evaluation_temperature')
        if 'storage' in data:
            flattened['storage_backend'] = data['storage'].get('backend')
            flattened['storage_key'] = data['storage'].get('key')

        # Remove None values
        return {k: v for k, v in flattened.items() if v is not None}


class Settings(BaseSettings):
    """Application settings loaded from environment and config files."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # OpenAI
    openai_api_key: str = Field(description="OpenAI API key")
    openai_base_url: str | None = Field(default=None)
    word_model: str = Field(default="gpt-4o-mini")
    evaluation_model: str = Field(default="gpt-4o-mini")
    request_timeout_seconds: float = Field(default=60.0)

    # Learning
    words_per_batch: int = Field(default=5, ge=1)
    word_temperature: float = Field(default=0.7)
    evaluation_temperature: float = Field(default=0.4)

    # Storage
    storage_backend: Literal["json", "memory"] = Field(default="json")
    storage_key: str = Field(default="linguaCraft_mastered")

    # Server
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8000)

    # Paths
    project_root: Path = Field(default_factory=_find_project_root)

    @property
    def data_dir(self) -> Path:
        d = self.project_root / "data"
        d.mkdir(parents=True, exist_ok=True)
        return d

    @property
    def mastered_path(self) -> Path:
        """JSON file holding the full mastered list."""
        return self.data_dir / f"{self.storage_key}.json"

    @property
    def frontend_dir(self) -> Path:
        return self.project_root / "frontend"

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customise settings sources to include YAML file.

        Priority order (highest to lowest):
        1. init_settings (arguments passed to Settings())
        2. env_settings (environment variables)
        3. dotenv_settings (.env file)
        4. YamlSettingsSource (settings.yaml)
        5. file_secret_settings
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls),
            file_secret_settings,
        )


@functools.lru_cache
def get_settings() -> Settings:
    """Get application settings singleton."""
    return Settings()

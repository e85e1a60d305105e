"""Configuration management for the Taxxy application."""

from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings

# Load environment variables from .env file in ops folder
env_path = Path(__file__).parent.parent / "ops" / ".env"
load_dotenv(dotenv_path=env_path)


class OpenAIConfig(BaseSettings):
    """OpenAI API configuration."""

    api_key: Optional[str] = Field(default=None, alias="OPENAI_API_KEY")
    model: str = Field(default="gpt-4o-mini", alias="OPENAI_MODEL")
    temperature: float = Field(default=0.0, alias="OPENAI_TEMPERATURE")
    max_tokens: Optional[int] = Field(default=None, alias="OPENAI_MAX_TOKENS")
    timeout: int = Field(default=60, alias="OPENAI_TIMEOUT")
    base_url: Optional[str] = Field(default=None, alias="OPENAI_BASE_URL")

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"


class AnthropicConfig(BaseSettings):
    """Anthropic API configuration."""

    api_key: Optional[str] = Field(default=None, alias="ANTHROPIC_API_KEY")
    model: str = Field(default="claude-3-5-haiku-latest", alias="ANTHROPIC_MODEL")
    temperature: float = Field(default=0.0, alias="ANTHROPIC_TEMPERATURE")
    max_tokens: Optional[int] = Field(default=None, alias="ANTHROPIC_MAX_TOKENS")
    timeout: int = Field(default=60, alias="ANTHROPIC_TIMEOUT")

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"


class ClassificationConfig(BaseSettings):
    """Settings for the transaction classification call."""

    temperature: float = Field(default=0.1, alias="CLASSIFICATION_TEMPERATURE")
    max_tokens: int = Field(default=400, alias="CLASSIFICATION_MAX_TOKENS")
    timeout: int = Field(default=20, alias="CLASSIFICATION_TIMEOUT")
    max_retries: int = Field(default=1, alias="CLASSIFICATION_MAX_RETRIES")
    retry_delay: float = Field(default=0.5, alias="CLASSIFICATION_RETRY_DELAY")
    review_threshold: float = Field(default=0.7, alias="REVIEW_CONFIDENCE_THRESHOLD")
    max_workers: int = Field(default=4, alias="CLASSIFICATION_MAX_WORKERS")

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"


class MLflowConfig(BaseSettings):
    """MLflow tracking configuration."""

    tracking_uri: Optional[str] = Field(
        default="sqlite:///mlflow.db", alias="MLFLOW_TRACKING_URI"
    )
    experiment_name: str = Field(default="taxxy", alias="MLFLOW_EXPERIMENT_NAME")
    enabled: bool = Field(default=False, alias="MLFLOW_ENABLED")

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"


class AppConfig(BaseSettings):
    """Main application configuration."""

    # Application settings
    app_name: str = Field(default="taxxy", alias="APP_NAME")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_path: Path = Field(
        default=Path("data/taxxy.db"), alias="DATABASE_PATH"
    )

    # Per-agent LLM selection
    classification_llm: str = Field(default="openai", alias="CLASSIFICATION_LLM")
    write_off_llm: str = Field(default="openai", alias="WRITE_OFF_LLM")

    # LLM provider settings
    openai: OpenAIConfig = Field(default_factory=OpenAIConfig)
    anthropic: AnthropicConfig = Field(default_factory=AnthropicConfig)

    classification: ClassificationConfig = Field(default_factory=ClassificationConfig)

    # MLflow configuration
    mlflow: MLflowConfig = Field(default_factory=MLflowConfig)

    # CORS configuration
    cors_origins: str = Field(default="", alias="CORS_ORIGINS")

    class Config:
        env_file = "ops/.env"
        case_sensitive = False
        extra = "ignore"

    def __init__(self, **kwargs):
        """Initialize configuration with nested settings."""
        super().__init__(**kwargs)
        # Ensure database directory exists
        self.database_path.parent.mkdir(parents=True, exist_ok=True)


# Global configuration instance
config = AppConfig()


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    return config


def reload_config() -> AppConfig:
    """Reload configuration from environment variables."""
    global config
    config = AppConfig()
    return config

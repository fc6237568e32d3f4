from pydantic import ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from medbay.core.exceptions import ConfigError


class Settings(BaseSettings):
    # Backend
    DATABASE_URL: str
    DATABASE_ECHO: bool = False

    # Identity tokens
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # Hosted LLM
    GOOGLE_AI_API_KEY: str
    GEMINI_MODEL: str = "gemini-1.5-pro"
    GEMINI_API_URL: str = "https://generativelanguage.googleapis.com/v1beta"
    LLM_TIMEOUT_SECONDS: float = 60.0

    # This tells Pydantic to read from the .env file
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


def load_settings(**overrides) -> Settings:
    """Build settings, turning missing or invalid values into a ConfigError."""
    try:
        return Settings(**overrides)
    except ValidationError as error:
        missing = [".".join(str(p) for p in e["loc"]) for e in error.errors()]
        raise ConfigError(f"Invalid or missing configuration: {', '.join(missing)}") from error


# Create a single instance of the settings to use everywhere
settings = load_settings()

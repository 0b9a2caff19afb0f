from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

# Upper bound on the model output snippet carried by parse failures
MAX_SNIPPET_LIMIT = 1000


class Settings(BaseSettings):
    app_name: str = Field("invoice-ai-backend", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")

    # LLM (OpenAI-compatible chat completions endpoint)
    llm_base_url: str | None = Field(default=None, alias="LLM_BASE_URL")
    llm_api_key: str | None = Field(default=None, alias="LLM_API_KEY")
    llm_model: str = Field("gpt-4o-mini", alias="LLM_MODEL")
    llm_timeout_seconds: float = Field(30.0, alias="LLM_TIMEOUT_SECONDS")
    llm_temperature: float = Field(0.0, alias="LLM_TEMPERATURE")

    # Storage
    database_path: str = Field("invoices.db", alias="DATABASE_PATH")

    # CORS allowed origins (comma-separated list for production deployment)
    cors_origins: str = Field("http://localhost:3000,http://127.0.0.1:3000", alias="CORS_ORIGINS")

    # Observability
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_file: str | None = Field(default=None, alias="LOG_FILE")

    # Extraction diagnostics
    extraction_snippet_limit: int = Field(MAX_SNIPPET_LIMIT, alias="EXTRACTION_SNIPPET_LIMIT")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    @field_validator("extraction_snippet_limit")
    @classmethod
    def _cap_snippet_limit(cls, value: int) -> int:
        return max(0, min(value, MAX_SNIPPET_LIMIT))

    @property
    def llm_configured(self) -> bool:
        return bool(self.llm_base_url and self.llm_api_key)

settings = Settings()

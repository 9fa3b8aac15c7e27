from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="NOTEGRAPH_", env_file=".env", extra="ignore")

    # Server settings
    host: str = "127.0.0.1"
    port: int = 8000

    # Basic auth settings
    auth_username: str = ""
    auth_password: str = ""

    # Database settings
    local_graph_store_path: str = "data/graph.json"

    # LLM settings
    llm_provider: Literal["anthropic", "openai"] = "anthropic"
    llm_model: str = "claude-3-5-sonnet-20241022"
    llm_timeout_seconds: float = 30.0
    llm_max_tokens: int = 1024
    anthropic_api_key: str | None = None
    openai_api_key: str | None = None

    # Suggestion settings
    suggestion_threshold: float = 0.7
    max_candidates: int = 20
    max_suggestions: int = 3
    recency_days: int = 7
    excerpt_chars: int = 200
    auto_analysis_min_interval_seconds: float = 5.0

    # Panel settings
    context_chars: int = 60

    log_level: str = "INFO"  # Can be DEBUG, INFO, WARNING, ERROR, CRITICAL


settings = Settings()

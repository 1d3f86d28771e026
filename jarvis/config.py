"""
Application configuration management.

Following Sandi Metz principles:
- Single Responsibility: Configuration loading and validation
- Small class: Settings grouped by concern
- Clear naming: Descriptive property names
"""

from typing import List, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    """
    Application configuration with validation.

    Loads from environment variables with fallback to .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", case_sensitive=False, extra="ignore"
    )

    # Application settings
    app_name: str = Field(default="JARVIS", description="Application name")
    app_env: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    log_level: str = Field(default="INFO", description="Logging level")
    debug: bool = Field(default=False, description="Include diagnostics in errors")

    # API settings
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API port")
    allowed_origins: str = Field(
        default="https://doston-davlatov.uz,http://localhost",
        description="CORS allowed origins",
    )

    # Redis settings
    redis_host: str = Field(default="localhost", description="Redis host")
    redis_port: int = Field(default=6379, ge=1, le=65535, description="Redis port")
    redis_db: int = Field(default=0, ge=0, le=15, description="Redis database")
    redis_password: str = Field(default="", description="Redis password")
    redis_max_connections: int = Field(default=10, ge=1, description="Max connections")
    redis_key_prefix: str = Field(default="jarvis", description="Key namespace")

    # LLM provider settings
    groq_api_key: str = Field(default="", description="Groq API key")
    llm_base_url: str = Field(
        default="https://api.groq.com/openai/v1",
        description="OpenAI-compatible chat completions base URL",
    )
    default_model: str = Field(
        default="llama-3.3-70b-versatile", description="Default model"
    )
    backup_model: str = Field(
        default="mixtral-8x7b-32768", description="Model used after a failed attempt"
    )
    default_max_tokens: int = Field(default=1500, ge=1, description="Max tokens")
    default_temperature: float = Field(
        default=0.7, ge=0.0, le=1.0, description="Temperature"
    )
    default_top_p: float = Field(default=0.9, ge=0.0, le=1.0, description="Top p")
    frequency_penalty: float = Field(default=0.1, ge=-2.0, le=2.0)
    presence_penalty: float = Field(default=0.1, ge=-2.0, le=2.0)
    llm_retry_budget: int = Field(default=2, ge=0, le=10, description="Retries")
    llm_retry_base_delay: float = Field(
        default=1.0, ge=0.0, description="Backoff unit in seconds"
    )
    llm_retry_max_delay: float = Field(default=30.0, ge=0.0, description="Backoff cap")
    llm_timeout_ms: int = Field(default=30000, ge=1, description="Per call timeout")
    min_temperature: float = Field(default=0.1, ge=0.0, le=1.0)
    max_temperature: float = Field(default=1.0, ge=0.0, le=1.0)
    min_max_tokens: int = Field(default=100, ge=1)
    max_max_tokens: int = Field(default=4000, ge=1)

    # Prompt settings
    max_prompt_length: int = Field(
        default=4000, ge=1, description="Hard cutoff for the system prompt"
    )
    prompt_cache_key_chars: int = Field(
        default=500, ge=1, description="System prompt prefix used in cache keys"
    )
    max_local_records: int = Field(default=5, ge=0)
    max_search_snippets: int = Field(default=5, ge=0)
    max_context_turns: int = Field(default=5, ge=0)
    owner_name: str = Field(default="Doston Davlatov")
    owner_title: str = Field(default="Full Stack Developer & AI Engineer")
    owner_location: str = Field(default="Tashkent, Uzbekistan")
    owner_website: str = Field(default="https://doston-davlatov.uz")

    # Cache settings
    enable_caching: bool = Field(default=True, description="Enable caching")
    cache_ttl_seconds: int = Field(default=3600, ge=1, description="Default TTL")
    completion_cache_ttl_seconds: int = Field(
        default=3600, ge=1, description="TTL for completion results"
    )
    answer_cache_ttl_seconds: int = Field(
        default=3600, ge=1, description="TTL for formatted answers"
    )
    cache_sweep_interval_seconds: int = Field(
        default=300, ge=0, description="Expiry sweep period (0 disables)"
    )
    memory_cache_max_entries: int = Field(default=10000, ge=1)

    # Search settings
    enable_web_search: bool = Field(default=True, description="Enable web search")
    search_results_limit: int = Field(default=5, ge=1)
    search_max_limit: int = Field(default=20, ge=1)
    search_timeout_ms: int = Field(default=10000, ge=1)
    search_default_sources: str = Field(
        default="duckduckgo,wikipedia", description="Comma separated provider names"
    )
    search_user_agent: str = Field(default="JARVIS-AI/5.0 (+https://doston-davlatov.uz)")
    enable_duckduckgo: bool = Field(default=True)
    enable_wikipedia: bool = Field(default=True)
    enable_news: bool = Field(default=False)
    enable_github: bool = Field(default=True)
    enable_stackoverflow: bool = Field(default=True)
    newsapi_key: str = Field(default="", description="NewsAPI key")

    # Pipeline settings
    pipeline_timeout_ms: int = Field(default=45000, ge=1)
    answer_max_length: int = Field(default=2000, ge=1)

    # Task settings
    translate_max_chars: int = Field(default=4000, ge=1, description="Longest translatable text")
    summarize_min_chars: int = Field(default=100, ge=0, description="Shortest summarizable text")
    summarize_max_input_chars: int = Field(
        default=5000, ge=1, description="Text beyond this is cut before summarizing"
    )

    # Rate limiting
    rate_limit_requests: int = Field(default=20, ge=1)
    rate_limit_window_seconds: int = Field(default=60, ge=1)
    enable_rate_limit: bool = Field(default=True)

    @field_validator("search_default_sources")
    @classmethod
    def normalize_sources(cls, v: str) -> str:
        """Lowercase and strip provider names."""
        return ",".join(s.strip().lower() for s in v.split(",") if s.strip())

    @model_validator(mode="after")
    def check_bounds(self) -> "AppConfig":
        """Validate min/max pairs."""
        if self.min_temperature > self.max_temperature:
            raise ValueError("min_temperature must not exceed max_temperature")
        if self.min_max_tokens > self.max_max_tokens:
            raise ValueError("min_max_tokens must not exceed max_max_tokens")
        return self

    @property
    def allowed_origins_list(self) -> List[str]:
        """Get allowed origins as list."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]

    @property
    def default_sources_list(self) -> List[str]:
        """Get default search providers as list."""
        return [s for s in self.search_default_sources.split(",") if s]

    @property
    def redis_url(self) -> str:
        """Build Redis URL."""
        if self.redis_password:
            return (
                f"redis://:{self.redis_password}@"
                f"{self.redis_host}:{self.redis_port}/{self.redis_db}"
            )
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


# Global configuration instance
config = AppConfig()

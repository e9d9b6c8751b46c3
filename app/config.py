from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    database_url: str = "sqlite:///./actions.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout_s: int = 30
    db_pool_recycle_s: int = 1800

    log_level: str = "INFO"
    log_json: bool = False

    # pending-action window: the resolver never looks further back than this
    pending_lookback_count: int = 100
    pending_lookback_hours: int = 24
    prompt_ttl_seconds: int = 24 * 60 * 60

    # execution boundary retry policy
    execution_max_attempts: int = 3
    execution_base_delay_s: float = 2.0
    execution_max_delay_s: float = 15.0

    default_approval_contract: str = "0x037ae3f583c8d644b7556c93a04b83b52fa96159b2b0cbd83c14d3122aef80a2"

    llm_enabled: bool = False
    llm_provider: str = "openai"
    llm_model: str = "gpt-4o-mini"  # safe default- override via env
    llm_temperature: float = 0.3
    llm_timeout_s: int = 30
    openai_api_key: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def DATABASE_URL(self) -> str:
        return self.database_url

    @property
    def PENDING_LOOKBACK_COUNT(self) -> int:
        return self.pending_lookback_count

    @property
    def PENDING_LOOKBACK_HOURS(self) -> int:
        return self.pending_lookback_hours

    @property
    def LLM_ENABLED(self) -> bool:
        return self.llm_enabled

    @property
    def LLM_PROVIDER(self) -> str:
        return self.llm_provider

    @property
    def LLM_MODEL(self) -> str:
        return self.llm_model

    @property
    def LLM_TEMPERATURE(self) -> float:
        return self.llm_temperature

    @property
    def LLM_TIMEOUT_S(self) -> int:
        return self.llm_timeout_s

    @property
    def OPENAI_API_KEY(self) -> str | None:
        return self.openai_api_key


@lru_cache
def get_settings() -> Settings:
    """
    Cached settings loader (process-level).
    """
    return Settings()

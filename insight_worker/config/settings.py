from datetime import timedelta

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "insights"
    db_username: str = "insights"
    db_password: str = "secret"

    job_poll_interval_ms: int = 3000
    stale_lock_threshold_minutes: int = 30

    files_root: str = "/app/files"

    inference_provider: str = "openai"
    inference_max_attempts: int = 3
    inference_retry_delay_ms: int = 2000
    inference_timeout_seconds: int = 60

    inference_openai_api_key: str = ""
    inference_openai_compatible_api_key: str = ""
    inference_openai_compatible_base_url: str = ""
    inference_openrouter_api_key: str = ""
    inference_groq_api_key: str = ""
    inference_together_api_key: str = ""
    inference_deepseek_api_key: str = ""
    inference_ollama_api_key: str = "ollama"

    vision_model_name: str = "gpt-4o-mini"
    text_model_name: str = "gpt-3.5-turbo"
    estimation_model_name: str = "gpt-4o-mini"

    trait_min_evidence: int = 3
    trait_reliable_evidence: int = 5
    trait_confidence_penalty: int = 20

    emotion_min_evidence: int = 3
    emotion_reliable_evidence: int = 10
    emotion_confidence_penalty: int = 10

    report_min_evidence: int = 3

    confidence_floor: int = 30

    @property
    def job_poll_interval_seconds(self) -> float:
        return self.job_poll_interval_ms / 1000

    @property
    def stale_lock_threshold(self) -> timedelta:
        return timedelta(minutes=self.stale_lock_threshold_minutes)

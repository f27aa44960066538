import os
from dataclasses import dataclass
from typing import Optional


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


@dataclass(frozen=True)
class Settings:
    """Process-wide configuration, read once at startup."""

    api_host: str = "0.0.0.0"
    api_port: int = 3000
    log_level: str = "INFO"
    sentry_dsn: Optional[str] = None
    sentry_environment: str = "development"
    sentry_traces_sample_rate: float = 0.0
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    google_client_secrets_file: str = "credentials.json"
    google_token_file: str = "tokencache.json"
    reply_fetch_limit: int = 5
    follow_up_subject: str = "Quick chat?"
    sender_signature: str = "Goal Agent"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            api_host=os.getenv("API_HOST", "0.0.0.0"),
            api_port=_env_int("API_PORT", 3000),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            sentry_dsn=os.getenv("SENTRY_DSN") or None,
            sentry_environment=os.getenv("SENTRY_ENVIRONMENT", os.getenv("ENVIRONMENT", "development")),
            sentry_traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.0")),
            openai_api_key=os.getenv("OPENAI_API_KEY") or None,
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o-mini"),
            google_client_secrets_file=os.getenv("GOOGLE_CLIENT_SECRETS_FILE", "credentials.json"),
            google_token_file=os.getenv("GOOGLE_TOKEN_FILE", "tokencache.json"),
            reply_fetch_limit=_env_int("REPLY_FETCH_LIMIT", 5),
            follow_up_subject=os.getenv("FOLLOW_UP_SUBJECT", "Quick chat?"),
            sender_signature=os.getenv("SENDER_SIGNATURE", "Goal Agent"),
        )

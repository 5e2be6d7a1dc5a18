from pydantic import BaseModel

from app.cw.config import config


class AppEnvironConfig(BaseModel):
    DEBUG: bool = config.get_bool("DEBUG")

    API_HOST: str = config.get_str("API_HOST", "0.0.0.0")
    API_PORT: int = config.get_int("API_PORT", 8000)
    API_WORKERS: int = config.get_int("API_WORKERS", 1)
    API_CORS_ORIGINS: list[str] = config.get_list("API_CORS_ORIGINS", ["*"])

    # App session tokens (issued by the external auth service)
    JWT_SECRET: str = config.get_str(
        "JWT_SECRET", "change-me-placeholder-secret-at-least-32-bytes"
    )
    JWT_VERIFY: bool = config.get_bool("JWT_VERIFY", True)

    # YouTube Data API v3
    YOUTUBE_API_BASE_URL: str = config.get_str(
        "YOUTUBE_API_BASE_URL", "https://www.googleapis.com/youtube/v3"
    )
    YOUTUBE_ACCESS_TOKEN: str | None = config.get_str("YOUTUBE_ACCESS_TOKEN") or None
    YOUTUBE_REQUEST_TIMEOUT_SECONDS: float = config.get_float(
        "YOUTUBE_REQUEST_TIMEOUT_SECONDS", 10.0, minimum=0.1
    )

    # Broadcast provisioning
    BROADCAST_PRIVACY_STATUS: str = config.get_str("BROADCAST_PRIVACY_STATUS", "public")
    BROADCAST_DEFAULT_TITLE: str = config.get_str("BROADCAST_DEFAULT_TITLE", "Live")
    BROADCAST_DEFAULT_DESCRIPTION: str = config.get_str(
        "BROADCAST_DEFAULT_DESCRIPTION", "Live stream"
    )
    BROADCAST_SCHEDULED_HOURS: int = config.get_int("BROADCAST_SCHEDULED_HOURS", 4)
    STREAM_RESOLUTION: str = config.get_str("STREAM_RESOLUTION", "720p")
    STREAM_FRAME_RATE: str = config.get_str("STREAM_FRAME_RATE", "30fps")

    # Go-live coordination
    AUTO_LIVE_ENABLED: bool = config.get_bool("AUTO_LIVE_ENABLED", True)
    GO_LIVE_MAX_ATTEMPTS: int = config.get_int("GO_LIVE_MAX_ATTEMPTS", 3)
    GO_LIVE_BACKOFF_SECONDS: list[float] = config.get_float_list(
        "GO_LIVE_BACKOFF_SECONDS", [5.0, 20.0, 60.0]
    )
    GO_LIVE_FINISHED_CACHE_SIZE: int = config.get_int("GO_LIVE_FINISHED_CACHE_SIZE", 1024)

    # Client poller defaults
    POLL_INTERVAL_SECONDS: float = config.get_float("POLL_INTERVAL_SECONDS", 5.0, minimum=0.1)
    POLL_MAX_CYCLES: int = config.get_int("POLL_MAX_CYCLES", 10)
    POLL_REQUEST_TIMEOUT_SECONDS: float = config.get_float(
        "POLL_REQUEST_TIMEOUT_SECONDS", 10.0, minimum=0.1
    )

    LOGFIRE_ENABLE: bool = config.get_bool("LOGFIRE_ENABLE")
    LOGFIRE_TOKEN: str | None = config.get_str("LOGFIRE_TOKEN") or None


_app_environ_config = AppEnvironConfig()


def get_app_environ_config() -> AppEnvironConfig:
    return _app_environ_config

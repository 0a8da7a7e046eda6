import logging
import secrets
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    mongodb_url: str = Field(default="mongodb://localhost:27017", description="MongoDB connection URL")
    database_name: str = Field(default="guestwatch", min_length=1, description="MongoDB database name")

    # App Settings
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    debug: bool = False
    api_prefix: str = "/api/v1"

    # Logging
    log_level: str = "INFO"
    log_json: bool = Field(default=False, description="Emit structured JSON log lines")

    # Monitoring
    metrics_enabled: bool = Field(default=True, description="Expose Prometheus metrics")
    metrics_endpoint: str = "/metrics"

    # Redis (Celery broker and Socket.IO message queue)
    redis_url: str = "redis://localhost:6379/0"

    # JWT verification for socket connections
    jwt_secret_key: str = Field(default_factory=lambda: secrets.token_urlsafe(32), min_length=32, description="JWT secret key")
    jwt_algorithm: str = Field(default="HS256", pattern=r"^(HS256|HS384|HS512|RS256|RS384|RS512)$", description="JWT algorithm")

    # CORS
    allowed_origins: list[str] = Field(
        default_factory=lambda: [
            "http://localhost:3000",
            "http://localhost:5173",
        ],
        description="Allowed CORS origins for HTTP and socket clients"
    )

    # Real-time transport
    socket_path: str = "socket.io"
    socket_ping_interval: int = Field(default=25, gt=0, description="Heartbeat interval in seconds")
    socket_ping_timeout: int = Field(default=10, gt=0, description="Heartbeat timeout in seconds")
    socket_message_queue_enabled: bool = Field(
        default=False,
        description="Route socket emits through Redis so worker processes can broadcast"
    )

    # Watchlist dispatch
    watchlist_dispatch_enabled: bool = Field(default=True, description="Kill-switch for background watchlist checks")
    watchlist_dispatch_backend: Literal["inline", "celery"] = Field(
        default="inline",
        description="Run dispatches as in-process asyncio tasks or on Celery workers"
    )
    watchlist_dispatch_queue: str = Field(default="watchlist.dispatch", description="Celery queue name for dispatch tasks")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @model_validator(mode="after")
    def celery_dispatch_needs_message_queue(self) -> "Settings":
        # Workers only reach socket clients through the Redis message queue
        if self.watchlist_dispatch_backend == "celery" and not self.socket_message_queue_enabled:
            raise ValueError("watchlist_dispatch_backend=celery requires socket_message_queue_enabled=true")
        return self

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


settings = Settings()

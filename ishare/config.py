"""Centralised client settings loaded from environment / .env file."""

from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # REST API
    api_url: str = "https://api-vercel-five-opal.vercel.app"
    request_timeout_seconds: float = 10.0  # mobile networks are slow
    use_mock_api: bool = False

    # Socket.IO
    socket_url: Optional[str] = None  # same host as the API when unset
    socket_transports: list[str] = ["websocket"]
    socket_reconnection: bool = True
    socket_reconnection_delay_seconds: float = 1.0
    socket_reconnection_attempts: int = 10
    socket_timeout_seconds: float = 10.0

    # Ride flow
    ride_request_timeout_seconds: float = 15.0

    # Pricing
    base_fare: float = 2.50  # USD
    rate_per_km: float = 1.75  # USD / km
    average_speed_kmh: float = 30.0

    # Session storage
    storage_backend: str = "memory"  # "memory" | "redis"
    redis_url: str = "redis://localhost:6379/0"

    # Mock backend
    mock_simulation_step_seconds: float = 3.0

    log_level: str = "INFO"

    model_config = {"env_file": ".env", "env_prefix": "ISHARE_", "extra": "ignore"}

    @property
    def resolved_socket_url(self) -> str:
        return self.socket_url or self.api_url


settings = Settings()

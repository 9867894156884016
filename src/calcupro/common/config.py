"""Runtime configuration for the calculator API."""
import os
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, IPvAnyAddress

DEFAULT_ALLOWED_ORIGINS: List[str] = [
    "http://localhost:5173",
    "http://localhost:3000",
]

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]


class ServiceSettings(BaseModel):
    """
    Settings for the HTTP service.

    Values come from keyword arguments, or from the environment through
    :meth:`from_env`:
        - ``CALCUPRO_HOST``
        - ``CALCUPRO_PORT`` (falls back to ``PORT``)
        - ``CALCUPRO_LOG_LEVEL``
        - ``FRONTEND_URL``
    """

    # Settings are read once at startup and must not drift while serving
    model_config = ConfigDict(frozen=True, validate_default=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=3001, ge=1, le=65535, description="Server TCP port")
    log_level: LogLevel = Field(default="INFO", description="Logging level name")
    frontend_url: Optional[str] = Field(default=None, description="Extra origin allowed by CORS")

    @property
    def allowed_origins(self) -> List[str]:
        """
        Origins accepted by the CORS middleware.

        :return: Default development origins plus the configured front-end URL
        :rtype: List[str]
        """
        origins = list(DEFAULT_ALLOWED_ORIGINS)
        if self.frontend_url:
            origins.append(self.frontend_url.rstrip("/"))
        return origins

    @classmethod
    def from_env(cls) -> "ServiceSettings":
        """
        Build settings from environment variables, keeping defaults for unset ones.

        :return: Validated settings
        :rtype: ServiceSettings
        :raises pydantic.ValidationError: If a variable holds an invalid value
        """
        values = {}
        host = os.getenv("CALCUPRO_HOST")
        if host:
            values["host"] = host
        port = os.getenv("CALCUPRO_PORT") or os.getenv("PORT")
        if port:
            values["port"] = port
        log_level = os.getenv("CALCUPRO_LOG_LEVEL")
        if log_level:
            values["log_level"] = log_level.upper()
        frontend_url = os.getenv("FRONTEND_URL")
        if frontend_url:
            values["frontend_url"] = frontend_url
        return cls(**values)

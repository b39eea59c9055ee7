import logging
import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ServiceSettings:
    port: int
    log_level: str
    timeout: float
    retries: int
    max_pixels: int
    default_export_scale: int
    max_sessions: int

    @classmethod
    def from_env(cls) -> "ServiceSettings":
        return cls(
            port=int(os.getenv("PORT", "5500")),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            timeout=float(os.getenv("SOURCE_TIMEOUT", "10.0")),
            retries=int(os.getenv("SOURCE_RETRIES", "2")),
            max_pixels=int(os.getenv("MAX_PIXELS", "16000000")),
            default_export_scale=int(os.getenv("EXPORT_SCALE", "2")),
            max_sessions=int(os.getenv("MAX_SESSIONS", "64")),
        )


SETTINGS = ServiceSettings.from_env()


def configure_logging() -> logging.Logger:
    logging.basicConfig(level=SETTINGS.log_level)
    return logging.getLogger("halftone-service")

import logging
import os
from typing import Literal

from pydantic import BaseModel, Field


DEMO_ENTRY_URL = "https://demo.index-education.net/pronote/eleve.html"


def _env_bool(value: str) -> bool:
    return value.strip().lower() not in ("0", "false", "no", "off", "")


class Settings(BaseModel):
    entry_url: str = DEMO_ENTRY_URL
    proxy: str | None = None
    timeout: float = 15.0
    verify_tls: bool = True
    espace: int = 3
    auth_mode: Literal["protocol", "browser"] = "protocol"
    max_attempts: int = Field(default=1, ge=1)
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        environ = os.environ if environ is None else environ
        values = {}
        for name, key in (
            ("entry_url", "PRONOTE_ENTRY_URL"),
            ("proxy", "PRONOTE_PROXY"),
            ("timeout", "PRONOTE_TIMEOUT"),
            ("espace", "PRONOTE_ESPACE"),
            ("auth_mode", "PRONOTE_AUTH_MODE"),
            ("max_attempts", "PRONOTE_MAX_ATTEMPTS"),
            ("log_level", "PRONOTE_LOG_LEVEL"),
        ):
            if environ.get(key):
                values[name] = environ[key]
        if "PRONOTE_VERIFY_TLS" in environ:
            values["verify_tls"] = _env_bool(environ["PRONOTE_VERIFY_TLS"])
        return cls(**values)

    @property
    def proxies(self) -> dict[str, str]:
        if not self.proxy:
            return {}
        return {"http": self.proxy, "https": self.proxy}


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

import logging
from dataclasses import dataclass
from typing import Protocol

from config import Settings
from errors import BootstrapError, TransportError
from session import DEMO_CREDENTIALS, Credentials, PronoteSession


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthResult:
    mode: str
    session_id: int | None
    state: str


class Authenticator(Protocol):
    def authenticate(self, credentials: Credentials) -> AuthResult: ...


class ProtocolAuthenticator:
    """直接走 appelfonction 协议登录；失败时丢弃会话，用新会话重试"""

    RETRYABLE = (TransportError, BootstrapError)

    def __init__(self, settings: Settings, session_factory=PronoteSession) -> None:
        self._settings = settings
        self._session_factory = session_factory

    def authenticate(self, credentials: Credentials) -> AuthResult:
        attempts = self._settings.max_attempts
        for attempt in range(1, attempts + 1):
            with self._session_factory(self._settings) as session:
                try:
                    session_id = session.connect(credentials)
                except self.RETRYABLE as exc:
                    if attempt == attempts:
                        raise
                    logger.warning(
                        "handshake attempt %d/%d failed: %s", attempt, attempts, exc
                    )
                    continue
                return AuthResult("protocol", session_id, session.state.value)
        raise AssertionError("unreachable")


class BrowserAuthenticator:
    """通过 Playwright 操作真实浏览器登录"""

    def __init__(self, settings: Settings) -> None:
        self._settings = settings

    def authenticate(self, credentials: Credentials) -> AuthResult:
        from playwright.sync_api import sync_playwright

        from browser_login import PronoteBrowser

        with sync_playwright() as playwright:
            with PronoteBrowser(playwright, self._settings) as browser:
                if credentials == DEMO_CREDENTIALS:
                    browser.authenticate_as_demo_account()
                else:
                    browser.authenticate(credentials.username, credentials.password)
                return AuthResult("browser", None, browser.page_state.value)


def make_authenticator(settings: Settings) -> Authenticator:
    if settings.auth_mode == "browser":
        return BrowserAuthenticator(settings)
    return ProtocolAuthenticator(settings)

"""Pytest configuration and shared fixtures."""

import json

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from config import Settings
from session import PronoteSession


ENTRY_URL = "https://demo.index-education.net/pronote/eleve.html"
ENTRY_PAGE = (
    "<html><body onload=\"try { Start ({h:'1234567',a:3,d:false}) } "
    'catch (e) { messageErreur (e) }"></body></html>'
)


class FakePortal(BaseAdapter):
    """按顺序返回预设响应，并记录收到的请求"""

    def __init__(self) -> None:
        super().__init__()
        self.replies = []
        self.requests = []
        self.options = []

    def reply(self, text: str = "", status: int = 200) -> "FakePortal":
        self.replies.append((status, text))
        return self

    def fail(self, exc: Exception) -> "FakePortal":
        self.replies.append(exc)
        return self

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.requests.append(request)
        self.options.append({"proxies": proxies, "verify": verify, "timeout": timeout})
        if not self.replies:
            raise requests.ConnectionError("no reply queued")
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        status, text = reply
        res = requests.Response()
        res.status_code = status
        res._content = text.encode("utf-8")
        res.encoding = "utf-8"
        res.headers = CaseInsensitiveDict({"Content-Type": "text/html"})
        res.url = request.url
        res.request = request
        return res

    def close(self) -> None:
        pass

    @property
    def posts(self):
        return [r for r in self.requests if r.method == "POST"]

    def post_bodies(self):
        return [json.loads(r.body) for r in self.posts]


@pytest.fixture
def settings():
    return Settings(entry_url=ENTRY_URL)


@pytest.fixture
def portal():
    return FakePortal()


@pytest.fixture
def session(settings, portal):
    s = PronoteSession(settings)
    s.mount("https://", portal)
    yield s
    s.close()

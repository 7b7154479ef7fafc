import logging
import re

import requests

from errors import MalformedSessionId, MarkerNotFound, TransportError


# 入口页内联脚本形如 Start ({h:'1234567',a:3,...})
SESSION_MARKER = "h:'"
SESSION_ID_WIDTH = 7
SESSION_ID_REGEX = re.compile(r"[0-9]{%d}" % SESSION_ID_WIDTH)
USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/108.0.0.0 Safari/537.36"

logger = logging.getLogger(__name__)


def extract_session_id(text: str) -> int:
    index = text.find(SESSION_MARKER)
    if index == -1:
        raise MarkerNotFound(f"入口页中未找到会话标记 {SESSION_MARKER!r}")

    start = index + len(SESSION_MARKER)
    candidate = text[start : start + SESSION_ID_WIDTH]
    if not SESSION_ID_REGEX.fullmatch(candidate):
        raise MalformedSessionId(f"会话编号格式不正确: {candidate!r}")
    return int(candidate)


def fetch_session_id(http: requests.Session, entry_url: str) -> int:
    """请求入口页并取出会话编号，不做重试"""
    try:
        res = http.get(entry_url, headers={"User-Agent": USER_AGENT})
        res.raise_for_status()
    except requests.RequestException as exc:
        raise TransportError(f"入口页请求失败: {exc}") from exc

    session_id = extract_session_id(res.text)
    logger.info("got session id %s from %s", session_id, entry_url)
    return session_id

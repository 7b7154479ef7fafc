#!/usr/bin/env python
# -*- encoding: utf-8 -*-
# @Author  :   Arthals
# @File    :   session.py
# @Time    :   2026/10/19 09:12:31
# @Contact :   zhuozhiyongde@126.com
# @Software:   Visual Studio Code


import base64
import enum
import logging

import requests
from pydantic import BaseModel

from bootstrap import USER_AGENT, fetch_session_id
from cipher import KeyDerivation, ZeroKeyDerivation, check_material, new_iv
from config import Settings
from envelope import FunctionCall, SessionMaterial, build_envelope, portal_root
from errors import ProtocolStateError, TransportError


logger = logging.getLogger(__name__)


class Credentials(BaseModel):
    username: str
    password: str


DEMO_CREDENTIALS = Credentials(username="demonstration", password="pronotevs")


class HandshakeState(enum.Enum):
    UNINITIALIZED = "Uninitialized"
    SESSION_KNOWN = "SessionKnown"
    PARAMETERS_SENT = "ParametersSent"
    IDENTIFIED = "Identified"


class PronoteSession(requests.Session):
    def __init__(
        self,
        settings: Settings | None = None,
        key_derivation: KeyDerivation | None = None,
        *args,
        **kwargs,
    ) -> None:
        super().__init__(*args, **kwargs)
        self._settings = settings or Settings()
        self._key_derivation = key_derivation or ZeroKeyDerivation()
        self._root = portal_root(self._settings.entry_url)
        self._material: SessionMaterial | None = None
        self.state = HandshakeState.UNINITIALIZED
        self.verify = self._settings.verify_tls
        self.proxies.update(self._settings.proxies)
        self.headers.update({"User-Agent": USER_AGENT, "Accept": "*/*"})

    def request(self, method, url, *args, **kwargs):
        kwargs.setdefault("timeout", self._settings.timeout)
        # 配置优先于 HTTPS_PROXY / REQUESTS_CA_BUNDLE 等环境变量
        kwargs.setdefault("proxies", self._settings.proxies)
        kwargs.setdefault("verify", self._settings.verify_tls)
        return super().request(method, url, *args, **kwargs)

    @property
    def session_id(self) -> int | None:
        return self._material.session_id if self._material else None

    @property
    def material(self) -> SessionMaterial | None:
        return self._material

    def _require(self, expected: HandshakeState, action: str) -> None:
        if self.state is not expected:
            raise ProtocolStateError(
                f"{action} 需要状态 {expected.value}，当前为 {self.state.value}"
            )

    def bootstrap(self) -> int:
        """获取会话编号并生成本次会话的密钥与 IV"""
        self._require(HandshakeState.UNINITIALIZED, "bootstrap")
        session_id = fetch_session_id(self, self._settings.entry_url)
        key, iv = self._key_derivation.derive(session_id), new_iv()
        check_material(key, iv)
        self._material = SessionMaterial(session_id=session_id, key=key, iv=iv)
        self.state = HandshakeState.SESSION_KNOWN
        return session_id

    def _send(self, call: FunctionCall) -> str:
        # 序号在发送前就已消耗，发送失败也不会回退
        url, body = build_envelope(
            self._material, call, self._root, espace=self._settings.espace
        )
        data = body.encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "Content-Length": str(len(data)),
        }
        try:
            res = self.post(url, data=data, headers=headers)
        except requests.RequestException as exc:
            raise TransportError(f"{call.name} 请求失败: {exc}") from exc

        if not res.ok:
            logger.warning("%s answered HTTP %s", call.name, res.status_code)
        else:
            logger.debug("%s answered HTTP %s", call.name, res.status_code)
        return res.text

    def send_parameters(self) -> str:
        self._require(HandshakeState.SESSION_KNOWN, "FonctionParametres")
        call = FunctionCall(
            "FonctionParametres",
            {
                "Uuid": base64.b64encode(self._material.iv).decode("ascii"),
                "identifiantNav": "",
            },
        )
        text = self._send(call)
        self.state = HandshakeState.PARAMETERS_SENT
        return text

    def identify(self, credentials: Credentials) -> str:
        self._require(HandshakeState.PARAMETERS_SENT, "Identification")
        call = FunctionCall(
            "Identification",
            {
                "genreConnexion": 0,
                "genreEspace": self._settings.espace,
                "identifiant": credentials.username,
                "pourENT": False,
                "enConnexionAuto": False,
                "demandeConnexionAuto": False,
                "demandeConnexionAppliMobile": False,
                "demandeConnexionAppliMobileJeton": False,
                "uuidAppliMobile": "",
                "loginTokenSAV": "",
            },
        )
        text = self._send(call)
        self.state = HandshakeState.IDENTIFIED
        return text

    def connect(self, credentials: Credentials) -> int:
        """完成整个握手，任一步失败即抛出该步的错误"""
        self._require(HandshakeState.UNINITIALIZED, "connect")
        session_id = self.bootstrap()
        self.send_parameters()
        self.identify(credentials)
        logger.info("session %s identified as %s", session_id, credentials.username)
        return session_id

    def call(self, call: FunctionCall) -> str:
        self._require(HandshakeState.IDENTIFIED, call.name)
        return self._send(call)


if __name__ == "__main__":
    from config import configure_logging

    settings = Settings.from_env()
    configure_logging(settings)
    with PronoteSession(settings) as session:
        print(session.connect(DEMO_CREDENTIALS))

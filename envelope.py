import json
from dataclasses import dataclass, field
from typing import Any

from cipher import encrypt
from counter import SequenceCounter


APPEL_FONCTION_PATH = "{root}/appelfonction/{espace}/{session_id}/{order}"
DEFAULT_ESPACE = 3


@dataclass(frozen=True)
class FunctionCall:
    name: str
    donnees: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class SessionMaterial:
    """握手后固定不变的会话材料，只有计数器会前进"""

    session_id: int
    key: bytes
    iv: bytes
    counter: SequenceCounter = field(default_factory=SequenceCounter, compare=False)


def portal_root(entry_url: str) -> str:
    # https://demo.index-education.net/pronote/eleve.html -> .../pronote
    return entry_url.split("?", 1)[0].rsplit("/", 1)[0]


def order_token(material: SessionMaterial) -> str:
    number = material.counter.next()
    return encrypt(material.key, material.iv, str(number)).hex()


def build_envelope(
    material: SessionMaterial,
    call: FunctionCall,
    root: str,
    espace: int = DEFAULT_ESPACE,
) -> tuple[str, str]:
    """生成请求地址与 JSON 请求体，每调用一次消耗一个序号"""
    token = order_token(material)
    body = json.dumps(
        {
            "session": material.session_id,
            "numeroOrdre": token,
            "nom": call.name,
            "donneesSec": {"donnees": call.donnees},
        },
        ensure_ascii=False,
    )
    url = APPEL_FONCTION_PATH.format(
        root=root.rstrip("/"),
        espace=espace,
        session_id=material.session_id,
        order=token,
    )
    return url, body

import logging
import os
from hashlib import md5
from typing import Protocol

from Crypto.Cipher import AES
from Crypto.Util.Padding import pad, unpad

from errors import EncryptionError


KEY_SIZE = 16
logger = logging.getLogger(__name__)


def _as_bytes(data: str | bytes) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


def check_material(key: bytes, iv: bytes) -> None:
    if len(key) != KEY_SIZE:
        raise EncryptionError(f"密钥长度必须为 {KEY_SIZE} 字节，实际为 {len(key)}")
    if len(iv) != KEY_SIZE:
        raise EncryptionError(f"IV 长度必须为 {KEY_SIZE} 字节，实际为 {len(iv)}")


def encrypt(key: bytes, iv: bytes, data: str | bytes) -> bytes:
    """AES-128-CBC + PKCS#7 加密，相同输入得到相同输出"""
    check_material(key, iv)
    try:
        cipher = AES.new(bytes(key), AES.MODE_CBC, bytes(iv))
        return cipher.encrypt(pad(_as_bytes(data), AES.block_size, style="pkcs7"))
    except ValueError as exc:
        raise EncryptionError(f"加密失败: {exc}") from exc


def decrypt(key: bytes, iv: bytes, data: bytes) -> bytes:
    check_material(key, iv)
    try:
        cipher = AES.new(bytes(key), AES.MODE_CBC, bytes(iv))
        return unpad(cipher.decrypt(bytes(data)), AES.block_size, style="pkcs7")
    except ValueError as exc:
        raise EncryptionError(f"解密失败: {exc}") from exc


def new_iv() -> bytes:
    return os.urandom(KEY_SIZE)


class KeyDerivation(Protocol):
    def derive(self, session_id: int) -> bytes: ...


class ZeroKeyDerivation:
    """占位实现：全零密钥，与目前抓包观察到的行为一致，真实的派生方式尚未逆向"""

    def derive(self, session_id: int) -> bytes:
        return bytes(KEY_SIZE)


class Md5KeyDerivation:
    """以 MD5(secret) 作为密钥，空 secret 即为空输入的哈希"""

    def __init__(self, secret: str | bytes = b"") -> None:
        self._secret = _as_bytes(secret)

    def derive(self, session_id: int) -> bytes:
        logger.debug("deriving md5 key for session %s", session_id)
        return md5(self._secret).digest()

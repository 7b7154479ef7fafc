class PronoteError(Exception):
    """所有协议错误的基类"""

    kind = "PronoteError"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransportError(PronoteError):
    kind = "TransportError"


class BootstrapError(PronoteError):
    kind = "BootstrapError"


class MarkerNotFound(BootstrapError):
    kind = "BootstrapError::MarkerNotFound"


class MalformedSessionId(BootstrapError):
    kind = "BootstrapError::MalformedSessionId"


class EncryptionError(PronoteError):
    kind = "EncryptionError"


class ProtocolStateError(PronoteError):
    kind = "ProtocolStateError"

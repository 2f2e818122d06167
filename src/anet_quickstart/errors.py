"""
오류 정의 모듈
키 저장소 파싱 및 키 검증 실패 유형
"""

ED25519_KEY_SIZE = 32


class QuickstartError(Exception):
    """anet-quickstart 기본 예외"""


class KeyStoreError(QuickstartError):
    """client-keys.txt 파싱 오류"""


class MissingHeaderKey(KeyStoreError):
    def __init__(self):
        super().__init__("Could not parse server_pub_key from key-store header")


class ClientNotFound(KeyStoreError):
    def __init__(self, ordinal: int):
        self.ordinal = ordinal
        super().__init__(f"Client #{ordinal} not found in key-store")


class MissingPrivateKey(KeyStoreError):
    def __init__(self, ordinal: int):
        self.ordinal = ordinal
        super().__init__(f"Could not parse private_key for Client #{ordinal}")


class ValidationError(QuickstartError):
    """필드 값 검증 오류"""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(message)


class DecodedLengthMismatch(ValidationError):
    def __init__(self, field: str, actual: int, length: int = 0,
                 expected: int = ED25519_KEY_SIZE):
        self.actual = actual
        self.expected = expected
        self.length = length
        super().__init__(
            field,
            f"{field}: decoded length is {actual} (expected {expected}). "
            f"Key length {length} chars."
        )


class EmptyField(ValidationError):
    def __init__(self, field: str):
        super().__init__(field, f"{field} is empty")


class UnreadableFile(QuickstartError):
    """입력 파일을 읽을 수 없음 (권한, UTF-8 아님 등)"""

    def __init__(self, path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read {path}: {reason}")

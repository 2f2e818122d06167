"""
키 검증 모듈
Base64 키가 Ed25519 키 길이(32바이트)로 디코딩되는지 확인
"""

import base64

from .errors import ED25519_KEY_SIZE, DecodedLengthMismatch


def decoded_length(value: str) -> int:
    """표준 Base64 디코딩 후 바이트 길이 (디코딩 실패 시 0)"""
    try:
        return len(base64.b64decode(value, validate=True))
    except ValueError:
        # binascii.Error 및 비ASCII 문자열
        return 0


def validate_ed25519(value: str, field: str = "key") -> int:
    """키가 정확히 32바이트로 디코딩되는지 검증

    Args:
        value: Base64 문자열
        field: 오류 메시지에 표시할 필드 이름

    Returns:
        int: 디코딩된 길이 (항상 32)

    Raises:
        DecodedLengthMismatch: 디코딩 길이가 32가 아닌 경우
    """
    actual = decoded_length(value)
    if actual != ED25519_KEY_SIZE:
        raise DecodedLengthMismatch(field, actual, length=len(value))
    return actual

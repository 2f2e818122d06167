"""
키 검증 모듈 테스트
"""

import base64

import pytest

from anet_quickstart.errors import DecodedLengthMismatch
from anet_quickstart.keys import decoded_length, validate_ed25519


@pytest.mark.parametrize("size", [0, 1, 31, 33, 64])
def test_wrong_decoded_length_rejected(size):
    """32바이트가 아닌 키는 거부"""
    value = base64.b64encode(bytes(size)).decode()
    with pytest.raises(DecodedLengthMismatch) as exc:
        validate_ed25519(value, "private_key")
    assert exc.value.actual == size
    assert exc.value.expected == 32
    assert exc.value.field == "private_key"


def test_32_byte_key_accepted():
    value = base64.b64encode(bytes(range(32))).decode()
    assert len(value) == 44
    assert validate_ed25519(value) == 32


def test_garbage_counts_as_zero_length():
    """디코딩 실패는 길이 0으로 취급"""
    assert decoded_length("not base64 at all!") == 0
    assert decoded_length("키") == 0
    with pytest.raises(DecodedLengthMismatch) as exc:
        validate_ed25519("!!!!")
    assert exc.value.actual == 0


def test_empty_string():
    assert decoded_length("") == 0
    with pytest.raises(DecodedLengthMismatch):
        validate_ed25519("")


def test_length_is_independent_of_character_count():
    """문자 길이가 아니라 디코딩된 바이트 수로 판단"""
    unpadded = base64.b64encode(bytes(32)).decode().rstrip("=")
    assert decoded_length(unpadded) == 0

    value = base64.b64encode(bytes(33)).decode()
    assert len(value) == 44
    assert decoded_length(value) == 33


def test_error_message_names_field_and_lengths():
    value = base64.b64encode(bytes(31)).decode()
    with pytest.raises(DecodedLengthMismatch) as exc:
        validate_ed25519(value, "server_pub_key")
    message = str(exc.value)
    assert "server_pub_key" in message
    assert "31" in message
    assert "expected 32" in message

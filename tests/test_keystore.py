"""
키 저장소 파서 테스트
"""

import pytest

from anet_quickstart.errors import ClientNotFound, MissingHeaderKey, MissingPrivateKey
from anet_quickstart.keystore import parse_keystore, select_client, tokenize, TOKEN_SECTION

from conftest import (
    CLIENT1_KEY, CLIENT2_KEY, CLIENT10_KEY, OVERRIDE_KEY, SERVER_KEY, make_keystore,
)


def test_select_first_client():
    text = make_keystore((1, CLIENT1_KEY, None), (2, CLIENT2_KEY, None))
    keys = select_client(text, 1)
    assert keys.server_public_key == SERVER_KEY
    assert keys.private_key == CLIENT1_KEY
    assert keys.server_pub_key_override is None


def test_ordinal_is_not_a_prefix_match():
    """Client #1 이 Client #10 과 혼동되지 않음"""
    text = make_keystore((10, CLIENT10_KEY, None), (1, CLIENT1_KEY, None))
    assert select_client(text, 1).private_key == CLIENT1_KEY
    assert select_client(text, 10).private_key == CLIENT10_KEY


def test_ordinal_one_does_not_match_eleven():
    text = make_keystore((11, CLIENT10_KEY, None))
    with pytest.raises(ClientNotFound) as exc:
        select_client(text, 1)
    assert exc.value.ordinal == 1


def test_override_inheritance():
    """override 가 없으면 헤더 키, 있으면 블록 키"""
    text = make_keystore((1, CLIENT1_KEY, None), (2, CLIENT2_KEY, OVERRIDE_KEY))

    first = select_client(text, 1)
    assert first.server_pub_key == SERVER_KEY

    second = select_client(text, 2)
    assert second.server_pub_key_override == OVERRIDE_KEY
    assert second.server_pub_key == OVERRIDE_KEY


def test_section_ends_at_next_marker():
    """다음 블록의 키를 빌려오지 않음"""
    text = "\n".join([
        f"# Server public key (server_pub_key): {SERVER_KEY}",
        "# Client #1",
        "# (no keys)",
        "# Client #2",
        f'private_key = "{CLIENT2_KEY}"',
    ])
    with pytest.raises(MissingPrivateKey) as exc:
        select_client(text, 1)
    assert exc.value.ordinal == 1
    assert select_client(text, 2).private_key == CLIENT2_KEY


def test_only_first_occurrence_used():
    text = make_keystore((1, CLIENT1_KEY, None), (1, CLIENT2_KEY, OVERRIDE_KEY))
    keys = select_client(text, 1)
    assert keys.private_key == CLIENT1_KEY
    assert keys.server_pub_key_override is None


def test_first_assignment_in_block_wins():
    text = "\n".join([
        f"# Server public key (server_pub_key): {SERVER_KEY}",
        "# Client #1",
        f'private_key = "{CLIENT1_KEY}"',
        f'private_key = "{CLIENT2_KEY}"',
    ])
    assert select_client(text, 1).private_key == CLIENT1_KEY


def test_values_are_trimmed_of_whitespace_and_cr():
    text = (
        f"# Server public key (server_pub_key):   {SERVER_KEY}  \r\n"
        "# Client #1\r\n"
        f'private_key = " {CLIENT1_KEY}\r"\r\n'
    )
    keys = select_client(text, 1)
    assert keys.server_public_key == SERVER_KEY
    assert keys.private_key == CLIENT1_KEY
    assert keys.private_key.endswith("=")


def test_missing_header_key():
    text = "# Client #1\nprivate_key = \"abc\"\n"
    with pytest.raises(MissingHeaderKey):
        select_client(text, 1)


def test_empty_header_key():
    text = "# Server public key (server_pub_key):   \n# Client #1\nprivate_key = \"abc\"\n"
    with pytest.raises(MissingHeaderKey):
        parse_keystore(text)


def test_client_not_found():
    text = make_keystore((1, CLIENT1_KEY, None))
    with pytest.raises(ClientNotFound) as exc:
        select_client(text, 3)
    assert "Client #3" in str(exc.value)


def test_parse_keystore_collects_all_blocks():
    text = make_keystore((1, CLIENT1_KEY, None), (2, CLIENT2_KEY, OVERRIDE_KEY), (10, CLIENT10_KEY, None))
    store = parse_keystore(text)
    assert store.server_public_key == SERVER_KEY
    assert list(store.clients) == [1, 2, 10]
    assert store.client(2).server_pub_key_override == OVERRIDE_KEY


def test_marker_ordinal_must_be_bounded():
    """'# Client #1x' 는 번호 1 로 인식되지 않음"""
    tokens = list(tokenize("# Client #1x\n# Client #7 (laptop)\n# Client #3"))
    assert [t.kind for t in tokens] == [TOKEN_SECTION] * 3
    assert [t.ordinal for t in tokens] == [None, 7, 3]


def test_marker_ordinal_accepts_ascii_digits_only():
    """유니코드 숫자는 번호로 인식되지 않지만 섹션은 끝냄"""
    tokens = list(tokenize("# Client #²\n# Client #١\n# Client #1"))
    assert [t.kind for t in tokens] == [TOKEN_SECTION] * 3
    assert [t.ordinal for t in tokens] == [None, None, 1]


def test_unicode_digit_marker_does_not_break_selection():
    text = make_keystore((1, CLIENT1_KEY, None)).replace(
        "# Client #1", f'# Client #²\nprivate_key = "{CLIENT2_KEY}"\n# Client #١\n# Client #1'
    )
    assert select_client(text, 1).private_key == CLIENT1_KEY


def test_leading_zero_ordinal_is_not_matched():
    text = make_keystore((1, CLIENT1_KEY, None)).replace("# Client #1", "# Client #01")
    assert [t.ordinal for t in tokenize("# Client #01\n# Client #0")] == [None, 0]
    with pytest.raises(ClientNotFound):
        select_client(text, 1)

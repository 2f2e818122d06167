"""
키 저장소 파서
server/client-keys.txt 에서 서버 공개키와 클라이언트 키 블록 추출

파일 형식:
    # Server public key (server_pub_key): <base64>
    # Client #1 ...
    private_key = "<base64>"
    server_pub_key = "<base64>"   (선택사항)
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, NamedTuple, Optional

from .errors import ClientNotFound, MissingHeaderKey, MissingPrivateKey

HEADER_MARKER = "Server public key (server_pub_key):"
CLIENT_MARKER = "# Client #"

TOKEN_HEADER = "header"
TOKEN_SECTION = "section"
TOKEN_ASSIGN = "assign"
TOKEN_OTHER = "other"


class Token(NamedTuple):
    kind: str
    key: str = ""
    value: str = ""
    ordinal: Optional[int] = None


@dataclass
class ClientBlock:
    """클라이언트 키 블록"""
    private_key: str = ""
    server_pub_key_override: Optional[str] = None


@dataclass
class KeyStore:
    """파싱된 키 저장소"""
    server_public_key: str
    clients: Dict[int, ClientBlock] = field(default_factory=dict)

    def client(self, ordinal: int) -> ClientBlock:
        if ordinal not in self.clients:
            raise ClientNotFound(ordinal)
        return self.clients[ordinal]


@dataclass
class ClientKeys:
    """선택된 클라이언트의 키 쌍"""
    server_public_key: str
    private_key: str
    server_pub_key_override: Optional[str] = None

    @property
    def server_pub_key(self) -> str:
        """블록에 override가 없으면 헤더의 서버 공개키 사용"""
        return self.server_pub_key_override or self.server_public_key


def trim(value: str) -> str:
    """앞뒤 공백 및 CR 제거 (내부 '=' 패딩은 유지)"""
    return value.strip(" \t\r\n\f\v")


def _parse_ordinal(line: str, start: int) -> Optional[int]:
    """마커 바로 뒤의 정수 토큰

    ASCII 숫자만 허용하고 0으로 시작하는 번호(`01`)는 인정하지 않는다.
    토큰은 공백 또는 줄 끝으로 끝나야 한다.
    """
    end = start
    while end < len(line) and "0" <= line[end] <= "9":
        end += 1
    if end == start:
        return None
    if end < len(line) and not line[end].isspace():
        return None
    digits = line[start:end]
    if len(digits) > 1 and digits.startswith("0"):
        return None
    return int(digits)


def _parse_assignment(line: str) -> Optional[Token]:
    key, sep, rest = line.partition("=")
    if not sep:
        return None
    rest = rest.strip()
    if not rest.startswith('"'):
        return None
    closing = rest.find('"', 1)
    if closing < 0:
        return None
    return Token(TOKEN_ASSIGN, key=key.strip(), value=trim(rest[1:closing]))


def tokenize(text: str) -> Iterator[Token]:
    """키 저장소를 한 줄씩 스캔하여 토큰 생성"""
    for line in text.split("\n"):
        line = line.rstrip("\r")

        pos = line.find(HEADER_MARKER)
        if pos >= 0:
            yield Token(TOKEN_HEADER, value=trim(line[pos + len(HEADER_MARKER):]))
            continue

        pos = line.find(CLIENT_MARKER)
        if pos >= 0:
            yield Token(TOKEN_SECTION, ordinal=_parse_ordinal(line, pos + len(CLIENT_MARKER)))
            continue

        token = _parse_assignment(line)
        yield token if token else Token(TOKEN_OTHER)


def parse_keystore(text: str) -> KeyStore:
    """키 저장소 전체 파싱

    같은 번호의 블록이 여러 개면 첫 번째만 사용하며,
    private_key 가 없는 블록은 빈 문자열로 남는다.
    """
    server_public_key = ""
    clients: Dict[int, ClientBlock] = {}
    current: Optional[ClientBlock] = None

    for token in tokenize(text):
        if token.kind == TOKEN_HEADER:
            if not server_public_key:
                server_public_key = token.value
        elif token.kind == TOKEN_SECTION:
            current = None
            if token.ordinal is not None and token.ordinal not in clients:
                current = ClientBlock()
                clients[token.ordinal] = current
        elif token.kind == TOKEN_ASSIGN and current is not None:
            if token.key == "private_key" and not current.private_key:
                current.private_key = token.value
            elif token.key == "server_pub_key" and current.server_pub_key_override is None:
                current.server_pub_key_override = token.value or None

    if not server_public_key:
        raise MissingHeaderKey()

    return KeyStore(server_public_key=server_public_key, clients=clients)


def select_client(text: str, ordinal: int) -> ClientKeys:
    """지정한 번호(1부터 시작)의 클라이언트 키 추출

    Raises:
        MissingHeaderKey: 헤더에 서버 공개키가 없음
        ClientNotFound: '# Client #N' 블록이 없음
        MissingPrivateKey: 블록에 private_key 가 없음
    """
    store = parse_keystore(text)
    block = store.client(ordinal)
    if not block.private_key:
        raise MissingPrivateKey(ordinal)

    return ClientKeys(
        server_public_key=store.server_public_key,
        private_key=block.private_key,
        server_pub_key_override=block.server_pub_key_override,
    )

"""
클라이언트 설정 생성 모듈
client-keys.txt 파싱 → 키 검증 → client.toml 렌더링
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Union

from .errors import EmptyField
from .keys import validate_ed25519
from .keystore import ClientKeys, select_client
from .logger import get_logger
from .render import read_text, render, write_atomic


@dataclass
class GenerationResult:
    """생성 결과"""
    output_path: Path
    client: int
    keys: ClientKeys


class ClientConfigGenerator:
    """client.toml 생성 클래스"""

    def __init__(self, keys_file: Union[str, Path], template: Union[str, Path]):
        self.keys_file = Path(keys_file)
        self.template = Path(template)
        self.logger = get_logger()

    def check_inputs(self):
        """입력 파일 존재 확인"""
        if not self.keys_file.is_file():
            raise FileNotFoundError(f"Keys file not found: {self.keys_file}")
        if not self.template.is_file():
            raise FileNotFoundError(f"Template not found: {self.template}")

    def load_client_keys(self, ordinal: int) -> ClientKeys:
        """키 저장소에서 클라이언트 키를 읽고 검증

        헤더의 서버 공개키를 먼저 검증한 뒤 클라이언트 블록을 사용한다.
        """
        text = read_text(self.keys_file)
        keys = select_client(text, ordinal)

        validate_ed25519(keys.server_public_key, "server_pub_key")
        self.logger.info(f"Server public key: {len(keys.server_public_key)} chars, decodes to 32 bytes")

        validate_ed25519(keys.private_key, "private_key")
        self.logger.info(f"Client #{ordinal} private_key: {len(keys.private_key)} chars, decodes to 32 bytes")

        if keys.server_pub_key_override:
            validate_ed25519(keys.server_pub_key_override, f"server_pub_key (Client #{ordinal})")
            self.logger.info(f"Client #{ordinal} overrides server_pub_key")

        return keys

    def generate(self, address: str, ordinal: int, output: Union[str, Path]) -> GenerationResult:
        """client.toml 생성

        모든 검증이 끝나기 전에는 출력 경로를 건드리지 않는다.

        Raises:
            FileNotFoundError: 키 파일 또는 템플릿 없음
            KeyStoreError: 키 저장소 파싱 실패
            ValidationError: 빈 주소 또는 잘못된 키 길이
            UnreadableFile: 입력 파일을 UTF-8 로 읽을 수 없음
        """
        address = address.strip()
        if not address:
            raise EmptyField("address")

        self.check_inputs()
        keys = self.load_client_keys(ordinal)

        # 템플릿과 출력이 같은 파일일 수 있으므로 전체를 먼저 읽는다
        template_text = read_text(self.template, newline="")
        text = render(template_text, address, keys.private_key, keys.server_pub_key)

        output_path = write_atomic(output, text)
        self.logger.info(f"Written client config for Client #{ordinal}: {output_path}")

        return GenerationResult(output_path=output_path, client=ordinal, keys=keys)

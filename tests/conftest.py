"""
공용 테스트 픽스처
"""

import base64

import pytest

from anet_quickstart.logger import init_logger

SERVER_KEY = base64.b64encode(bytes(32)).decode()
CLIENT1_KEY = base64.b64encode(b"\x04\x10\x41" * 10 + b"\x01\x02").decode()
CLIENT2_KEY = base64.b64encode(bytes(range(32))).decode()
CLIENT10_KEY = base64.b64encode(bytes(range(100, 132))).decode()
OVERRIDE_KEY = base64.b64encode(b"\xff" * 32).decode()
SHORT_KEY = base64.b64encode(bytes(31)).decode()

TEMPLATE = """# ANet client configuration
[main]
address = "YOUR_SERVER_IP:8443"
private_key = ""
server_pub_key = ""

[network]
mtu = 1400
"""


@pytest.fixture(autouse=True)
def logger(tmp_path_factory):
    """테스트마다 임시 로그 디렉토리 사용"""
    return init_logger(str(tmp_path_factory.mktemp("logs")), "DEBUG", False)


def make_keystore(*blocks, server_key=SERVER_KEY):
    """client-keys.txt 형식 문자열 생성

    blocks: (ordinal, private_key, server_pub_key override 또는 None)
    """
    lines = [
        "# ANet keys generated by generate-config.sh",
        f"# Server public key (server_pub_key): {server_key}",
        "",
    ]
    for ordinal, private_key, override in blocks:
        lines.append(f"# Client #{ordinal} (fingerprint: abc{ordinal})")
        lines.append(f'private_key = "{private_key}"')
        if override is not None:
            lines.append(f'server_pub_key = "{override}"')
        lines.append("")
    return "\n".join(lines)


@pytest.fixture
def workspace(tmp_path):
    """quick_start 디렉토리 구조와 설정 파일"""
    (tmp_path / "server").mkdir()
    (tmp_path / "client-windows").mkdir()
    (tmp_path / "server" / "client-keys.txt").write_text(
        make_keystore((1, CLIENT1_KEY, None), (2, CLIENT2_KEY, OVERRIDE_KEY)), encoding="utf-8"
    )
    (tmp_path / "client-windows" / "client.toml").write_text(TEMPLATE, encoding="utf-8")

    config_file = tmp_path / "anet-quickstart.yaml"
    config_file.write_text(
        f"paths:\n  base_dir: \"{tmp_path}\"\n"
        f"logging:\n  log_dir: \"{tmp_path / 'logs'}\"\n",
        encoding="utf-8"
    )
    return tmp_path

"""
설정 관리 모듈
YAML 기반 설정 파일 관리 및 기본값 제공
"""

import os
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, asdict


@dataclass
class PathsConfig:
    """quick_start 디렉토리 기준 경로"""
    base_dir: str = "."
    keys_file: str = "server/client-keys.txt"
    template: str = "client-windows/client.toml"
    client_output: str = "client-windows/client.toml"
    server_config: str = "server/server.toml"
    generate_script: str = "generate-config.sh"


@dataclass
class ContainerConfig:
    """Docker 컨테이너 설정"""
    name: str = "anet-server"
    image: str = "anet-server:latest"
    service: str = "anet-server"
    log_tail: int = 30
    startup_wait: int = 2
    command_timeout: int = 30


@dataclass
class ServerConfig:
    """ANet 서버 설정"""
    repo_url: str = "https://github.com/ZeroTworu/anet.git"
    source_dir: str = "anet"
    bind_port: int = 8443
    tun_name: str = "anet-server"


@dataclass
class AuditConfig:
    """설정 감사 옵션"""
    placeholder_markers: list = field(default_factory=lambda: ["YOUR_SERVER_IP"])


@dataclass
class NetworkConfig:
    """연결성 체크 설정"""
    external_ip_url: str = "https://ifconfig.me"
    dns_probe_host: str = "google.com"
    timeout: int = 5


@dataclass
class LoggingConfig:
    """로깅 설정"""
    log_dir: str = "~/.anet-quickstart/logs"
    log_level: str = "INFO"


class Config:
    """전체 설정 관리 클래스"""

    DEFAULT_CONFIG_PATHS = [
        "/etc/anet-quickstart/config.yaml",
        "~/.anet-quickstart/config.yaml",
        "./anet-quickstart.yaml",
    ]

    SECTIONS = ("paths", "container", "server", "audit", "network", "logging")

    def __init__(self, config_path: Optional[str] = None):
        self.config_path = config_path
        self.paths = PathsConfig()
        self.container = ContainerConfig()
        self.server = ServerConfig()
        self.audit = AuditConfig()
        self.network = NetworkConfig()
        self.logging = LoggingConfig()

        if config_path:
            self.load(config_path)
        else:
            self._load_from_default_paths()

    def _load_from_default_paths(self):
        """기본 경로에서 설정 파일 로드"""
        for path in self.DEFAULT_CONFIG_PATHS:
            expanded_path = os.path.expanduser(path)
            if os.path.exists(expanded_path):
                self.load(expanded_path)
                return

    def load(self, path: str):
        """설정 파일 로드"""
        path = os.path.expanduser(path)
        if not os.path.exists(path):
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}

        self._update_from_dict(data)
        self.config_path = path

    def _update_from_dict(self, data: Dict[str, Any]):
        """딕셔너리에서 설정 업데이트 (알 수 없는 키는 무시)"""
        for section in self.SECTIONS:
            values = data.get(section) or {}
            target = getattr(self, section)
            for key, value in values.items():
                if hasattr(target, key):
                    setattr(target, key, value)

    def resolve(self, path: str) -> Path:
        """base_dir 기준으로 상대 경로 해석"""
        candidate = Path(os.path.expanduser(path))
        if candidate.is_absolute():
            return candidate
        return Path(os.path.expanduser(self.paths.base_dir)) / candidate

    @property
    def keys_file(self) -> Path:
        return self.resolve(self.paths.keys_file)

    @property
    def template(self) -> Path:
        return self.resolve(self.paths.template)

    @property
    def client_output(self) -> Path:
        return self.resolve(self.paths.client_output)

    @property
    def server_config(self) -> Path:
        return self.resolve(self.paths.server_config)

    @property
    def log_dir(self) -> str:
        return os.path.expanduser(self.logging.log_dir)

    def save(self, path: Optional[str] = None):
        """설정 파일 저장"""
        save_path = path or self.config_path or self.DEFAULT_CONFIG_PATHS[-1]
        save_path = os.path.expanduser(save_path)

        parent = os.path.dirname(save_path)
        if parent:
            os.makedirs(parent, exist_ok=True)

        with open(save_path, 'w', encoding='utf-8') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, allow_unicode=True)

    def to_dict(self) -> Dict[str, Any]:
        """딕셔너리로 변환"""
        return {section: asdict(getattr(self, section)) for section in self.SECTIONS}

    def create_sample(self, output_path: str):
        """샘플 설정 파일 생성"""
        template = """# anet-quickstart configuration file
# ./anet-quickstart.yaml 또는 ~/.anet-quickstart/config.yaml 로 복사하여 사용하세요

# quick_start 디렉토리 기준 경로
paths:
  base_dir: "."
  keys_file: "server/client-keys.txt"  # generate-config.sh 가 생성
  template: "client-windows/client.toml"
  client_output: "client-windows/client.toml"  # 템플릿과 같아도 됨
  server_config: "server/server.toml"
  generate_script: "generate-config.sh"

# Docker 컨테이너
container:
  name: "anet-server"
  image: "anet-server:latest"
  service: "anet-server"  # docker compose 서비스 이름
  log_tail: 30
  startup_wait: 2  # docker compose up 후 대기 시간 (초)
  command_timeout: 30

# ANet 서버
server:
  repo_url: "https://github.com/ZeroTworu/anet.git"
  source_dir: "anet"
  bind_port: 8443  # server.toml 에 bind_to 가 없을 때 사용
  tun_name: "anet-server"

# client.toml 감사
audit:
  placeholder_markers:
    - "YOUR_SERVER_IP"

# 연결성 체크
network:
  external_ip_url: "https://ifconfig.me"
  dns_probe_host: "google.com"
  timeout: 5

# 로깅
logging:
  log_dir: "~/.anet-quickstart/logs"
  log_level: "INFO"  # DEBUG, INFO, WARNING, ERROR
"""

        parent = os.path.dirname(output_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(template)

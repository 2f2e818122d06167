"""
네트워크 체크 모듈
DNS, 인터페이스, UDP 포트, 라우팅, 외부 IP 확인
"""

import subprocess
import socket
import requests
from typing import List, Optional, Tuple
from .logger import get_logger

IP_FORWARD_PATH = "/proc/sys/net/ipv4/ip_forward"


class NetworkChecker:
    """호스트 네트워크 상태 확인 클래스"""

    def __init__(self, timeout: int = 5, debug: bool = False):
        self.timeout = timeout
        self.debug = debug
        self.logger = get_logger()

    def _run(self, cmd: List[str]) -> Optional[subprocess.CompletedProcess]:
        try:
            return subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout + 5)
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            self.logger.debug(f"{cmd[0]} unavailable: {e}")
            return None

    def check_dns(self, domain: str = "google.com") -> Tuple[bool, str]:
        """DNS 조회 테스트"""
        try:
            self.logger.debug(f"Checking DNS for {domain}...")
            socket.gethostbyname(domain)
            self.logger.debug("DNS resolution successful")
            return True, f"DNS 조회 성공 ({domain})"
        except (socket.gaierror, UnicodeError):
            self.logger.warning(f"DNS resolution failed for {domain}")
            return False, f"DNS 조회 실패 ({domain})"

    def interface_exists(self, interface: str) -> bool:
        result = self._run(["ip", "link", "show", interface])
        return bool(result and result.returncode == 0)

    def list_interfaces(self) -> List[str]:
        """`ip -o link show` 출력에서 인터페이스 이름 목록"""
        result = self._run(["ip", "-o", "link", "show"])
        if not result or result.returncode != 0:
            return []
        names = []
        for line in result.stdout.splitlines():
            parts = line.split(": ")
            if len(parts) > 1:
                names.append(parts[1].split("@")[0])
        return names

    def get_interface_ip(self, interface: str) -> Optional[str]:
        """인터페이스의 IPv4 주소 (CIDR 포함)"""
        result = self._run(["ip", "addr", "show", interface])
        if not result or result.returncode != 0:
            return None
        for line in result.stdout.split('\n'):
            if 'inet ' in line:
                ip = line.strip().split()[1]
                self.logger.debug(f"Interface {interface} IP: {ip}")
                return ip
        return None

    def udp_listener(self, port: int) -> Optional[str]:
        """UDP 포트를 listen 중인 ss 출력 줄 (없으면 None)"""
        result = self._run(["ss", "-ulnp"])
        if not result or result.returncode != 0:
            return None
        for line in result.stdout.splitlines():
            if f":{port} " in line:
                return line.strip()
        return None

    def default_route(self) -> str:
        result = self._run(["ip", "route", "show", "default"])
        if not result or result.returncode != 0 or not result.stdout.strip():
            return "none"
        return result.stdout.splitlines()[0].strip()

    def ip_forward(self) -> str:
        """net.ipv4.ip_forward 값 ('1', '0' 또는 '?')"""
        try:
            with open(IP_FORWARD_PATH, "r") as f:
                return f.read().strip()
        except OSError:
            return "?"

    def external_ip(self, url: str = "https://ifconfig.me") -> Optional[str]:
        """외부 IP 조회"""
        try:
            response = requests.get(url, timeout=self.timeout)
            if response.status_code < 400 and response.text.strip():
                return response.text.strip()
            self.logger.warning(f"External IP lookup returned status {response.status_code}")
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"External IP lookup failed: {e}")
        return None

"""
방화벽 점검 모듈
iptables NAT, UFW, firewalld 규칙 확인 (변경하지 않음)
"""

import shutil
import subprocess
from typing import List, Optional
from .logger import get_logger


class FirewallInspector:
    """방화벽 상태 점검 클래스"""

    def __init__(self, debug: bool = False):
        self.debug = debug
        self.logger = get_logger()

    def _run(self, cmd: List[str]) -> Optional[subprocess.CompletedProcess]:
        try:
            return subprocess.run(cmd, capture_output=True, text=True, timeout=10)
        except (FileNotFoundError, subprocess.TimeoutExpired) as e:
            self.logger.debug(f"{cmd[0]} unavailable: {e}")
            return None

    def has_iptables(self) -> bool:
        return shutil.which("iptables") is not None

    def masquerade_rules(self) -> List[str]:
        """POSTROUTING 체인의 MASQUERADE 규칙"""
        result = self._run(["iptables", "-t", "nat", "-L", "POSTROUTING", "-n"])
        if not result or result.returncode != 0:
            return []
        return [line.strip() for line in result.stdout.splitlines() if "masquerade" in line.lower()]

    def ufw_active(self) -> bool:
        if shutil.which("ufw") is None:
            return False
        result = self._run(["ufw", "status"])
        return bool(result and "Status: active" in result.stdout)

    def ufw_has_port(self, port: int) -> bool:
        result = self._run(["ufw", "status"])
        return bool(result and str(port) in result.stdout)

    def firewalld_running(self) -> bool:
        if shutil.which("firewall-cmd") is None:
            return False
        result = self._run(["firewall-cmd", "--state"])
        return bool(result and "running" in result.stdout)

    def firewalld_has_port(self, port: int) -> bool:
        result = self._run(["firewall-cmd", "--list-ports"])
        return bool(result and str(port) in result.stdout)

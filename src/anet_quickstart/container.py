"""
Docker 컨테이너 관리 모듈
docker / docker compose CLI 호출
"""

import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .config import ContainerConfig
from .logger import get_logger


class ContainerManager:
    """anet-server 컨테이너 관리 클래스"""

    def __init__(self, config: ContainerConfig, workdir: Union[str, Path] = ".", debug: bool = False):
        self.config = config
        self.workdir = Path(workdir)
        self.debug = debug
        self.logger = get_logger()
        self._compose_cmd: Optional[List[str]] = None

    def _run(self, cmd: List[str], timeout: Optional[int] = None) -> Optional[subprocess.CompletedProcess]:
        """명령 실행 (바이너리 없음/타임아웃 시 None)"""
        try:
            self.logger.debug(f"Running: {' '.join(cmd)}")
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                cwd=str(self.workdir),
                timeout=timeout or self.config.command_timeout
            )
        except FileNotFoundError:
            self.logger.debug(f"Command not found: {cmd[0]}")
            return None
        except subprocess.TimeoutExpired:
            self.logger.warning(f"Command timed out: {' '.join(cmd)}")
            return None

    def docker_version(self) -> Optional[str]:
        """'Docker version 24.0.7, build ...' 에서 버전만 추출"""
        result = self._run(["docker", "--version"])
        if not result or result.returncode != 0:
            return None
        parts = result.stdout.split()
        return parts[2].rstrip(",") if len(parts) > 2 else result.stdout.strip()

    def daemon_reachable(self) -> bool:
        result = self._run(["docker", "info"])
        return bool(result and result.returncode == 0)

    def compose_command(self) -> Optional[List[str]]:
        """docker compose 플러그인 또는 standalone docker-compose"""
        if self._compose_cmd is None:
            result = self._run(["docker", "compose", "version"])
            if result and result.returncode == 0:
                self._compose_cmd = ["docker", "compose"]
            elif shutil.which("docker-compose"):
                self._compose_cmd = ["docker-compose"]
        return self._compose_cmd

    def compose_version(self) -> Tuple[bool, str]:
        cmd = self.compose_command()
        if cmd is None:
            return False, ""
        if cmd == ["docker-compose"]:
            return True, "standalone"
        result = self._run(cmd + ["version", "--short"])
        version = result.stdout.strip() if result and result.returncode == 0 else "(ok)"
        return True, version

    def container_status(self) -> str:
        """'docker ps -a' 상태 문자열 (컨테이너 없으면 빈 문자열)"""
        result = self._run([
            "docker", "ps", "-a",
            "--filter", f"name={self.config.name}",
            "--format", "{{.Status}}"
        ])
        if not result or result.returncode != 0:
            return ""
        return result.stdout.strip()

    def container_exists(self) -> bool:
        result = self._run([
            "docker", "ps", "-a",
            "--filter", f"name={self.config.name}",
            "--format", "{{.Names}}"
        ])
        return bool(result and self.config.name in result.stdout.split())

    def is_running(self) -> bool:
        status = self.container_status()
        return status.splitlines()[0].lower().startswith("up") if status else False

    def image_size_mb(self) -> Optional[int]:
        """이미지 크기 (MB), 이미지가 없으면 None"""
        result = self._run([
            "docker", "image", "inspect", self.config.image,
            "--format", "{{.Size}}"
        ])
        if not result or result.returncode != 0:
            return None
        try:
            return int(result.stdout.strip()) // 1048576
        except ValueError:
            return 0

    def logs(self, tail: Optional[int] = None) -> Optional[str]:
        """최근 컨테이너 로그 (compose 우선, 실패 시 docker logs)"""
        tail = str(tail or self.config.log_tail)
        cmd = self.compose_command()
        if cmd:
            result = self._run(cmd + ["logs", "--tail", tail, self.config.service])
            if result and result.returncode == 0:
                return result.stdout + result.stderr

        result = self._run(["docker", "logs", "--tail", tail, self.config.name])
        if result and result.returncode == 0:
            return result.stdout + result.stderr
        return None

    def _compose(self, *args: str, timeout: Optional[int] = None) -> Tuple[bool, str]:
        cmd = self.compose_command()
        if cmd is None:
            return False, "docker compose not found"

        self.logger.info(f"Running {' '.join(cmd + list(args))}")
        result = self._run(cmd + list(args), timeout=timeout)
        if result is None:
            return False, "docker compose 실행 실패"
        if result.returncode != 0:
            self.logger.error(f"docker compose {' '.join(args)} failed: {result.stderr.strip()}")
            return False, result.stderr.strip()
        return True, result.stdout.strip()

    def build(self) -> Tuple[bool, str]:
        """docker compose build (이미지 빌드는 오래 걸릴 수 있음)"""
        return self._compose("build", timeout=3600)

    def up(self) -> Tuple[bool, str]:
        return self._compose("up", "-d")

    def compose_running(self) -> bool:
        """compose 상태 확인 후 구버전 대비 docker ps 로 재확인"""
        cmd = self.compose_command()
        if cmd:
            result = self._run(cmd + ["ps", "--format", "{{.State}}"])
            if result and result.returncode == 0 and "running" in result.stdout:
                return True
        return self.is_running()

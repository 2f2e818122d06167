"""
설치 모듈
사전 요구사항 확인, 이미지 빌드, 서버 설정 생성, 컨테이너 시작
"""

import os
import platform
import shutil
import subprocess
import time
from typing import List, Sequence

from rich.markup import escape
from rich.table import Table

from .audit import extract_value
from .config import Config
from .container import ContainerManager
from .diagnostics import parse_bind_port
from .logger import get_logger
from .network import NetworkChecker
from .output import console, print_result
from .results import CheckResult, failed, passed, summarize, warned

TUN_DEVICE = "/dev/net/tun"
PLACEHOLDER_MARKERS = ("Содержимое cert.pem", 'server_signing_key = ""')


class InstallError(Exception):
    """설치 중단 오류"""


class Installer:
    """ANet 서버 설치 오케스트레이터"""

    def __init__(self, config: Config, debug: bool = False):
        self.config = config
        self.debug = debug
        self.logger = get_logger()
        self.workdir = config.resolve(".")
        self.container = ContainerManager(config.container, self.workdir, debug)
        self.network = NetworkChecker(config.network.timeout, debug)
        self.execution_log = []

    def log_step(self, step: str, status: str, message: str = ""):
        """실행 단계 기록"""
        self.execution_log.append({
            "step": step,
            "status": status,
            "message": message
        })

    def header(self, title: str):
        console.print(f"\n[cyan]══════ {escape(title)} ══════[/cyan]")

    def check_prerequisites(self) -> List[CheckResult]:
        """docker, docker compose, openssl, OS, 데몬 권한 확인"""
        results = []

        version = self.container.docker_version()
        if version:
            results.append(passed("docker", f"docker {version}"))
        else:
            results.append(failed("docker", "docker not found - install: https://docs.docker.com/engine/install/"))

        ok, compose_version = self.container.compose_version()
        if ok:
            results.append(passed("compose", f"docker compose {compose_version}"))
        else:
            results.append(failed(
                "compose", "docker compose not found - install: https://docs.docker.com/compose/install/"
            ))

        if shutil.which("openssl"):
            results.append(passed("openssl", "openssl found"))
        else:
            results.append(warned("openssl", "openssl not found on host (ok - container has it)"))

        system = platform.system()
        if system != "Linux":
            results.append(warned(
                "os", f"ANet Docker server requires Linux for host networking + TUN (current OS: {system})"
            ))

        if not self.container.daemon_reachable():
            results.append(failed(
                "docker_daemon", "Cannot connect to Docker daemon. Run as root or add user to docker group."
            ))

        return results

    def ensure_source(self) -> CheckResult:
        """ANet 소스 디렉토리 확인, 없으면 git clone"""
        source_dir = self.config.resolve(self.config.server.source_dir)
        if (source_dir / "Cargo.toml").is_file():
            return passed("source", f"{self.config.server.source_dir}/ directory exists")

        repo = self.config.server.repo_url
        if shutil.which("git") is None:
            return failed("source", "git not found - install git or manually clone:",
                          [f"git clone {repo} {source_dir}"])

        console.print(f"  [yellow]![/yellow] {escape(str(source_dir))} not found - cloning from {escape(repo)}")
        self.logger.info(f"Cloning {repo} into {source_dir}")
        result = subprocess.run(["git", "clone", repo, str(source_dir)], capture_output=True, text=True)
        if result.returncode != 0:
            self.logger.error(f"git clone failed: {result.stderr.strip()}")
            return failed("source", f"git clone failed: {result.stderr.strip()}")
        return passed("source", "Cloned anet repository")

    def check_tun(self) -> CheckResult:
        if os.path.exists(TUN_DEVICE):
            return passed("tun", f"{TUN_DEVICE} exists")
        return warned(
            "tun", f"{TUN_DEVICE} not found - server needs TUN support in kernel",
            ["Try: mkdir -p /dev/net && mknod /dev/net/tun c 10 200 && chmod 666 /dev/net/tun"]
        )

    def enable_ip_forward(self) -> CheckResult:
        try:
            result = subprocess.run(
                ["sysctl", "-w", "net.ipv4.ip_forward=1"],
                capture_output=True, text=True, timeout=10
            )
        except (FileNotFoundError, subprocess.TimeoutExpired):
            result = None
        if result and result.returncode == 0:
            return passed("ip_forward", "net.ipv4.ip_forward=1")
        return warned("ip_forward", "Could not set ip_forward (run as root)")

    def server_config_needs_generation(self) -> bool:
        """server.toml 이 없거나 플레이스홀더 값만 있는 경우"""
        path = self.config.server_config
        if not path.is_file():
            return True
        text = path.read_text(encoding="utf-8", errors="replace")
        return any(marker in text for marker in PLACEHOLDER_MARKERS)

    def bind_port(self) -> int:
        """server.toml 의 bind_to 포트 (없으면 기본값)"""
        path = self.config.server_config
        if path.is_file():
            text = path.read_text(encoding="utf-8", errors="replace")
            port = parse_bind_port(extract_value(text, "bind_to"))
            if port:
                return port
        return self.config.server.bind_port

    def generate_server_config(self, args: Sequence[str]) -> CheckResult:
        """배포본의 generate-config.sh 실행"""
        script = self.config.resolve(self.config.paths.generate_script)
        if not script.is_file():
            return failed("server_config", f"{script} not found")

        self.logger.info(f"Running {script} {' '.join(args)}")
        result = subprocess.run(["bash", str(script), *args], cwd=str(self.workdir))
        if result.returncode != 0:
            return failed("server_config", f"{script.name} exited with code {result.returncode}")
        return passed("server_config", "server.toml generated")

    def _require(self, step: str, result: CheckResult):
        print_result(result)
        self.log_step(step, "failed" if result.failed else "success", result.message)
        if result.failed:
            raise InstallError(result.message)

    def show_summary(self):
        """실행 결과 요약 표시"""
        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("단계", style="cyan", width=24)
        table.add_column("상태", width=6)
        table.add_column("메시지")

        for log in self.execution_log:
            status_icon = "✓" if log["status"] == "success" else "✗"
            status_color = "green" if log["status"] == "success" else "red"
            table.add_row(
                log["step"],
                f"[{status_color}]{status_icon}[/{status_color}]",
                escape(log["message"])
            )

        console.print(table)

    def run(self, generate_args: Sequence[str] = ()) -> bool:
        """설치 실행"""
        self.logger.info("=== Install started ===")
        try:
            self.header("Checking prerequisites")
            prerequisites = self.check_prerequisites()
            for result in prerequisites:
                print_result(result)
            if not summarize(prerequisites).ok:
                self.log_step("사전 요구사항", "failed", "누락된 항목 있음")
                raise InstallError("Missing prerequisites. Fix the issues above and re-run.")
            self.log_step("사전 요구사항", "success", "완료")

            self.header("Checking ANet source")
            self._require("ANet 소스", self.ensure_source())

            self.header("Checking TUN device")
            print_result(self.check_tun())

            self.header("Enabling IPv4 forwarding")
            print_result(self.enable_ip_forward())

            self.header("Building Docker image")
            ok, msg = self.container.build()
            self._require("이미지 빌드", passed("build", "Image built successfully") if ok
                          else failed("build", f"docker compose build failed: {msg}"))

            self.header("Checking configuration")
            if self.server_config_needs_generation():
                console.print("  [yellow]![/yellow] server.toml missing or has placeholder values - generating")
                self._require("서버 설정", self.generate_server_config(generate_args))
            else:
                print_result(passed("server_config", "server.toml exists with configured keys"))
                self.log_step("서버 설정", "success", "기존 설정 사용")

            self.header("Starting ANet server")
            ok, msg = self.container.up()
            if ok:
                time.sleep(self.config.container.startup_wait)
            if not ok or not self.container.compose_running():
                logs = self.container.logs(tail=20) or ""
                self._require("컨테이너 시작", failed(
                    "start", "Container failed to start", ["Last 20 log lines:"] + logs.splitlines()
                ))
            self._require("컨테이너 시작", passed("start", "Container is running"))

            time.sleep(1)
            port = self.bind_port()
            if self.network.udp_listener(port):
                print_result(passed("udp_port", f"Port {port}/UDP is listening"))
            else:
                print_result(warned("udp_port", f"Port {port}/UDP not detected yet - server may still be starting"))

            self.header("Installation complete")
            self.show_summary()
            console.print(f"[green]Server is running on port {port}/UDP[/green]")
            console.print("  docker compose logs -f anet-server    # live logs")
            console.print("  anet-quickstart diagnose              # diagnostics")
            self.logger.info("=== Install completed successfully ===")
            return True

        except InstallError as e:
            console.print(f"\n[red]설치 실패: {escape(str(e))}[/red]")
            self.logger.error(f"Install failed: {e}")
            self.show_summary()
            return False

        except KeyboardInterrupt:
            console.print("\n[yellow]사용자에 의해 중단되었습니다.[/yellow]")
            self.logger.warning("Install interrupted by user")
            return False

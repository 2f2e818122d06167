#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
anet-quickstart - 서버 진단 모듈

이 모듈은 다음 항목을 점검합니다:
- Docker 설치, 데몬, 컨테이너 및 이미지 상태
- server.toml 키/인증서/클라이언트 설정
- UDP 포트, TUN 인터페이스, 라우팅, IP 포워딩
- iptables NAT 및 UFW/firewalld 규칙
- 최근 컨테이너 로그의 오류
- 외부 IP 및 DNS 연결성
"""

import json
import platform
import re
import socket
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional

from .audit import extract_value
from .config import Config
from .container import ContainerManager
from .firewall import FirewallInspector
from .logger import get_logger
from .network import NetworkChecker
from .results import CheckResult, Summary, failed, passed, summarize, warned

LOG_ERROR_PATTERN = re.compile(r"error|panic|fatal|invalid", re.IGNORECASE)
FINGERPRINT_PATTERN = re.compile(r'"[A-Za-z0-9+/=]{10,}"')


def count_allowed_clients(text: str) -> int:
    """allowed_clients 배열 안의 지문(fingerprint) 개수"""
    count = 0
    inside = False
    for line in text.splitlines():
        if not inside and "allowed_clients" in line:
            inside = True
        if inside:
            if FINGERPRINT_PATTERN.search(line):
                count += 1
            if "]" in line:
                break
    return count


def parse_bind_port(bind_to: str) -> Optional[int]:
    """'0.0.0.0:8443' → 8443"""
    _, sep, port = bind_to.rpartition(":")
    if sep and port.isdigit():
        return int(port)
    return None


class Diagnostics:
    """ANet 서버 진단 클래스"""

    def __init__(self, config: Config, debug: bool = False):
        """
        Args:
            config: 전체 설정
            debug: 디버그 모드
        """
        self.config = config
        self.logger = get_logger()
        self.container = ContainerManager(config.container, config.resolve("."), debug)
        self.network = NetworkChecker(config.network.timeout, debug)
        self.firewall = FirewallInspector(debug)
        self.bind_port = config.server.bind_port
        self.tun_name = config.server.tun_name
        self._server_text: Optional[str] = None

    def host_info(self) -> Dict[str, str]:
        return {
            "host": socket.gethostname() or "unknown",
            "kernel": platform.release() or "unknown",
            "date": datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M UTC"),
        }

    def run_all(self) -> Dict[str, List[CheckResult]]:
        """모든 섹션 점검

        Returns:
            Dict: 섹션 이름 → 체크 결과 목록 (실행 순서 유지)
        """
        self.logger.info("Starting diagnostics")
        sections = {
            "Docker": self.check_docker(),
            "Configuration": self.check_configuration(),
            "Network": self.check_network(),
            "Firewall / NAT": self.check_firewall(),
            f"Container logs (last {self.config.container.log_tail} lines)": self.check_container_logs(),
            "Connectivity": self.check_connectivity(),
        }
        summary = self.summary(sections)
        self.logger.info(
            f"Diagnostics finished: {summary.passed} passed, "
            f"{summary.warnings} warnings, {summary.failed} failed"
        )
        return sections

    @staticmethod
    def summary(sections: Dict[str, List[CheckResult]]) -> Summary:
        return summarize(result for results in sections.values() for result in results)

    def check_docker(self) -> List[CheckResult]:
        results = []

        version = self.container.docker_version()
        if version:
            results.append(passed("docker", f"Docker installed: {version}"))
        else:
            results.append(failed("docker", "Docker not found"))

        if self.container.daemon_reachable():
            results.append(passed("docker_daemon", "Docker daemon is reachable"))
        else:
            results.append(failed("docker_daemon", "Cannot connect to Docker daemon"))

        name = self.config.container.name
        status = self.container.container_status()
        if not status:
            results.append(failed(
                "container", f"Container '{name}' does not exist (run: docker compose up -d)"
            ))
        elif "up" in status.lower():
            results.append(passed("container", f"Container running: {status.splitlines()[0]}"))
        else:
            results.append(failed(
                "container", f"Container exists but not running: {status}",
                ["Try: docker compose up -d"]
            ))

        image = self.config.container.image
        size = self.container.image_size_mb()
        if size is None:
            results.append(warned("image", f"Image {image} not found (run: docker compose build)"))
        else:
            results.append(passed("image", f"Image {image} ({size} MB)"))

        return results

    def _read_server_config(self) -> Optional[str]:
        if self._server_text is None:
            path = self.config.server_config
            if path.is_file():
                self._server_text = path.read_text(encoding="utf-8", errors="replace")
        return self._server_text

    def check_configuration(self) -> List[CheckResult]:
        path = self.config.server_config
        text = self._read_server_config()
        if text is None:
            return [failed("server_config", f"server.toml not found at {path}")]

        results = [passed("server_config", f"server.toml exists: {path}")]

        signing_key = extract_value(text, "server_signing_key")
        if signing_key:
            results.append(passed("signing_key", f"server_signing_key is set ({len(signing_key)} chars)"))
        else:
            results.append(failed("signing_key", "server_signing_key is empty"))

        if "BEGIN CERTIFICATE" in text:
            results.append(passed("quic_cert", "quic_cert contains a certificate"))
        else:
            results.append(failed("quic_cert", "quic_cert is missing or placeholder"))

        if "BEGIN PRIVATE KEY" in text or "BEGIN RSA PRIVATE KEY" in text:
            results.append(passed("quic_key", "quic_key contains a private key"))
        else:
            results.append(failed("quic_key", "quic_key is missing or placeholder"))

        fingerprints = count_allowed_clients(text)
        if fingerprints > 0:
            results.append(passed("allowed_clients", f"allowed_clients: {fingerprints} client(s) configured"))
        else:
            results.append(warned(
                "allowed_clients", "allowed_clients is empty - no clients will be able to connect"
            ))

        external_if = extract_value(text, "external_if")
        if not external_if:
            results.append(warned("external_if", "external_if not set in config"))
        elif self.network.interface_exists(external_if):
            results.append(passed("external_if", f'external_if = "{external_if}" (interface exists)'))
        else:
            available = " ".join(self.network.list_interfaces())
            results.append(failed(
                "external_if", f'external_if = "{external_if}" but interface NOT found on host',
                [f"Available interfaces: {available}"]
            ))

        bind_to = extract_value(text, "bind_to")
        if bind_to:
            results.append(passed("bind_to", f'bind_to = "{bind_to}"'))
            self.bind_port = parse_bind_port(bind_to) or self.bind_port

        if_name = extract_value(text, "if_name")
        if if_name:
            self.tun_name = if_name

        return results

    def check_network(self) -> List[CheckResult]:
        results = []
        port = self.bind_port

        listener = self.network.udp_listener(port)
        if listener:
            results.append(passed("udp_port", f"Port {port}/UDP is listening", [listener]))
        else:
            results.append(failed("udp_port", f"Port {port}/UDP is NOT listening"))

        if self.network.interface_exists(self.tun_name):
            tun_ip = self.network.get_interface_ip(self.tun_name) or "none"
            results.append(passed("tun", f"TUN interface '{self.tun_name}' exists (IP: {tun_ip})"))
        else:
            results.append(warned(
                "tun", f"TUN interface '{self.tun_name}' not found (normal if no clients connected yet)"
            ))

        results.append(passed("default_route", f"Default route: {self.network.default_route()}"))

        ip_forward = self.network.ip_forward()
        if ip_forward == "1":
            results.append(passed("ip_forward", "IPv4 forwarding enabled"))
        else:
            results.append(warned(
                "ip_forward",
                f"IPv4 forwarding is OFF (ip_forward={ip_forward}) - server enables it on client connect"
            ))

        return results

    def check_firewall(self) -> List[CheckResult]:
        results = []
        port = self.bind_port

        if self.firewall.has_iptables():
            rules = self.firewall.masquerade_rules()
            if rules:
                results.append(passed("masquerade", "MASQUERADE rules found in iptables:", rules))
            else:
                results.append(warned(
                    "masquerade", "No MASQUERADE rules in iptables (server adds them on client connect)"
                ))
        else:
            results.append(warned("masquerade", "iptables not found on host"))

        if self.firewall.ufw_active():
            if self.firewall.ufw_has_port(port):
                results.append(passed("ufw", f"UFW: port {port} rule found"))
            else:
                results.append(warned(
                    "ufw", f"UFW is active but no rule for port {port}/udp",
                    [f"Fix: sudo ufw allow {port}/udp"]
                ))

        if self.firewall.firewalld_running():
            if self.firewall.firewalld_has_port(port):
                results.append(passed("firewalld", f"firewalld: port {port} is open"))
            else:
                results.append(warned(
                    "firewalld", f"firewalld is running but port {port}/udp may not be open",
                    [f"Fix: sudo firewall-cmd --add-port={port}/udp --permanent && sudo firewall-cmd --reload"]
                ))

        return results

    def check_container_logs(self) -> List[CheckResult]:
        if not self.container.container_exists():
            return [warned("logs", "Container not found - cannot read logs")]

        logs = self.container.logs()
        if logs is None:
            return [warned("logs", "Could not read container logs")]

        lines = logs.splitlines()
        error_lines = [line for line in lines if LOG_ERROR_PATTERN.search(line)]
        tail = lines[-15:]
        if error_lines:
            return [failed(
                "logs", f"Found {len(error_lines)} error line(s) in recent logs:",
                error_lines[-5:] + [""] + tail
            )]
        return [passed("logs", "No errors in recent logs", tail)]

    def check_connectivity(self) -> List[CheckResult]:
        results = []

        external_ip = self.network.external_ip(self.config.network.external_ip_url)
        if external_ip:
            results.append(passed("external_ip", f"External IP: {external_ip}"))
        else:
            results.append(warned(
                "external_ip", "Could not determine external IP (no internet or lookup blocked)"
            ))

        ok, _ = self.network.check_dns(self.config.network.dns_probe_host)
        if ok:
            results.append(passed("dns", "DNS resolution works"))
        else:
            results.append(warned("dns", "DNS resolution failed (may not affect server operation)"))

        return results

    def save_report(self, sections: Dict[str, List[CheckResult]], output_dir: str) -> Path:
        """진단 결과를 JSON 파일로 저장

        Args:
            sections: run_all() 결과
            output_dir: 저장 디렉토리

        Returns:
            Path: 저장된 파일 경로
        """
        summary = self.summary(sections)
        report = {
            "timestamp": datetime.now().isoformat(),
            "host": self.host_info(),
            "sections": {
                name: [result.to_dict() for result in results]
                for name, results in sections.items()
            },
            "summary": {
                "passed": summary.passed,
                "warnings": summary.warnings,
                "failed": summary.failed,
            },
            "overall_status": "healthy" if summary.ok else "unhealthy",
        }

        directory = Path(output_dir)
        directory.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        report_file = directory / f"diagnose_report_{timestamp}.json"

        with open(report_file, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)

        self.logger.info(f"Diagnose report saved: {report_file}")
        return report_file

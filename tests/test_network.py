"""
네트워크 체커 모듈 테스트
"""

import socket
import subprocess

import requests

from anet_quickstart import network
from anet_quickstart.network import NetworkChecker

SS_OUTPUT = """State  Recv-Q Send-Q Local Address:Port  Peer Address:Port Process
UNCONN 0      0            0.0.0.0:8443       0.0.0.0:*     users:(("anet-server",pid=42,fd=9))
UNCONN 0      0            0.0.0.0:84430      0.0.0.0:*
"""


def test_check_dns(monkeypatch):
    """DNS 체크 테스트"""
    monkeypatch.setattr(socket, "gethostbyname", lambda host: "142.250.0.1")
    success, msg = NetworkChecker().check_dns("google.com")
    assert success
    assert "DNS" in msg


def test_check_dns_failure(monkeypatch):
    def fail(host):
        raise socket.gaierror("no such host")

    monkeypatch.setattr(socket, "gethostbyname", fail)
    success, _ = NetworkChecker().check_dns("invalid.example")
    assert not success


def test_udp_listener(monkeypatch):
    monkeypatch.setattr(subprocess, "run",
                        lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 0, SS_OUTPUT, ""))
    checker = NetworkChecker()
    assert "anet-server" in checker.udp_listener(8443)
    assert checker.udp_listener(8444) is None


def test_missing_tools_are_not_fatal(monkeypatch):
    def missing(*args, **kwargs):
        raise FileNotFoundError("ip")

    monkeypatch.setattr(subprocess, "run", missing)
    checker = NetworkChecker()
    assert checker.interface_exists("eth0") is False
    assert checker.get_interface_ip("eth0") is None
    assert checker.default_route() == "none"
    assert checker.list_interfaces() == []


def test_interface_ip(monkeypatch):
    output = "3: anet0: <POINTOPOINT,UP>\n    inet 10.8.0.1/24 scope global anet0\n"
    monkeypatch.setattr(subprocess, "run",
                        lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 0, output, ""))
    assert NetworkChecker().get_interface_ip("anet0") == "10.8.0.1/24"


def test_ip_forward(tmp_path, monkeypatch):
    flag = tmp_path / "ip_forward"
    flag.write_text("1\n")
    monkeypatch.setattr(network, "IP_FORWARD_PATH", str(flag))
    assert NetworkChecker().ip_forward() == "1"

    monkeypatch.setattr(network, "IP_FORWARD_PATH", str(tmp_path / "missing"))
    assert NetworkChecker().ip_forward() == "?"


def test_external_ip(monkeypatch):
    class Response:
        status_code = 200
        text = "198.51.100.7\n"

    monkeypatch.setattr(requests, "get", lambda url, timeout: Response())
    assert NetworkChecker().external_ip("https://ifconfig.me") == "198.51.100.7"


def test_external_ip_offline(monkeypatch):
    def offline(url, timeout):
        raise requests.exceptions.ConnectionError("offline")

    monkeypatch.setattr(requests, "get", offline)
    assert NetworkChecker().external_ip() is None

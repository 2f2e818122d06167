"""
설치 모듈 테스트
"""

import subprocess

import pytest

from anet_quickstart.config import Config
from anet_quickstart.installer import Installer
from anet_quickstart.results import FAIL, PASS


@pytest.fixture
def installer(tmp_path):
    (tmp_path / "server").mkdir()
    config = Config(None)
    config.paths.base_dir = str(tmp_path)
    config.container.startup_wait = 0
    return Installer(config)


def test_server_config_needs_generation(installer):
    path = installer.config.server_config
    assert installer.server_config_needs_generation()

    path.write_text('server_signing_key = ""\n', encoding="utf-8")
    assert installer.server_config_needs_generation()

    path.write_text('server_signing_key = "c2lnbmluZw=="\nbind_to = "0.0.0.0:9443"\n', encoding="utf-8")
    assert not installer.server_config_needs_generation()
    assert installer.bind_port() == 9443


def test_bind_port_default(installer):
    assert installer.bind_port() == 8443


def test_prerequisites_without_docker(installer, monkeypatch):
    def missing(*args, **kwargs):
        raise FileNotFoundError("docker")

    monkeypatch.setattr(subprocess, "run", missing)
    monkeypatch.setattr("anet_quickstart.container.shutil.which", lambda name: None)

    results = {r.name: r.status for r in installer.check_prerequisites()}
    assert results["docker"] == FAIL
    assert results["compose"] == FAIL
    assert results["docker_daemon"] == FAIL


def test_run_stops_on_missing_prerequisites(installer, monkeypatch):
    def missing(*args, **kwargs):
        raise FileNotFoundError("docker")

    monkeypatch.setattr(subprocess, "run", missing)
    monkeypatch.setattr("anet_quickstart.container.shutil.which", lambda name: None)

    assert installer.run() is False
    assert installer.execution_log[-1]["status"] == "failed"


def test_ensure_source_existing_checkout(installer):
    source = installer.config.resolve(installer.config.server.source_dir)
    source.mkdir()
    (source / "Cargo.toml").write_text("[package]\n", encoding="utf-8")
    assert installer.ensure_source().status == PASS


def test_generate_server_config_missing_script(installer):
    result = installer.generate_server_config(["--clients", "2"])
    assert result.status == FAIL
    assert "generate-config.sh" in result.message

"""
설정 렌더러 테스트
"""

import os
import signal

import pytest

from anet_quickstart.errors import UnreadableFile
from anet_quickstart.render import read_text, render, write_atomic

from conftest import CLIENT1_KEY, SERVER_KEY, TEMPLATE


def test_render_replaces_recognized_lines():
    text = render(TEMPLATE, "203.0.113.5:8443", CLIENT1_KEY, SERVER_KEY)
    lines = text.splitlines()
    assert 'address = "203.0.113.5:8443"' in lines
    assert f'private_key = "{CLIENT1_KEY}"' in lines
    assert f'server_pub_key = "{SERVER_KEY}"' in lines


def test_render_preserves_other_lines_and_order():
    text = render(TEMPLATE, "203.0.113.5:8443", CLIENT1_KEY, SERVER_KEY)
    original = TEMPLATE.splitlines()
    rendered = text.splitlines()
    assert len(original) == len(rendered)
    for before, after in zip(original, rendered):
        if not before.startswith(("address", "private_key", "server_pub_key")):
            assert before == after


def test_render_requires_line_prefix():
    """들여쓰기되었거나 따옴표가 없는 줄은 교체하지 않음"""
    template = '  address = "x"\naddress = 5\n# private_key = "old"\nserver_pub_key = "old"\n'
    text = render(template, "1.2.3.4:1", CLIENT1_KEY, SERVER_KEY)
    assert text == f'  address = "x"\naddress = 5\n# private_key = "old"\nserver_pub_key = "{SERVER_KEY}"\n'


def test_render_keeps_line_endings():
    template = 'address = ""\r\nmtu = 1400\r\nprivate_key = ""'
    text = render(template, "1.2.3.4:1", CLIENT1_KEY, SERVER_KEY)
    assert text == f'address = "1.2.3.4:1"\r\nmtu = 1400\r\nprivate_key = "{CLIENT1_KEY}"'


def test_write_atomic_same_path_as_source(tmp_path):
    """템플릿 경로에 그대로 덮어써도 내용이 잘리지 않음"""
    aliased = tmp_path / "client.toml"
    aliased.write_text(TEMPLATE, encoding="utf-8")
    separate = tmp_path / "out" / "client.toml"

    expected = render(TEMPLATE, "203.0.113.5:8443", CLIENT1_KEY, SERVER_KEY)
    write_atomic(separate, expected)
    write_atomic(aliased, render(aliased.read_text(encoding="utf-8"), "203.0.113.5:8443",
                                 CLIENT1_KEY, SERVER_KEY))

    assert aliased.read_bytes() == separate.read_bytes()
    assert aliased.read_bytes() == expected.encode("utf-8")


def test_write_atomic_leaves_no_temp_files(tmp_path):
    target = tmp_path / "client.toml"
    write_atomic(target, "address = \"x\"\n")
    assert os.listdir(tmp_path) == ["client.toml"]


def test_write_atomic_cleans_up_on_failure(tmp_path, monkeypatch):
    target = tmp_path / "client.toml"
    target.write_text("original", encoding="utf-8")

    def broken_replace(src, dst):
        raise OSError("rename failed")

    monkeypatch.setattr("anet_quickstart.render.os.replace", broken_replace)
    with pytest.raises(OSError):
        write_atomic(target, "new content")

    assert target.read_text(encoding="utf-8") == "original"
    assert os.listdir(tmp_path) == ["client.toml"]


def test_write_atomic_cleans_up_on_sigterm(tmp_path, monkeypatch):
    """SIGTERM 으로 중단되어도 임시 파일이 남지 않고 원본 유지"""
    target = tmp_path / "client.toml"
    target.write_text("original", encoding="utf-8")
    handler = signal.getsignal(signal.SIGTERM)

    def terminated_replace(src, dst):
        os.kill(os.getpid(), signal.SIGTERM)

    monkeypatch.setattr("anet_quickstart.render.os.replace", terminated_replace)
    with pytest.raises(SystemExit) as exc:
        write_atomic(target, "new content")

    assert exc.value.code == 128 + signal.SIGTERM
    assert target.read_text(encoding="utf-8") == "original"
    assert os.listdir(tmp_path) == ["client.toml"]
    assert signal.getsignal(signal.SIGTERM) == handler


def test_read_text_rejects_invalid_utf8(tmp_path):
    path = tmp_path / "client-keys.txt"
    path.write_bytes(b"\xff\xfe garbage")
    with pytest.raises(UnreadableFile) as exc:
        read_text(path)
    assert "not valid UTF-8" in str(exc.value)
    assert str(path) in str(exc.value)


def test_read_text_missing_file_is_not_converted(tmp_path):
    with pytest.raises(FileNotFoundError):
        read_text(tmp_path / "missing.txt")

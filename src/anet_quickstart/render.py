"""
클라이언트 설정 렌더러
client.toml 템플릿의 address / private_key / server_pub_key 줄 치환
"""

import os
import signal
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Optional, Union

from .errors import UnreadableFile

RECOGNIZED_FIELDS = ("address", "private_key", "server_pub_key")


def read_text(path: Union[str, Path], newline: Optional[str] = None) -> str:
    """UTF-8 텍스트 파일 읽기

    파일이 없으면 FileNotFoundError 를 그대로 전달하고,
    그 외 읽기 실패는 UnreadableFile 로 변환한다.
    """
    try:
        with open(path, "r", encoding="utf-8", newline=newline) as f:
            return f.read()
    except FileNotFoundError:
        raise
    except UnicodeDecodeError as e:
        raise UnreadableFile(path, f"not valid UTF-8 ({e.reason} at byte {e.start})") from e
    except OSError as e:
        raise UnreadableFile(path, e.strerror or str(e)) from e


def render(template_text: str, address: str, private_key: str, server_pub_key: str) -> str:
    """템플릿 렌더링

    `<field> = "` 로 시작하는 줄만 교체하고 나머지 줄(주석, 섹션, 기타 설정)은
    순서 그대로 유지한다. 값은 이스케이프 없이 그대로 삽입된다.
    """
    values: Dict[str, str] = {
        "address": address,
        "private_key": private_key,
        "server_pub_key": server_pub_key,
    }

    output = []
    for line in template_text.split("\n"):
        for name in RECOGNIZED_FIELDS:
            if line.startswith(f'{name} = "'):
                cr = "\r" if line.endswith("\r") else ""
                line = f'{name} = "{values[name]}"{cr}'
                break
        output.append(line)

    return "\n".join(output)


def _raise_exit(signum, frame):
    raise SystemExit(128 + signum)


@contextmanager
def terminate_as_exit():
    """SIGTERM 을 SystemExit 로 바꿔 finally 블록이 실행되도록 함

    시그널 핸들러는 메인 스레드에서만 설치할 수 있으므로 그 외에는 아무것도 하지 않는다.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = signal.signal(signal.SIGTERM, _raise_exit)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


def write_atomic(path: Union[str, Path], text: str) -> Path:
    """임시 파일에 먼저 기록한 뒤 rename

    템플릿과 출력 경로가 같아도 읽기 전에 잘리지 않는다.
    임시 파일은 예외, Ctrl-C, SIGTERM 으로 중단되어도 정리된다.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with terminate_as_exit():
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(text)
            if path.exists():
                os.chmod(tmp_name, path.stat().st_mode & 0o777)
            os.replace(tmp_name, path)
        finally:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)

    return path

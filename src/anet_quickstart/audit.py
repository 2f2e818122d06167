"""
설정 감사 모듈
생성된 client.toml 및 client-keys.txt 를 생성 시와 동일한 규칙으로 재검증
"""

from dataclasses import dataclass, field
from typing import Iterable, List

from .errors import DecodedLengthMismatch, KeyStoreError
from .keys import validate_ed25519
from .keystore import select_client
from .results import CheckResult, Summary, failed, passed, summarize, warned

DEFAULT_PLACEHOLDER_MARKERS = ("YOUR_SERVER_IP",)


@dataclass
class AuditReport:
    """감사 결과"""
    source: str
    results: List[CheckResult] = field(default_factory=list)

    @property
    def summary(self) -> Summary:
        return summarize(self.results)

    @property
    def ok(self) -> bool:
        return self.summary.ok


def extract_value(text: str, key: str) -> str:
    """`key = "value"` 형태의 첫 번째 줄에서 값 추출

    키가 처음 나오는 줄만 보며, 그 줄에 따옴표 값이 없으면 빈 문자열을 반환한다.
    """
    for line in text.split("\n"):
        name, sep, rest = line.partition("=")
        if not sep or name.strip() != key:
            continue
        rest = rest.strip()
        if not rest.startswith('"'):
            return ""
        closing = rest.find('"', 1)
        if closing < 0:
            return ""
        return rest[1:closing].replace("\r", "")
    return ""


def check_key(name: str, value: str, label: str = "") -> CheckResult:
    """키 필드 검증 (비어 있음과 길이 불일치를 구분)"""
    label = label or name
    if not value:
        return failed(name, f"{label} is empty")
    try:
        validate_ed25519(value, label)
    except DecodedLengthMismatch as e:
        return failed(name, f"{label}: decodes to {e.actual} bytes (expected {e.expected}). "
                            f"Length {e.length} chars.")
    return passed(name, f"{label}: {len(value)} chars, decodes to 32 bytes (Ed25519)")


def check_address(value: str, placeholder_markers: Iterable[str] = DEFAULT_PLACEHOLDER_MARKERS) -> List[CheckResult]:
    if not value:
        return [failed("address", "address is empty")]

    results = [passed("address", f'address = "{value}"')]
    for marker in placeholder_markers:
        if marker in value:
            results.append(warned(
                "address",
                f"address contains placeholder {marker} - replace with real server IP"
            ))
    return results


def audit_config(text: str, source: str = "",
                 placeholder_markers: Iterable[str] = DEFAULT_PLACEHOLDER_MARKERS) -> AuditReport:
    """client.toml 감사

    세 필드가 모두 통과해야 성공. 플레이스홀더 경고는 결과에 영향 없음.
    """
    report = AuditReport(source=source)
    report.results.extend(check_address(extract_value(text, "address"), placeholder_markers))
    report.results.append(check_key("private_key", extract_value(text, "private_key")))
    report.results.append(check_key("server_pub_key", extract_value(text, "server_pub_key")))
    return report


def audit_keystore(text: str, ordinal: int, source: str = "") -> AuditReport:
    """client-keys.txt 에서 특정 클라이언트 키 감사"""
    report = AuditReport(source=source)
    try:
        keys = select_client(text, ordinal)
    except KeyStoreError as e:
        report.results.append(failed("keystore", str(e)))
        return report

    report.results.append(check_key("server_pub_key", keys.server_public_key, "server_pub_key (header)"))
    report.results.append(check_key("private_key", keys.private_key, f"private_key (Client #{ordinal})"))

    label = "server_pub_key (block)" if keys.server_pub_key_override else "server_pub_key (inherited)"
    report.results.append(check_key("server_pub_key", keys.server_pub_key, label))
    return report

"""
체크 결과 모델
각 체크는 CheckResult 를 반환하고 summarize() 가 합산한다
"""

from dataclasses import dataclass, field, asdict
from typing import Dict, Iterable, List

PASS = "pass"
WARN = "warn"
FAIL = "fail"


@dataclass
class CheckResult:
    """단일 체크 결과"""
    name: str
    status: str
    message: str
    details: List[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return self.status == PASS

    @property
    def failed(self) -> bool:
        return self.status == FAIL

    def to_dict(self) -> Dict:
        return asdict(self)


def passed(name: str, message: str, details: Iterable[str] = ()) -> CheckResult:
    return CheckResult(name, PASS, message, list(details))


def warned(name: str, message: str, details: Iterable[str] = ()) -> CheckResult:
    return CheckResult(name, WARN, message, list(details))


def failed(name: str, message: str, details: Iterable[str] = ()) -> CheckResult:
    return CheckResult(name, FAIL, message, list(details))


@dataclass
class Summary:
    """통과/경고/실패 집계"""
    passed: int = 0
    warnings: int = 0
    failed: int = 0

    @property
    def ok(self) -> bool:
        """경고는 전체 결과에 영향을 주지 않음"""
        return self.failed == 0


def summarize(results: Iterable[CheckResult]) -> Summary:
    summary = Summary()
    for result in results:
        if result.status == PASS:
            summary.passed += 1
        elif result.status == WARN:
            summary.warnings += 1
        elif result.status == FAIL:
            summary.failed += 1
    return summary

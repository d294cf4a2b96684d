"""Scanning statuses, status lists, filters and severity names."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

from .slices import unique_strings

__all__ = [
    "ScanningStatus",
    "ScanningSubStatus",
    "SUB_STATUS_CONFIGURATION_INFO",
    "SUB_STATUS_MANUAL_REVIEW_INFO",
    "SUB_STATUS_REQUIRES_REVIEW_INFO",
    "StatusInfo",
    "compare",
    "compare_status_and_sub_status",
    "AllLists",
    "Filters",
    "SEVERITY_CRITICAL",
    "SEVERITY_HIGH",
    "SEVERITY_MEDIUM",
    "SEVERITY_LOW",
    "SEVERITY_UNKNOWN",
    "control_severity_to_string",
    "ReportStatus",
    "ReportSummary",
]


class ScanningStatus(str, Enum):
    """Outcome of scanning a resource, control or framework."""

    UNKNOWN = ""
    PASSED = "passed"
    FAILED = "failed"
    SKIPPED = "skipped"


class ScanningSubStatus(str, Enum):
    """Refinement of a status, such as a pass that is due to an exception."""

    UNKNOWN = ""
    EXCEPTION = "w/exceptions"
    IRRELEVANT = "irrelevant"
    CONFIGURATION = "configuration"
    MANUAL_REVIEW = "manual review"
    REQUIRES_REVIEW = "requires review"
    INTEGRATION = "integration"


SUB_STATUS_CONFIGURATION_INFO = "Control configurations are empty"
SUB_STATUS_MANUAL_REVIEW_INFO = "Control type is manual review"
SUB_STATUS_REQUIRES_REVIEW_INFO = "Control type requires review"

_STATUS_RANK = {
    ScanningStatus.UNKNOWN: 0,
    ScanningStatus.PASSED: 1,
    ScanningStatus.SKIPPED: 2,
    ScanningStatus.FAILED: 3,
}


def compare(status_a: ScanningStatus | str, status_b: ScanningStatus | str) -> ScanningStatus:
    """Return the more significant of two statuses (failed > skipped > passed > unknown)."""
    a, b = ScanningStatus(status_a), ScanningStatus(status_b)
    return a if _STATUS_RANK[a] >= _STATUS_RANK[b] else b


def compare_status_and_sub_status(
    status_a: ScanningStatus | str,
    status_b: ScanningStatus | str,
    sub_status_a: ScanningSubStatus | str,
    sub_status_b: ScanningSubStatus | str,
) -> tuple[ScanningStatus, ScanningSubStatus]:
    """Combine two status/sub-status pairs.

    A passed result keeps the exception sub-status if either side has it;
    a skipped result keeps the first non-empty sub-status; a failed or
    unknown result has no sub-status.
    """
    status = compare(status_a, status_b)
    sub_a, sub_b = ScanningSubStatus(sub_status_a), ScanningSubStatus(sub_status_b)
    if status is ScanningStatus.PASSED:
        if ScanningSubStatus.EXCEPTION in (sub_a, sub_b):
            return status, ScanningSubStatus.EXCEPTION
        return status, ScanningSubStatus.UNKNOWN
    if status is ScanningStatus.SKIPPED:
        return status, sub_a if sub_a is not ScanningSubStatus.UNKNOWN else sub_b
    return status, ScanningSubStatus.UNKNOWN


@dataclass
class StatusInfo:
    """A status with its sub-status and an explanatory message."""

    inner_status: ScanningStatus = ScanningStatus.UNKNOWN
    sub_status: ScanningSubStatus = ScanningSubStatus.UNKNOWN
    inner_info: str = ""

    def __post_init__(self) -> None:
        self.inner_status = ScanningStatus(self.inner_status)
        self.sub_status = ScanningSubStatus(self.sub_status)

    def status(self) -> ScanningStatus:
        return self.inner_status

    def info(self) -> str:
        return self.inner_info

    def is_passed(self) -> bool:
        return self.inner_status is ScanningStatus.PASSED

    def is_failed(self) -> bool:
        return self.inner_status is ScanningStatus.FAILED

    def is_skipped(self) -> bool:
        return self.inner_status is ScanningStatus.SKIPPED

    def to_dict(self) -> dict[str, str]:
        """Serialise, leaving out empty fields."""
        data = {
            "status": self.inner_status.value,
            "subStatus": self.sub_status.value,
            "info": self.inner_info,
        }
        return {key: value for key, value in data.items() if value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> StatusInfo:
        data = data or {}
        return cls(
            inner_status=data.get("status") or "",
            sub_status=data.get("subStatus") or "",
            inner_info=data.get("info") or "",
        )


class AllLists:
    """IDs grouped by the status they were reported with."""

    def __init__(
        self,
        passed: Iterable[str] = (),
        failed: Iterable[str] = (),
        skipped: Iterable[str] = (),
        other: Iterable[str] = (),
    ) -> None:
        self._passed = list(passed)
        self._failed = list(failed)
        self._skipped = list(skipped)
        self._other = list(other)

    def _bucket(self, status: ScanningStatus | str) -> list[str]:
        try:
            status = ScanningStatus(status)
        except ValueError:
            return self._other
        if status is ScanningStatus.PASSED:
            return self._passed
        if status is ScanningStatus.FAILED:
            return self._failed
        if status is ScanningStatus.SKIPPED:
            return self._skipped
        return self._other

    def append(self, status: ScanningStatus | str, *args: str) -> None:
        """Add IDs to the list for ``status``; unrecognised statuses go to 'other'."""
        self._bucket(status).extend(args)

    def passed(self) -> list[str]:
        return list(self._passed)

    def failed(self) -> list[str]:
        return list(self._failed)

    def skipped(self) -> list[str]:
        return list(self._skipped)

    def other(self) -> list[str]:
        return list(self._other)

    def all(self) -> list[str]:
        """Every ID: failed, then passed, skipped and other."""
        return [*self._failed, *self._passed, *self._skipped, *self._other]

    def __iter__(self) -> Iterator[str]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._failed) + len(self._passed) + len(self._skipped) + len(self._other)

    def to_unique_resources(self) -> None:
        """Deduplicate so that each ID sits in one list only.

        Precedence: failed, then passed, then skipped, then other.
        """
        seen: set[str] = set()
        lists = []
        for values in (self._failed, self._passed, self._skipped, self._other):
            kept = [value for value in unique_strings(values) if value not in seen]
            seen.update(kept)
            lists.append(kept)
        self._failed, self._passed, self._skipped, self._other = lists

    def to_unique_controls(self) -> None:
        """Deduplicate each list on its own."""
        self._failed = unique_strings(self._failed)
        self._passed = unique_strings(self._passed)
        self._skipped = unique_strings(self._skipped)
        self._other = unique_strings(self._other)

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "passed": self.passed(),
            "failed": self.failed(),
            "skipped": self.skipped(),
            "other": self.other(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> AllLists:
        data = data or {}
        return cls(
            passed=data.get("passed") or (),
            failed=data.get("failed") or (),
            skipped=data.get("skipped") or (),
            other=data.get("other") or (),
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AllLists):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return f"AllLists({self.to_dict()!r})"


def _get(item: Any, key: str, attribute: str, default: Any = None) -> Any:
    if isinstance(item, Mapping):
        return item.get(key, default)
    return getattr(item, attribute, default)


@dataclass
class Filters:
    """Restricts results to a set of frameworks."""

    framework_names: list[str] = field(default_factory=list)

    def filter_exceptions(self, exceptions: Iterable[Any] | None) -> list[Any]:
        """Keep exceptions that apply to one of the selected frameworks.

        An exception applies when one of its posture policies names no
        framework or a selected one, or when it has no policies at all.
        With no frameworks selected every exception is kept.
        """
        exceptions = list(exceptions or ())
        if not self.framework_names:
            return exceptions
        names = set(self.framework_names)
        kept = []
        for exception in exceptions:
            policies = _get(exception, "posturePolicies", "posture_policies") or []
            if not policies or any(
                (_get(policy, "frameworkName", "framework_name") or "") in names
                or not _get(policy, "frameworkName", "framework_name")
                for policy in policies
            ):
                kept.append(exception)
        return kept


SEVERITY_CRITICAL = "Critical"
SEVERITY_HIGH = "High"
SEVERITY_MEDIUM = "Medium"
SEVERITY_LOW = "Low"
SEVERITY_UNKNOWN = "Unknown"


def control_severity_to_string(score: float) -> str:
    """Map a control score factor to its severity name."""
    if score < 1:
        return SEVERITY_UNKNOWN
    if score < 4:
        return SEVERITY_LOW
    if score < 7:
        return SEVERITY_MEDIUM
    if score < 9:
        return SEVERITY_HIGH
    return SEVERITY_CRITICAL


class ReportStatus(Protocol):
    """Something that reports an overall status."""

    def get_status(self) -> str: ...

    def passed(self) -> bool: ...

    def warning(self) -> bool: ...

    def failed(self) -> bool: ...


class ReportSummary(ReportStatus, Protocol):
    """A report status that also counts resources."""

    number_of_resources: int
    number_of_warning_resources: int
    number_of_failed_resources: int
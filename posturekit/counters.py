"""Counters of statuses, sub-statuses and severities."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from .status import (
    SEVERITY_CRITICAL,
    SEVERITY_HIGH,
    SEVERITY_LOW,
    SEVERITY_MEDIUM,
    AllLists,
    ScanningStatus,
    ScanningSubStatus,
)

__all__ = [
    "Counters",
    "PostureCounters",
    "StatusCounters",
    "SubStatusCounters",
    "SeverityCounters",
    "calculate_status",
]


class _Status(Protocol):
    def status(self) -> ScanningStatus: ...


class Counters(Protocol):
    """Read access to a set of status counters."""

    def passed(self) -> int: ...

    def skipped(self) -> int: ...

    def failed(self) -> int: ...

    def excluded(self) -> int: ...

    def all(self) -> int: ...


@dataclass
class PostureCounters:
    """Counts of posture objects (controls, frameworks) by status."""

    passed_counter: int = 0
    failed_counter: int = 0
    skipped_counter: int = 0
    excluded_counter: int = 0  # deprecated

    def passed(self) -> int:
        return self.passed_counter

    def skipped(self) -> int:
        return self.skipped_counter

    def failed(self) -> int:
        return self.failed_counter

    def excluded(self) -> int:
        return self.excluded_counter

    def all(self) -> int:
        return self.passed() + self.skipped() + self.failed()

    def increase(self, status: _Status) -> None:
        """Count one more object with the given status; unknown statuses are ignored."""
        value = status.status()
        if value is ScanningStatus.FAILED:
            self.failed_counter += 1
        elif value is ScanningStatus.PASSED:
            self.passed_counter += 1
        elif value is ScanningStatus.SKIPPED:
            self.skipped_counter += 1

    def to_dict(self) -> dict[str, int]:
        return {
            "passed": self.passed_counter,
            "failed": self.failed_counter,
            "skipped": self.skipped_counter,
            "excluded": self.excluded_counter,
        }


@dataclass
class StatusCounters:
    """Counts of resources by status."""

    passed_resources: int = 0
    failed_resources: int = 0
    skipped_resources: int = 0
    excluded_resources: int = 0  # deprecated

    def set(self, all_lists: AllLists) -> None:
        """Take the counts from the lengths of the status lists."""
        self.failed_resources = len(all_lists.failed())
        self.passed_resources = len(all_lists.passed())
        self.skipped_resources = len(all_lists.skipped())

    def passed(self) -> int:
        """Passed resources, including the deprecated excluded ones."""
        return self.passed_resources + self.excluded_resources

    def skipped(self) -> int:
        return self.skipped_resources

    def failed(self) -> int:
        return self.failed_resources

    def excluded(self) -> int:
        return self.excluded_resources

    def all(self) -> int:
        return self.failed() + self.passed() + self.skipped()

    def increase(self, status: _Status) -> None:
        """Count one more resource with the given status; unknown statuses are ignored."""
        value = status.status()
        if value is ScanningStatus.FAILED:
            self.failed_resources += 1
        elif value is ScanningStatus.PASSED:
            self.passed_resources += 1
        elif value is ScanningStatus.SKIPPED:
            self.skipped_resources += 1

    def to_dict(self) -> dict[str, int]:
        return {
            "passedResources": self.passed_resources,
            "failedResources": self.failed_resources,
            "skippedResources": self.skipped_resources,
            "excludedResources": self.excluded_resources,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> StatusCounters:
        data = data or {}
        return cls(
            passed_resources=int(data.get("passedResources") or 0),
            failed_resources=int(data.get("failedResources") or 0),
            skipped_resources=int(data.get("skippedResources") or 0),
            excluded_resources=int(data.get("excludedResources") or 0),
        )


@dataclass
class SubStatusCounters:
    """Counts of resources by sub-status."""

    ignored_resources: int = 0

    def all(self) -> int:
        return self.ignored()

    def ignored(self) -> int:
        return self.ignored_resources

    def increase(self, status: Any) -> None:
        """Count a resource that passed because of an exception."""
        if status.is_passed() and status.sub_status is ScanningSubStatus.EXCEPTION:
            self.ignored_resources += 1

    def to_dict(self) -> dict[str, int]:
        return {"ignoredResources": self.ignored_resources}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> SubStatusCounters:
        data = data or {}
        return cls(ignored_resources=int(data.get("ignoredResources") or 0))


@dataclass
class SeverityCounters:
    """Counts by severity."""

    critical: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0

    def increase(self, severity: str, amount: int) -> None:
        """Add ``amount`` to the counter of ``severity``; unknown severities are ignored."""
        if severity == SEVERITY_CRITICAL:
            self.critical += amount
        elif severity == SEVERITY_HIGH:
            self.high += amount
        elif severity == SEVERITY_MEDIUM:
            self.medium += amount
        elif severity == SEVERITY_LOW:
            self.low += amount

    def to_dict(self) -> dict[str, int]:
        return {
            "criticalSeverity": self.critical,
            "highSeverity": self.high,
            "mediumSeverity": self.medium,
            "lowSeverity": self.low,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> SeverityCounters:
        data = data or {}
        return cls(
            critical=int(data.get("criticalSeverity") or 0),
            high=int(data.get("highSeverity") or 0),
            medium=int(data.get("mediumSeverity") or 0),
            low=int(data.get("lowSeverity") or 0),
        )


def calculate_status(counters: StatusCounters) -> ScanningStatus:
    """Failed if anything failed, else skipped if anything was skipped, else passed."""
    if counters.failed():
        return ScanningStatus.FAILED
    if counters.skipped():
        return ScanningStatus.SKIPPED
    return ScanningStatus.PASSED
"""Scan summaries from the point of view of single controls and frameworks."""

from __future__ import annotations

import dataclasses
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .counters import PostureCounters, StatusCounters, SubStatusCounters, calculate_status
from .results import Result
from .status import (
    SUB_STATUS_CONFIGURATION_INFO,
    SUB_STATUS_MANUAL_REVIEW_INFO,
    SUB_STATUS_REQUIRES_REVIEW_INFO,
    AllLists,
    Filters,
    ScanningStatus,
    ScanningSubStatus,
    StatusInfo,
)

__all__ = [
    "ControlCriteria",
    "PostureAttributes",
    "ControlSummary",
    "ControlSummaries",
    "FrameworkSummary",
    "update_controls_summary_counters",
]


class ControlCriteria(str, Enum):
    """How a control is looked up in a set of control summaries."""

    ID = "ID"
    NAME = "name"  # deprecated


@dataclass
class PostureAttributes:
    """A named attribute of a posture report and its values."""

    attribute: str = ""
    values: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"attributeName": self.attribute, "values": list(self.values)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PostureAttributes:
        return cls(attribute=data.get("attributeName") or "", values=list(data.get("values") or ()))


@dataclass
class ControlSummary:
    """Summary of a scan from the point of view of one control."""

    control_id: str = ""
    name: str = ""
    status_info: StatusInfo = field(default_factory=StatusInfo)
    status: ScanningStatus = ScanningStatus.UNKNOWN  # kept for older readers
    description: str = ""
    remediation: str = ""
    resource_ids: AllLists = field(default_factory=AllLists)
    status_counters: StatusCounters = field(default_factory=StatusCounters)
    sub_status_counters: SubStatusCounters = field(default_factory=SubStatusCounters)
    score: float = 0.0
    score_factor: float = 0.0

    def __post_init__(self) -> None:
        self.status = ScanningStatus(self.status)

    def get_status(self) -> StatusInfo:
        """The control status; falls back to the older plain status field."""
        if self.status_info.status() is ScanningStatus.UNKNOWN:
            self.status_info.inner_status = self.status
        return self.status_info

    def set_status(self, status_info: StatusInfo | None) -> None:
        """Take the given status, or work it out from the counters when it is unknown."""
        if status_info is None or status_info.status() is ScanningStatus.UNKNOWN:
            self.calculate_status()
        else:
            self.status_info = dataclasses.replace(status_info)
            self.status = status_info.status()

    def set_sub_status(self, sub_status: ScanningSubStatus | str) -> None:
        self.status_info.sub_status = ScanningSubStatus(sub_status)

    def get_sub_status(self) -> ScanningSubStatus:
        return self.status_info.sub_status

    def calculate_status(self, sub_status: ScanningSubStatus | str = ScanningSubStatus.UNKNOWN) -> None:
        """Set the status from the resource counters and the sub-status from ``sub_status``."""
        self.status_info.inner_status = calculate_status(self.status_counters)
        self.status = self.status_info.status()
        self._calculate_sub_status(ScanningSubStatus(sub_status))

    def _calculate_sub_status(self, sub_status: ScanningSubStatus) -> None:
        info = self.status_info
        candidates = (sub_status, info.sub_status)
        if self.status is ScanningStatus.PASSED:
            if ScanningSubStatus.IRRELEVANT in candidates or self.status_counters.all() == 0:
                info.sub_status = ScanningSubStatus.IRRELEVANT
                info.inner_info = ""
            elif ScanningSubStatus.EXCEPTION in candidates:
                info.sub_status = ScanningSubStatus.EXCEPTION
                info.inner_info = ""
        elif self.status is ScanningStatus.SKIPPED:
            if ScanningSubStatus.CONFIGURATION in candidates:
                info.sub_status = ScanningSubStatus.CONFIGURATION
                info.inner_info = SUB_STATUS_CONFIGURATION_INFO
            elif ScanningSubStatus.MANUAL_REVIEW in candidates:
                info.sub_status = ScanningSubStatus.MANUAL_REVIEW
                info.inner_info = SUB_STATUS_MANUAL_REVIEW_INFO
            elif ScanningSubStatus.REQUIRES_REVIEW in candidates:
                info.sub_status = ScanningSubStatus.REQUIRES_REVIEW
                info.inner_info = SUB_STATUS_REQUIRES_REVIEW_INFO
        elif self.status is ScanningStatus.FAILED:
            info.sub_status = ScanningSubStatus.UNKNOWN
            info.inner_info = ""

    def list_resources_ids(self) -> AllLists:
        return self.resource_ids

    def number_of_resources(self) -> StatusCounters:
        return self.status_counters

    def statuses_counters(self) -> tuple[StatusCounters, SubStatusCounters]:
        return self.status_counters, self.sub_status_counters

    def append(self, status: StatusInfo, *args: str) -> None:
        """Record resources with the given status and update the counters."""
        for resource_id in args:
            self.resource_ids.append(status.status(), resource_id)
            self.status_counters.increase(status)
            self.sub_status_counters.increase(status)
        self.resource_ids.to_unique_resources()

    def to_dict(self) -> dict[str, Any]:
        return {
            "statusInfo": self.status_info.to_dict(),
            "controlID": self.control_id,
            "name": self.name,
            "status": self.status.value,
            "resourceIDs": self.resource_ids.to_dict(),
            "ResourceCounters": self.status_counters.to_dict(),
            "subStatusCounters": self.sub_status_counters.to_dict(),
            "score": self.score,
            "scoreFactor": self.score_factor,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ControlSummary:
        status_info = data.get("statusInfo")
        return cls(
            control_id=data.get("controlID") or "",
            name=data.get("name") or "",
            status_info=StatusInfo.from_dict(status_info if isinstance(status_info, Mapping) else None),
            status=data.get("status") or "",
            resource_ids=AllLists.from_dict(data.get("resourceIDs")),
            status_counters=StatusCounters.from_dict(data.get("ResourceCounters")),
            sub_status_counters=SubStatusCounters.from_dict(data.get("subStatusCounters")),
            score=float(data.get("score") or 0),
            score_factor=float(data.get("scoreFactor") or 0),
        )


class ControlSummaries(dict[str, ControlSummary]):
    """Control summaries keyed by control ID."""

    def get_control(self, criteria: ControlCriteria | str, value: str) -> ControlSummary | None:
        """Find a control by ID, or by a name containing ``value``; None if there is none."""
        criteria = ControlCriteria(criteria)
        if criteria is ControlCriteria.ID:
            return self.get(value)
        return next((control for control in self.values() if value in control.name), None)

    def list_controls_ids(self) -> AllLists:
        """Control IDs grouped by control status."""
        controls = AllLists()
        for control_id, summary in self.items():
            controls.append(summary.get_status().status(), control_id)
        controls.to_unique_controls()
        return controls

    def number_of_controls(self) -> PostureCounters:
        ids = self.list_controls_ids()
        return PostureCounters(
            passed_counter=len(ids.passed()),
            failed_counter=len(ids.failed()),
            skipped_counter=len(ids.skipped()),
        )

    def list_resources_ids(self) -> AllLists:
        """Resource IDs of all controls, each in the list of its worst status."""
        all_lists = AllLists()
        for control_id in self.list_controls_ids().all():
            control = self.get_control(ControlCriteria.ID, control_id)
            if control is None:
                continue
            ids = control.list_resources_ids()
            all_lists.append(ScanningStatus.FAILED, *ids.failed())
            all_lists.append(ScanningStatus.PASSED, *ids.passed())
            all_lists.append(ScanningStatus.SKIPPED, *ids.skipped())
            all_lists.append(ScanningStatus.UNKNOWN, *ids.other())
        all_lists.to_unique_resources()
        return all_lists

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {control_id: summary.to_dict() for control_id, summary in self.items()}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> ControlSummaries:
        return cls({key: ControlSummary.from_dict(value) for key, value in (data or {}).items()})


def _apply_control_info(controls: ControlSummaries, control_info_map: Mapping[str, StatusInfo] | None) -> None:
    control_info_map = control_info_map or {}
    for control in controls.values():
        info = control_info_map.get(control.control_id)
        if info is not None and info.inner_status is not ScanningStatus.UNKNOWN:
            control.set_status(info)
            control.set_sub_status(ScanningSubStatus.INTEGRATION)
        elif control.get_status().status() is ScanningStatus.UNKNOWN:
            control.calculate_status()


@dataclass
class FrameworkSummary:
    """Summary of a scan from the point of view of one framework."""

    name: str = ""
    controls: ControlSummaries = field(default_factory=ControlSummaries)
    status: ScanningStatus = ScanningStatus.UNKNOWN
    version: str = ""
    status_counters: StatusCounters = field(default_factory=StatusCounters)
    score: float = 0.0

    def __post_init__(self) -> None:
        self.status = ScanningStatus(self.status)
        if not isinstance(self.controls, ControlSummaries):
            self.controls = ControlSummaries(self.controls)

    def get_status(self) -> StatusInfo:
        """The framework status, worked out from the counters when unknown."""
        if self.status is ScanningStatus.UNKNOWN:
            self.calculate_status()
        return StatusInfo(inner_status=self.status)

    def calculate_status(self) -> None:
        self.status = calculate_status(self.status_counters)

    def number_of_resources(self) -> StatusCounters:
        return self.status_counters

    def increase(self, status: StatusInfo) -> None:
        self.status_counters.increase(status)

    def list_resources_ids(self) -> AllLists:
        return self.controls.list_resources_ids()

    def number_of_controls(self) -> PostureCounters:
        counters = PostureCounters()
        for control in self.controls.values():
            counters.increase(control.get_status())
        return counters

    def init_resources_summary(self, control_info_map: Mapping[str, StatusInfo] | None) -> None:
        """Settle control statuses, then the resource counters and the framework status.

        Controls named in ``control_info_map`` with a known status take that status
        and the integration sub-status.
        """
        _apply_control_info(self.controls, control_info_map)
        self.status_counters.set(self.list_resources_ids())
        self.calculate_status()

    def list_controls_names(self) -> AllLists:
        controls = AllLists()
        for summary in self.controls.values():
            controls.append(summary.get_status().status(), summary.name)
        controls.to_unique_controls()
        return controls

    def list_controls_ids(self) -> AllLists:
        return self.controls.list_controls_ids()

    def list_controls(self) -> list[ControlSummary]:
        """Control summaries ordered as their IDs are listed by status."""
        found = (self.controls.get_control(ControlCriteria.ID, cid) for cid in self.list_controls_ids().all())
        return [control for control in found if control is not None]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.controls:
            data["controls"] = self.controls.to_dict()
        data.update(
            {
                "name": self.name,
                "status": self.status.value,
                "version": self.version,
                "ResourceCounters": self.status_counters.to_dict(),
                "score": self.score,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> FrameworkSummary:
        return cls(
            name=data.get("name") or "",
            controls=ControlSummaries.from_dict(data.get("controls")),
            status=data.get("status") or "",
            version=data.get("version") or "",
            status_counters=StatusCounters.from_dict(data.get("ResourceCounters")),
            score=float(data.get("score") or 0),
        )


def update_controls_summary_counters(
    result: Result, controls: dict[str, ControlSummary], filters: Filters | None = None
) -> None:
    """Add a resource result to the summaries of the controls it was tested against."""
    for associated in result.associated_controls:
        summary = controls.get(associated.control_id)
        if summary is None:
            continue
        sub_status = associated.get_sub_status()
        status = associated.get_status(filters)
        summary.append(status, result.resource_id)
        summary.calculate_status(sub_status)
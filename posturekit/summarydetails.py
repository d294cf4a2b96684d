"""The detailed summary of a whole scan: controls, frameworks and counters."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .counters import PostureCounters, SeverityCounters, StatusCounters, calculate_status
from .results import Result
from .status import (
    AllLists,
    Filters,
    ScanningStatus,
    ScanningSubStatus,
    StatusInfo,
    control_severity_to_string,
)
from .summary import (
    ControlCriteria,
    ControlSummaries,
    ControlSummary,
    FrameworkSummary,
    update_controls_summary_counters,
)

__all__ = ["SummaryDetails"]


@dataclass
class SummaryDetails:
    """Detailed summary of a scan, with per-control and per-framework summaries."""

    controls: ControlSummaries = field(default_factory=ControlSummaries)
    status: ScanningStatus = ScanningStatus.UNKNOWN
    frameworks: list[FrameworkSummary] = field(default_factory=list)
    resources_severity_counters: SeverityCounters = field(default_factory=SeverityCounters)
    controls_severity_counters: SeverityCounters = field(default_factory=SeverityCounters)
    status_counters: StatusCounters = field(default_factory=StatusCounters)
    score: float = 0.0

    def __post_init__(self) -> None:
        self.status = ScanningStatus(self.status)
        if not isinstance(self.controls, ControlSummaries):
            self.controls = ControlSummaries(self.controls)

    # ------------------------------------------------------------------ status

    def get_status(self) -> StatusInfo:
        """The scan status, worked out from the counters when unknown."""
        if self.status is ScanningStatus.UNKNOWN:
            self.calculate_status()
        return StatusInfo(inner_status=self.status)

    def calculate_status(self) -> None:
        self.status = calculate_status(self.status_counters)

    # ---------------------------------------------------------------- counters

    def number_of_resources(self) -> StatusCounters:
        return self.status_counters

    def increase(self, status: StatusInfo) -> None:
        self.status_counters.increase(status)

    def init_resources_summary(self, control_info_map: Mapping[str, StatusInfo] | None = None) -> None:
        """Settle framework and control statuses, then the counters and the scan status.

        Controls named in ``control_info_map`` with a known status take that status
        and the integration sub-status. Failed controls are counted by severity.
        """
        for framework in self.frameworks:
            framework.init_resources_summary(control_info_map)

        control_info_map = control_info_map or {}
        for control in self.controls.values():
            info = control_info_map.get(control.control_id)
            if info is not None and info.inner_status is not ScanningStatus.UNKNOWN:
                control.set_status(info)
                control.set_sub_status(ScanningSubStatus.INTEGRATION)
            elif control.get_status().status() is ScanningStatus.UNKNOWN:
                control.calculate_status()

            if control.get_status().is_failed():
                self.controls_severity_counters.increase(control_severity_to_string(control.score_factor), 1)

        self.status_counters.set(self.list_resources_ids())
        self.calculate_status()

    # -------------------------------------------------------------- frameworks

    def list_frameworks_names(self) -> AllLists:
        """Framework names grouped by framework status."""
        frameworks = AllLists()
        for framework in self.frameworks:
            frameworks.append(framework.get_status().status(), framework.name)
        frameworks.to_unique_controls()
        return frameworks

    def list_frameworks(self) -> list[FrameworkSummary]:
        return list(self.frameworks)

    # ---------------------------------------------------------------- controls

    def list_controls_names(self) -> AllLists:
        """Control names grouped by control status."""
        controls = AllLists()
        for summary in self.controls.values():
            controls.append(summary.get_status().status(), summary.name)
        controls.to_unique_controls()
        return controls

    def list_controls_ids(self) -> AllLists:
        """Control IDs grouped by control status."""
        return self.controls.list_controls_ids()

    def list_controls(self) -> list[ControlSummary]:
        """Control summaries ordered as their IDs are listed by status."""
        found = (self.controls.get_control(ControlCriteria.ID, cid) for cid in self.list_controls_ids().all())
        return [control for control in found if control is not None]

    def number_of_controls(self) -> PostureCounters:
        ids = self.list_controls_ids()
        return PostureCounters(
            passed_counter=len(ids.passed()),
            failed_counter=len(ids.failed()),
            skipped_counter=len(ids.skipped()),
        )

    def control_name(self, control_id: str) -> str:
        """Name of a control, or an empty string if it is not in the summary."""
        control = self.controls.get(control_id)
        return control.name if control is not None else ""

    def list_resources_ids(self) -> AllLists:
        return self.controls.list_resources_ids()

    # ----------------------------------------------------------------- results

    def append_resource_result(self, result: Result) -> None:
        """Add a resource result to the control, severity and framework counters."""
        update_controls_summary_counters(result, self.controls, None)

        if result.get_status(None).is_failed():
            for resource_control in result.list_controls():
                if not resource_control.get_status(None).is_failed():
                    continue
                control = self.controls.get_control(ControlCriteria.ID, resource_control.control_id)
                if control is None:
                    continue
                severity = control_severity_to_string(control.score_factor)
                self.resources_severity_counters.increase(severity, 1)

        for framework in self.frameworks:
            update_controls_summary_counters(result, framework.controls, Filters(framework_names=[framework.name]))
            framework.calculate_status()

    # ----------------------------------------------------------- serialisation

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.controls:
            data["controls"] = self.controls.to_dict()
        data.update(
            {
                "status": self.status.value,
                "frameworks": [framework.to_dict() for framework in self.frameworks],
                "resourcesSeverityCounters": self.resources_severity_counters.to_dict(),
                "controlsSeverityCounters": self.controls_severity_counters.to_dict(),
                "ResourceCounters": self.status_counters.to_dict(),
                "score": self.score,
            }
        )
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> SummaryDetails:
        data = data or {}
        return cls(
            controls=ControlSummaries.from_dict(data.get("controls")),
            status=data.get("status") or "",
            frameworks=[FrameworkSummary.from_dict(item) for item in data.get("frameworks") or ()],
            resources_severity_counters=SeverityCounters.from_dict(data.get("resourcesSeverityCounters")),
            controls_severity_counters=SeverityCounters.from_dict(data.get("controlsSeverityCounters")),
            status_counters=StatusCounters.from_dict(data.get("ResourceCounters")),
            score=float(data.get("score") or 0),
        )
"""Per-resource scan results: the controls and rules tested against a resource."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .prioritization import PrioritizedResource
from .status import (
    SUB_STATUS_CONFIGURATION_INFO,
    SUB_STATUS_MANUAL_REVIEW_INFO,
    SUB_STATUS_REQUIRES_REVIEW_INFO,
    AllLists,
    Filters,
    ScanningStatus,
    ScanningSubStatus,
    StatusInfo,
    compare,
    compare_status_and_sub_status,
)

__all__ = [
    "ResourceAssociatedRule",
    "ResourceAssociatedControl",
    "Result",
]


@dataclass
class ResourceAssociatedRule:
    """A rule evaluated against a resource, with the exceptions that apply to it."""

    name: str = ""
    status: ScanningStatus = ScanningStatus.UNKNOWN
    sub_status: ScanningSubStatus = ScanningSubStatus.UNKNOWN
    control_configurations: dict[str, list[str]] = field(default_factory=dict)
    paths: list[Any] = field(default_factory=list)
    exception: list[Any] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.status = ScanningStatus(self.status)
        self.sub_status = ScanningSubStatus(self.sub_status)

    def get_status(self, filters: Filters | None = None) -> StatusInfo:
        """The rule status; filters play no part in it."""
        return StatusInfo(inner_status=self.status)

    def set_status(self, status: ScanningStatus | str, filters: Filters | None = None) -> None:
        """Set the status, turning a non-passing status into a pass when exceptions apply."""
        status = ScanningStatus(status)
        if status is ScanningStatus.PASSED:
            self.status = ScanningStatus.PASSED
            return
        exceptions = filters.filter_exceptions(self.exception) if filters is not None else self.exception
        if exceptions:
            self.status = ScanningStatus.PASSED
            self.sub_status = ScanningSubStatus.EXCEPTION
        else:
            self.status = status

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.control_configurations:
            data["controlConfigurations"] = {k: list(v) for k, v in self.control_configurations.items()}
        data["name"] = self.name
        data["status"] = self.status.value
        data["subStatus"] = self.sub_status.value
        if self.paths:
            data["paths"] = list(self.paths)
        if self.exception:
            data["exception"] = list(self.exception)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ResourceAssociatedRule:
        configurations = data.get("controlConfigurations") or {}
        return cls(
            name=data.get("name") or "",
            status=data.get("status") or "",
            sub_status=data.get("subStatus") or "",
            control_configurations={k: list(v or ()) for k, v in configurations.items()},
            paths=list(data.get("paths") or ()),
            exception=list(data.get("exception") or ()),
        )


def _control_missing_configuration(control: ResourceAssociatedControl) -> bool:
    for rule in control.rules:
        if not rule.control_configurations:
            return True
        if any(not values for values in rule.control_configurations.values()):
            return True
    return False


def _action_value(action_required: Any) -> str:
    if isinstance(action_required, Enum):
        return str(action_required.value)
    return str(action_required or "")


@dataclass
class ResourceAssociatedControl:
    """A control tested against a resource, with its rules."""

    control_id: str = ""
    name: str = ""
    status: StatusInfo = field(default_factory=StatusInfo)
    rules: list[ResourceAssociatedRule] = field(default_factory=list)

    def is_old_control(self) -> bool:
        """True for controls from older reports, which carry no status of their own."""
        return self.status.inner_status is ScanningStatus.UNKNOWN and not self.status.inner_info

    def get_status(self, filters: Filters | None = None) -> StatusInfo:
        """The control status; for old controls it is worked out from the rules."""
        if not self.is_old_control():
            return self.status
        status = ScanningStatus.PASSED
        for rule in self.rules:
            rule.set_status(rule.get_status(filters).status(), filters)
            status = compare(status, rule.get_status(filters).status())
        return StatusInfo(inner_status=status)

    def get_sub_status(self) -> ScanningSubStatus:
        """The control sub-status; for old controls it is worked out from the rules."""
        if not self.is_old_control():
            return self.status.sub_status
        status = ScanningStatus.PASSED
        sub_status = ScanningSubStatus.UNKNOWN
        for rule in self.rules:
            rule.set_status(rule.get_status(None).status(), None)
            status, sub_status = compare_status_and_sub_status(
                status, rule.get_status(None).status(), sub_status, rule.sub_status
            )
        return sub_status

    def set_status(self, action_required: ScanningSubStatus | str = "") -> None:
        """Set status and sub-status from the rules and the control's required action.

        A failure of a control that requires (manual) review becomes a skip with
        that sub-status; a configuration control whose rules lack configuration
        values is skipped with the configuration sub-status.
        """
        status = ScanningStatus.PASSED
        sub_status = ScanningSubStatus.UNKNOWN
        for rule in self.rules:
            status, sub_status = compare_status_and_sub_status(
                status, rule.get_status(None).status(), sub_status, rule.sub_status
            )

        action = _action_value(action_required)
        if not action:
            self.status.inner_status = status
            self.status.sub_status = sub_status
            return

        info = ""
        if status is ScanningStatus.FAILED and action == ScanningSubStatus.REQUIRES_REVIEW.value:
            status = ScanningStatus.SKIPPED
            sub_status = ScanningSubStatus.REQUIRES_REVIEW
            info = SUB_STATUS_REQUIRES_REVIEW_INFO
        if status is ScanningStatus.FAILED and action == ScanningSubStatus.MANUAL_REVIEW.value:
            status = ScanningStatus.SKIPPED
            sub_status = ScanningSubStatus.MANUAL_REVIEW
            info = SUB_STATUS_MANUAL_REVIEW_INFO
        if action == ScanningSubStatus.CONFIGURATION.value and _control_missing_configuration(self):
            status = ScanningStatus.SKIPPED
            sub_status = ScanningSubStatus.CONFIGURATION
            info = SUB_STATUS_CONFIGURATION_INFO

        self.status.inner_status = status
        self.status.inner_info = info
        self.status.sub_status = sub_status

    def list_rules(self) -> list[ResourceAssociatedRule]:
        return list(self.rules)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "controlID": self.control_id,
            "name": self.name,
            "status": self.status.to_dict(),
        }
        if self.rules:
            data["rules"] = [rule.to_dict() for rule in self.rules]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ResourceAssociatedControl:
        status = data.get("status")
        return cls(
            control_id=data.get("controlID") or "",
            name=data.get("name") or "",
            status=StatusInfo.from_dict(status if isinstance(status, Mapping) else None),
            rules=[ResourceAssociatedRule.from_dict(rule) for rule in data.get("rules") or ()],
        )


@dataclass
class Result:
    """The controls tested against one resource, with the raw resource and its priority."""

    resource_id: str = ""
    associated_controls: list[ResourceAssociatedControl] = field(default_factory=list)
    raw_resource: Any = None
    prioritized_resource: PrioritizedResource | None = None

    def get_status(self, filters: Filters | None = None) -> StatusInfo:
        """The most significant status among the controls; unknown if none was tested."""
        status = ScanningStatus.UNKNOWN
        for control in self.associated_controls:
            status = compare(status, control.get_status(filters).status())
        return StatusInfo(inner_status=status)

    def list_controls(self) -> list[ResourceAssociatedControl]:
        return list(self.associated_controls)

    def list_controls_ids(self, filters: Filters | None = None) -> AllLists:
        """Control IDs grouped by status."""
        controls = AllLists()
        for control in self.associated_controls:
            controls.append(control.get_status(filters).status(), control.control_id)
        controls.to_unique_controls()
        return controls

    def list_controls_names(self, filters: Filters | None = None) -> AllLists:
        """Control names grouped by status."""
        controls = AllLists()
        for control in self.associated_controls:
            controls.append(control.get_status(filters).status(), control.name)
        controls.to_unique_controls()
        return controls

    def list_rules(self) -> list[ResourceAssociatedRule]:
        """Rules of all controls, one per rule name, in order of first appearance."""
        return self.list_rules_of_control("", "")

    def list_rules_of_control(self, control_id: str = "", control_name: str = "") -> list[ResourceAssociatedRule]:
        """Rules of the controls matching the given ID and name (empty matches any)."""
        rules: list[ResourceAssociatedRule] = []
        names: set[str] = set()
        for control in self.associated_controls:
            if (control_id and control.control_id != control_id) or (control_name and control.name != control_name):
                continue
            for rule in control.rules:
                if rule.name not in names:
                    names.add(rule.name)
                    rules.append(rule)
        return rules

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.raw_resource is not None:
            raw = self.raw_resource
            data["rawResource"] = raw.to_dict() if hasattr(raw, "to_dict") else raw
        if self.prioritized_resource is not None:
            data["prioritizedResource"] = self.prioritized_resource.to_dict()
        data["resourceID"] = self.resource_id
        if self.associated_controls:
            data["controls"] = [control.to_dict() for control in self.associated_controls]
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Result:
        prioritized = data.get("prioritizedResource")
        return cls(
            resource_id=data.get("resourceID") or "",
            associated_controls=[ResourceAssociatedControl.from_dict(c) for c in data.get("controls") or ()],
            raw_resource=data.get("rawResource"),
            prioritized_resource=PrioritizedResource.from_dict(prioritized) if prioritized else None,
        )
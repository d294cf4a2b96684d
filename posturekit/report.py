"""The posture report: metadata of a scan, its per-resource results and its summary."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import IntEnum
from typing import Any, Protocol

from .results import Result
from .status import AllLists, Filters, ScanningStatus, StatusInfo
from .summary import ControlSummary, FrameworkSummary, PostureAttributes
from .summarydetails import SummaryDetails

__all__ = [
    "CloudParser",
    "ScanningTarget",
    "CloudMetadata",
    "ClusterMetadata",
    "RepoContextMetadata",
    "FileContextMetadata",
    "DirectoryContextMetadata",
    "HelmContextMetadata",
    "ContextMetadata",
    "ScanMetadata",
    "Metadata",
    "PostureReport",
]


class CloudParser(Protocol):
    """Splits a cloud cluster name into its prefix and short name."""

    name: str
    provider: str

    def parse(self) -> tuple[str, str]: ...


class ScanningTarget(IntEnum):
    """What a scan was run against."""

    CLUSTER = 0
    FILE = 1
    REPO = 2
    GIT_LOCAL = 3
    DIRECTORY = 4

    def __str__(self) -> str:
        return _TARGET_LABELS[self]


_TARGET_LABELS = {
    ScanningTarget.CLUSTER: "Cluster",
    ScanningTarget.FILE: "File",
    ScanningTarget.REPO: "Repo",
    ScanningTarget.GIT_LOCAL: "GitLocal",
    ScanningTarget.DIRECTORY: "Directory",
}


def _non_empty(data: dict[str, Any]) -> dict[str, Any]:
    """Drop the keys whose values are empty, as for optional JSON fields."""
    return {key: value for key, value in data.items() if value not in (None, "", 0, False, [], {})}


@dataclass
class CloudMetadata:
    """Metadata of the cloud the cluster runs on."""

    cloud_provider: str = ""
    short_name: str = ""
    full_name: str = ""
    prefix_name: str = ""

    @classmethod
    def from_parser(cls, parser: CloudParser) -> CloudMetadata:
        """Build the metadata from a parser of the cluster's full name."""
        prefix, suffix = parser.parse()
        return cls(
            cloud_provider=parser.provider,
            full_name=parser.name,
            short_name=suffix,
            prefix_name=prefix,
        )

    @property
    def name(self) -> str:
        """The short name, e.g. ``my-cluster`` for ``gke_project_zone_my-cluster``."""
        return self.short_name

    @property
    def provider(self) -> str:
        return self.cloud_provider

    @property
    def prefix(self) -> str:
        """The prefix of the name, e.g. ``gke_project_zone``."""
        return self.prefix_name

    def to_dict(self) -> dict[str, Any]:
        return _non_empty(
            {
                "cloudProvider": self.cloud_provider,
                "shortName": self.short_name,
                "fullName": self.full_name,
                "prefixName": self.prefix_name,
            }
        )


@dataclass
class ClusterMetadata:
    """Metadata of a scanned cluster."""

    namespace_to_number_of_resources: dict[str, int] = field(default_factory=dict)
    cloud_metadata: CloudMetadata | None = None
    cloud_provider: str = ""  # deprecated, see cloud_metadata
    context_name: str = ""
    number_of_worker_nodes: int = 0

    def to_dict(self) -> dict[str, Any]:
        return _non_empty(
            {
                "namespaceToNumberOfResources": dict(self.namespace_to_number_of_resources),
                "cloudMetadata": self.cloud_metadata.to_dict() if self.cloud_metadata else None,
                "cloudProvider": self.cloud_provider,
                "contextName": self.context_name,
                "numberOfWorkerNodes": self.number_of_worker_nodes,
            }
        )


@dataclass
class RepoContextMetadata:
    """Metadata of a scanned git repository."""

    provider: str = ""
    repo: str = ""
    owner: str = ""
    branch: str = ""
    default_branch: str = ""
    remote_url: str = ""
    last_commit: dict[str, Any] = field(default_factory=dict)
    local_root_path: str = ""

    def to_dict(self) -> dict[str, Any]:
        data = _non_empty(
            {
                "provider": self.provider,
                "repo": self.repo,
                "owner": self.owner,
                "branch": self.branch,
                "defaultBranch": self.default_branch,
                "remoteURL": self.remote_url,
                "localRootPath": self.local_root_path,
            }
        )
        data["lastCommit"] = dict(self.last_commit)
        return data


@dataclass
class FileContextMetadata:
    """Metadata of a scanned file."""

    file_path: str = ""
    host_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _non_empty({"filePath": self.file_path, "hostName": self.host_name})


@dataclass
class DirectoryContextMetadata:
    """Metadata of a scanned directory."""

    base_path: str = ""
    host_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _non_empty({"basePath": self.base_path, "hostName": self.host_name})


@dataclass
class HelmContextMetadata:
    """Metadata of a scanned Helm chart."""

    chart_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return _non_empty({"chartName": self.chart_name})


@dataclass
class ContextMetadata:
    """Metadata of whatever the scan was run against."""

    cluster_context_metadata: ClusterMetadata | None = None
    repo_context_metadata: RepoContextMetadata | None = None
    file_context_metadata: FileContextMetadata | None = None
    helm_context_metadata: HelmContextMetadata | None = None
    directory_context_metadata: DirectoryContextMetadata | None = None

    def to_dict(self) -> dict[str, Any]:
        parts = {
            "clusterContextMetadata": self.cluster_context_metadata,
            "gitRepoContextMetadata": self.repo_context_metadata,
            "fileContextMetadata": self.file_context_metadata,
            "helmContextMetadata": self.helm_context_metadata,
            "directoryContextMetadata": self.directory_context_metadata,
        }
        return {key: value.to_dict() for key, value in parts.items() if value is not None}


@dataclass
class ScanMetadata:
    """How the scan was requested."""

    target_type: str = ""
    kubescape_version: str = ""
    format_version: str = ""
    controls_inputs: str = ""
    format: str = ""  # deprecated, comma-separated; see formats
    formats: list[str] = field(default_factory=list)
    use_exceptions: str = ""
    logger: str = ""
    excluded_namespaces: list[str] = field(default_factory=list)
    include_namespaces: list[str] = field(default_factory=list)
    target_names: list[str] = field(default_factory=list)
    fail_threshold: float = 0.0
    scanning_target: ScanningTarget = ScanningTarget.CLUSTER
    host_scanner: bool = False
    submit: bool = False
    verbose_mode: bool = False

    def __post_init__(self) -> None:
        self.scanning_target = ScanningTarget(self.scanning_target)

    def to_dict(self) -> dict[str, Any]:
        return _non_empty(
            {
                "targetType": self.target_type,
                "kubescapeVersion": self.kubescape_version,
                "formatVersion": self.format_version,
                "controlsInputs": self.controls_inputs,
                "format": self.format,
                "formats": list(self.formats),
                "useExceptions": self.use_exceptions,
                "logger": self.logger,
                "excludedNamespaces": list(self.excluded_namespaces),
                "includeNamespaces": list(self.include_namespaces),
                "targetNames": list(self.target_names),
                "failThreshold": self.fail_threshold,
                "scanningTarget": int(self.scanning_target),
                "hostScanner": self.host_scanner,
                "submit": self.submit,
                "verboseMode": self.verbose_mode,
            }
        )


@dataclass
class Metadata:
    """All metadata of a posture report."""

    context_metadata: ContextMetadata = field(default_factory=ContextMetadata)
    cluster_metadata: ClusterMetadata = field(default_factory=ClusterMetadata)
    scan_metadata: ScanMetadata = field(default_factory=ScanMetadata)

    def to_dict(self) -> dict[str, Any]:
        return {
            "targetMetadata": self.context_metadata.to_dict(),
            "clusterMetadata": self.cluster_metadata.to_dict(),
            "scanMetadata": self.scan_metadata.to_dict(),
        }


# ------------------------------------------------------------------ time format

_RFC3339 = re.compile(
    r"^(\d{4})-(\d{2})-(\d{2})[Tt](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?([Zz]|[+-]\d{2}:\d{2})$"
)


def _format_time(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    text = value.strftime("%Y-%m-%dT%H:%M:%S")
    if value.microsecond:
        text += "." + f"{value.microsecond:06d}".rstrip("0")
    offset = value.utcoffset() or timedelta(0)
    if offset == timedelta(0):
        return text + "Z"
    total = int(offset.total_seconds())
    sign = "+" if total >= 0 else "-"
    total = abs(total)
    return f"{text}{sign}{total // 3600:02d}:{total % 3600 // 60:02d}"


def _parse_time(text: Any) -> datetime:
    if not isinstance(text, str):
        raise ValueError(f"generationTime: expected a string, got {text!r}")
    match = _RFC3339.match(text)
    if match is None:
        raise ValueError(f"generationTime: not an RFC 3339 time: {text!r}")
    year, month, day, hour, minute, second, fraction, zone = match.groups()
    micro = int((fraction or "0")[:6].ljust(6, "0"))
    if zone in ("Z", "z"):
        tz = timezone.utc
    else:
        sign = 1 if zone[0] == "+" else -1
        tz = timezone(sign * timedelta(hours=int(zone[1:3]), minutes=int(zone[4:6])))
    moment = datetime(
        int(year), int(month), int(day), int(hour), int(minute), int(second), micro, tzinfo=tz
    )
    return moment.astimezone()


# -------------------------------------------------------------- typed readers


def _read_str(data: Mapping[str, Any], key: str) -> str:
    value = data[key]
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"{key}: expected a string, got {value!r}")
    return value


def _read_bool(data: Mapping[str, Any], key: str) -> bool:
    value = data[key]
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{key}: expected a boolean, got {value!r}")
    return value


def _read_int(data: Mapping[str, Any], key: str) -> int:
    value = data[key]
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key}: expected an integer, got {value!r}")
    return value


def _read_float(data: Mapping[str, Any], key: str) -> float:
    value = data[key]
    if value is None:
        return 0.0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{key}: expected a number, got {value!r}")
    return float(value)


def _read_str_list(data: Mapping[str, Any], key: str) -> list[str]:
    value = data[key]
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{key}: expected a list of strings, got {value!r}")
    return list(value)


def _read_object(data: Mapping[str, Any], key: str) -> Mapping[str, Any] | None:
    value = data[key]
    if value is None:
        return None
    if not isinstance(value, Mapping):
        raise ValueError(f"{key}: expected an object, got {value!r}")
    return value


_SCAN_READERS = {
    "format": ("format", _read_str),
    "formats": ("formats", _read_str_list),
    "excludedNamespaces": ("excluded_namespaces", _read_str_list),
    "includeNamespaces": ("include_namespaces", _read_str_list),
    "failThreshold": ("fail_threshold", _read_float),
    "submit": ("submit", _read_bool),
    "hostScanner": ("host_scanner", _read_bool),
    "logger": ("logger", _read_str),
    "targetType": ("target_type", _read_str),
    "targetNames": ("target_names", _read_str_list),
    "useExceptions": ("use_exceptions", _read_str),
    "controlsInputs": ("controls_inputs", _read_str),
    "verboseMode": ("verbose_mode", _read_bool),
}

_CLUSTER_READERS = {
    "numberOfWorkerNodes": ("number_of_worker_nodes", _read_int),
    "cloudProvider": ("cloud_provider", _read_str),
    "contextName": ("context_name", _read_str),
}


def _apply(target: Any, data: Mapping[str, Any], readers: Mapping[str, Any]) -> None:
    for key, (attribute, reader) in readers.items():
        if key in data:
            setattr(target, attribute, reader(data, key))


def _decode_metadata(data: Mapping[str, Any]) -> Metadata:
    metadata = Metadata()
    if "scanMetadata" in data:
        scan = _read_object(data, "scanMetadata")
        if scan is not None:
            _apply(metadata.scan_metadata, scan, _SCAN_READERS)
    if "clusterMetadata" in data:
        cluster = _read_object(data, "clusterMetadata")
        if cluster is not None:
            _apply(metadata.cluster_metadata, cluster, _CLUSTER_READERS)
    return metadata


# ---------------------------------------------------------------------- report


@dataclass
class PostureReport:
    """Result of a posture scan."""

    report_generation_time: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: Metadata = field(default_factory=Metadata)
    cluster_api_server_info: dict[str, Any] | None = None
    customer_guid: str = ""
    cluster_name: str = ""
    cluster_cloud_provider: str = ""
    report_id: str = ""
    job_id: str = ""
    resources: list[Any] = field(default_factory=list)
    attributes: list[PostureAttributes] = field(default_factory=list)
    results: list[Result] = field(default_factory=list)
    summary_details: SummaryDetails = field(default_factory=SummaryDetails)
    pagination_info: dict[str, Any] = field(default_factory=dict)

    # ----------------------------------------------------------- serialisation

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "generationTime": _format_time(self.report_generation_time),
            "metadata": self.metadata.to_dict(),
            "clusterAPIServerInfo": self.cluster_api_server_info,
            "customerGUID": self.customer_guid,
            "clusterName": self.cluster_name,
            "clusterCloudProvider": self.cluster_cloud_provider,
            "reportGUID": self.report_id,
            "jobID": self.job_id,
        }
        if self.resources:
            data["resources"] = [
                resource.to_dict() if hasattr(resource, "to_dict") else resource
                for resource in self.resources
            ]
        data["attributes"] = [attribute.to_dict() for attribute in self.attributes]
        if self.results:
            data["results"] = [result.to_dict() for result in self.results]
        data["summaryDetails"] = self.summary_details.to_dict()
        data["paginationInfo"] = dict(self.pagination_info)
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, data: str | bytes) -> PostureReport:
        """Decode the basic fields of a serialised report, for quick validation.

        Only the identifiers, the generation time (converted to local time) and
        the scan and cluster metadata are read; everything else is ignored.
        Raises ValueError on malformed JSON or on fields of the wrong type.
        """
        document = json.loads(data)
        if not isinstance(document, Mapping):
            raise ValueError("a posture report must be a JSON object")

        report = cls()
        _apply(
            report,
            document,
            {
                "customerGUID": ("customer_guid", _read_str),
                "clusterName": ("cluster_name", _read_str),
                "reportGUID": ("report_id", _read_str),
                "jobID": ("job_id", _read_str),
            },
        )
        if document.get("generationTime") is not None:
            report.report_generation_time = _parse_time(document["generationTime"])
        if "metadata" in document:
            metadata = _read_object(document, "metadata")
            if metadata is not None:
                report.metadata = _decode_metadata(metadata)
        return report

    # ------------------------------------------------------------------ status

    def get_status(self) -> StatusInfo:
        """The overall scan status."""
        return self.summary_details.get_status()

    def resource_status(self, resource_id: str, filters: Filters | None = None) -> StatusInfo:
        """Status of one resource; unknown when the resource is not in the report."""
        result = self.resource_result(resource_id)
        if result is None:
            return StatusInfo(inner_status=ScanningStatus.UNKNOWN)
        return result.get_status(filters)

    def resource_result(self, resource_id: str) -> Result | None:
        """Result of one resource, or None when it is not in the report."""
        return next((result for result in self.results if result.resource_id == resource_id), None)

    # ----------------------------------------------------------------- listing

    def list_resources_ids(self) -> AllLists:
        return self.summary_details.list_resources_ids()

    def list_frameworks(self) -> list[FrameworkSummary]:
        return self.summary_details.list_frameworks()

    def list_frameworks_names(self) -> AllLists:
        return self.summary_details.list_frameworks_names()

    def list_controls(self) -> list[ControlSummary]:
        return self.summary_details.list_controls()

    def list_controls_names(self) -> AllLists:
        return self.summary_details.list_controls_names()

    def list_controls_ids(self) -> AllLists:
        return self.summary_details.list_controls_ids()

    # ----------------------------------------------------------------- summary

    def initialize_summary(self) -> None:
        """Add every resource result to the summary, then settle its statuses."""
        for result in self.results:
            self.append_resource_result_to_summary(result)
        self.summary_details.init_resources_summary(None)

    def append_resource_result_to_summary(self, result: Result) -> None:
        self.summary_details.append_resource_result(result)
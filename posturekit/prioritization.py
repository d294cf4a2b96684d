"""Priority vectors: chains of controls along attack-track paths, and their scores."""

from __future__ import annotations

import itertools
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

__all__ = [
    "CONTROL_TYPE_TAG_SECURITY_IMPACT",
    "PriorityVectorType",
    "PriorityVectorControl",
    "ControlsVector",
    "PrioritizedResource",
    "AttackTrackControl",
    "AttackTrackStep",
    "AttackTrack",
    "controls_vectors_from_attack_track_paths",
]

CONTROL_TYPE_TAG_SECURITY_IMPACT = "security-impact"


class PriorityVectorType(str, Enum):
    """Kind of items a priority vector holds."""

    CONTROL = "control"


class AttackTrackControl(Protocol):
    """A control as seen by an attack track."""

    control_id: str
    control_type_tags: Sequence[str]
    score: float
    severity: int


class AttackTrackStep(Protocol):
    """One step of an attack-track path, with the controls attached to it."""

    name: str
    controls: Sequence[AttackTrackControl]


class AttackTrack(Protocol):
    """An attack track; only its name is needed here."""

    name: str


@dataclass
class PriorityVectorControl:
    """A control within a priority vector, with the step it belongs to."""

    control_id: str
    category: str = ""
    tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"controlID": self.control_id, "category": self.category, "tags": list(self.tags)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PriorityVectorControl:
        return cls(
            control_id=data.get("controlID") or "",
            category=data.get("category") or "",
            tags=list(data.get("tags") or ()),
        )


def _lookup(all_controls: Mapping[str, AttackTrackControl], control_id: str) -> AttackTrackControl:
    try:
        return all_controls[control_id]
    except KeyError:
        raise KeyError(f"failed finding control {control_id} in map") from None


@dataclass
class ControlsVector:
    """A list of controls that together form a priority vector."""

    attack_track_name: str = ""
    type: PriorityVectorType = PriorityVectorType.CONTROL
    vector: list[PriorityVectorControl] = field(default_factory=list)
    score: float = 0.0
    severity: int = 0

    def __post_init__(self) -> None:
        self.type = PriorityVectorType(self.type)

    def calculate_score(self, all_controls: Mapping[str, AttackTrackControl], replica_count: int) -> float:
        """Multiply the scores of the controls, weighted by the replica count.

        Raises KeyError when a control of the vector is missing from ``all_controls``.
        """
        if not self.vector:
            return 0.0
        total = 1.0
        for item in self.vector:
            total *= _lookup(all_controls, item.control_id).score
        return total * (1 + replica_count / 10)

    def calculate_severity(self, all_controls: Mapping[str, AttackTrackControl]) -> int:
        """Return the highest severity among the controls of the vector.

        Raises KeyError when a control of the vector is missing from ``all_controls``.
        """
        return max(
            (_lookup(all_controls, item.control_id).severity for item in self.vector),
            default=0,
        )

    def add(self, item: Any) -> None:
        """Append an item; only PriorityVectorControl items are accepted."""
        if not isinstance(item, PriorityVectorControl):
            raise TypeError("failed converting item to PriorityVectorControl")
        self.vector.append(item)

    def add_control(self, control: PriorityVectorControl) -> None:
        self.vector.append(control)

    def is_valid(self) -> bool:
        """A vector is valid when one of its controls is not a security-impact-only control."""
        return any(
            tag != CONTROL_TYPE_TAG_SECURITY_IMPACT for control in self.vector for tag in control.tags
        )

    def __iter__(self) -> Iterator[PriorityVectorControl]:
        return iter(list(self.vector))

    def __len__(self) -> int:
        return len(self.vector)

    def to_dict(self) -> dict[str, Any]:
        return {
            "attackTrackName": self.attack_track_name,
            "type": self.type.value,
            "vector": [control.to_dict() for control in self.vector],
            "score": self.score,
            "severity": self.severity,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ControlsVector:
        return cls(
            attack_track_name=data.get("attackTrackName") or "",
            type=data.get("type") or PriorityVectorType.CONTROL,
            vector=[PriorityVectorControl.from_dict(item) for item in data.get("vector") or ()],
            score=float(data.get("score") or 0),
            severity=int(data.get("severity") or 0),
        )


@dataclass
class PrioritizedResource:
    """A resource scored through its priority vectors."""

    resource_id: str = ""
    priority_vector: list[ControlsVector] = field(default_factory=list)
    score: float = 0.0
    severity: int = 0

    def calculate_score(self) -> float:
        """Sum of the scores of the priority vectors."""
        return sum((vector.score for vector in self.priority_vector), 0.0)

    def calculate_severity(self) -> int:
        """Highest severity of the priority vectors."""
        return max((vector.severity for vector in self.priority_vector), default=0)

    def list_controls_ids(self) -> list[str]:
        """IDs of all controls in the control-type priority vectors, in order."""
        return [
            control.control_id
            for vector in self.priority_vector
            if vector.type is PriorityVectorType.CONTROL
            for control in vector
        ]

    def to_dict(self) -> dict[str, Any]:
        return {
            "resourceID": self.resource_id,
            "priorityVector": [vector.to_dict() for vector in self.priority_vector],
            "score": self.score,
            "severity": self.severity,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> PrioritizedResource:
        return cls(
            resource_id=data.get("resourceID") or "",
            priority_vector=[ControlsVector.from_dict(item) for item in data.get("priorityVector") or ()],
            score=float(data.get("score") or 0),
            severity=int(data.get("severity") or 0),
        )


def _vectors_from_single_path(attack_track: AttackTrack, path: Sequence[AttackTrackStep]) -> Iterator[ControlsVector]:
    """Yield a vector for every combination of one control per step.

    For a path (A) 1,2 -> (B) 3,4 the combinations are, in order:
    (1,A)(3,B), (1,A)(4,B), (2,A)(3,B), (2,A)(4,B). Invalid vectors are left out.
    """
    steps = list(path)
    for combination in itertools.product(*(step.controls for step in steps)):
        vector = ControlsVector(attack_track_name=attack_track.name)
        for step, control in zip(steps, combination):
            vector.add_control(
                PriorityVectorControl(
                    control_id=control.control_id,
                    category=step.name,
                    tags=list(control.control_type_tags),
                )
            )
        if vector.is_valid():
            yield vector


def controls_vectors_from_attack_track_paths(
    attack_track: AttackTrack, paths: Iterable[Sequence[AttackTrackStep]]
) -> list[ControlsVector]:
    """Build the controls vectors of every path of an attack track."""
    return [vector for path in paths for vector in _vectors_from_single_path(attack_track, path)]
"""Domain objects: alerts received from Grafana and deployment status snapshots."""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

_RFC3339 = re.compile(
    r"^(\d{4}-\d{2}-\d{2})[Tt](\d{2}:\d{2}:\d{2})(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)


def _lookup(data: Mapping[str, Any], key: str) -> Any:
    """Find a key the way a JSON object field is matched: exact first, then ignoring case."""
    if key in data:
        return data[key]
    folded = key.casefold()
    for candidate, value in data.items():
        if isinstance(candidate, str) and candidate.casefold() == folded:
            return value
    return None


def _as_str(value: Any, name: str) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"field {name!r} must be a string, got {type(value).__name__}")
    return value


def _as_int(value: Any, name: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool):
        raise ValueError(f"field {name!r} must be an integer")
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"field {name!r} must be an integer, got {value!r}")
        return int(value)
    if not isinstance(value, int):
        raise ValueError(f"field {name!r} must be an integer")
    return value


def _as_mapping(value: Any, name: str) -> Mapping[str, Any]:
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ValueError(f"field {name!r} must be an object")
    return value


def _parse_time(value: Any, name: str) -> datetime | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"field {name!r} must be an RFC 3339 timestamp")
    match = _RFC3339.match(value)
    if match is None:
        raise ValueError(f"field {name!r} is not an RFC 3339 timestamp: {value!r}")
    day, clock, fraction, zone = match.groups()
    micros = ((fraction or ".")[1:] + "000000")[:6]
    offset = "+00:00" if zone in ("Z", "z") else zone
    return datetime.fromisoformat(f"{day}T{clock}.{micros}{offset}")


@dataclass(frozen=True)
class Labels:
    """Alert labels that identify the rule and the pod it fired for."""

    alertname: str = ""
    grafana_folder: str = ""
    pod: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Labels:
        mapping = _as_mapping(data, "labels")
        return cls(
            alertname=_as_str(_lookup(mapping, "alertname"), "alertname"),
            grafana_folder=_as_str(_lookup(mapping, "grafana_folder"), "grafana_folder"),
            pod=_as_str(_lookup(mapping, "pod"), "pod"),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "alertname": self.alertname,
            "grafana_folder": self.grafana_folder,
            "pod": self.pod,
        }


@dataclass(frozen=True)
class Annotations:
    """Human-readable alert annotations."""

    summary: str = ""


@dataclass(frozen=True)
class AlertDB:
    """The part of an alert that is persisted."""

    namespace: str
    status: str
    labels: Labels


@dataclass
class Alert:
    """A single alert as delivered by a Grafana webhook."""

    status: str = ""
    labels: Labels = field(default_factory=Labels)
    annotations: Annotations = field(default_factory=Annotations)
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    generator_url: str = ""
    fingerprint: str = ""
    silence_url: str = ""
    dashboard_url: str = ""
    panel_url: str = ""
    values: dict[str, Any] = field(default_factory=dict)
    value_string: str = ""
    org_id: int = 0

    @classmethod
    def from_dict(cls, data: Any) -> Alert:
        """Build an alert from a decoded webhook object; raises ValueError on bad input."""
        if not isinstance(data, Mapping):
            raise ValueError("alert must be a JSON object")
        annotations = _as_mapping(_lookup(data, "annotations"), "annotations")
        return cls(
            status=_as_str(_lookup(data, "Status"), "Status"),
            labels=Labels.from_dict(_lookup(data, "Labels")),
            annotations=Annotations(
                summary=_as_str(_lookup(annotations, "summary"), "summary")
            ),
            starts_at=_parse_time(_lookup(data, "startsAt"), "startsAt"),
            ends_at=_parse_time(_lookup(data, "endsAt"), "endsAt"),
            generator_url=_as_str(_lookup(data, "generatorURL"), "generatorURL"),
            fingerprint=_as_str(_lookup(data, "fingerprint"), "fingerprint"),
            silence_url=_as_str(_lookup(data, "silenceURL"), "silenceURL"),
            dashboard_url=_as_str(_lookup(data, "dashboardURL"), "dashboardURL"),
            panel_url=_as_str(_lookup(data, "panelURL"), "panelURL"),
            values=dict(_as_mapping(_lookup(data, "values"), "values")),
            value_string=_as_str(_lookup(data, "valueString"), "valueString"),
            org_id=_as_int(_lookup(data, "orgId"), "orgId"),
        )

    def to_db(self, namespace: str) -> AlertDB:
        return AlertDB(namespace=namespace, status=self.status, labels=self.labels)

    def __str__(self) -> str:
        return (
            f"Alert: {self.labels.alertname}🚨\n"
            f"\tPod: {self.labels.pod}\n"
            f"\tProblem: {self.annotations.summary}"
        )


@dataclass(frozen=True)
class ContainerStatus:
    """Resource usage of one container: CPU in cores, memory in megabytes."""

    cpu: float = 0.0
    memory: float = 0.0


@dataclass
class PodStatus:
    """Per-container usage of a pod with its totals."""

    containers: dict[str, ContainerStatus] = field(default_factory=dict)
    total_cpu: float = 0.0
    total_mem: float = 0.0


@dataclass
class DeployStatus:
    """Condition of a deployment and the usage of its pods."""

    name: str
    status: str
    pods: dict[str, PodStatus] = field(default_factory=dict)


def parse_alerts(payload: str | bytes) -> list[Alert]:
    """Decode a webhook body holding a JSON array of alerts."""
    decoded = json.loads(payload)
    if decoded is None:
        return []
    if not isinstance(decoded, list):
        raise ValueError("alert payload must be a JSON array")
    return [Alert.from_dict(item) for item in decoded]
"""Declarative apply configurations for whole LeaderWorkerSet objects.

A ``LeaderWorkerSetApplyConfiguration`` carries type information, object
metadata, a spec and a status, each holding only the fields that were set.
The ``with_*`` methods set a field and return the configuration, so calls
can be chained. ``for_kind`` maps a kind of the API group to a fresh
configuration of the matching type.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Union

from lwskit.api import GROUP_VERSION, KIND, GroupVersionKind
from lwskit.applyconfig import (
    LeaderWorkerSetSpecApplyConfiguration,
    LeaderWorkerTemplateApplyConfiguration,
    NetworkConfigApplyConfiguration,
    RollingUpdateConfigurationApplyConfiguration,
    RolloutStrategyApplyConfiguration,
    SubGroupPolicyApplyConfiguration,
)

Timestamp = Union[datetime, str]


def _int(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} must be an int, got {value!r}")
    return value


def _str(value: Any, what: str) -> str:
    if not isinstance(value, str):
        raise TypeError(f"{what} must be a string, got {value!r}")
    return value


def _timestamp(value: Any, what: str) -> str:
    """Render a timestamp in the RFC 3339 form used by the API server."""
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    if isinstance(value, str):
        return value
    raise TypeError(f"{what} must be a datetime or a string, got {value!r}")


def _entries(values: tuple[Any, ...], what: str) -> list[dict[str, Any]]:
    out = []
    for value in values:
        if value is None:
            raise ValueError(f"None value passed to {what}")
        if not isinstance(value, Mapping):
            raise TypeError(f"{what} takes mappings, got {type(value).__name__}")
        out.append(copy.deepcopy(dict(value)))
    return out


def _string_map(entries: Mapping[str, str], what: str) -> dict[str, str]:
    if not isinstance(entries, Mapping):
        raise TypeError(f"{what} must be a mapping, got {type(entries).__name__}")
    return {_str(k, f"{what} key"): _str(v, f"{what} value") for k, v in entries.items()}


@dataclass
class LeaderWorkerSetStatusApplyConfiguration:
    """Apply configuration of a LeaderWorkerSetStatus."""

    conditions: list[dict[str, Any]] = field(default_factory=list)
    ready_replicas: int | None = None
    updated_replicas: int | None = None
    replicas: int | None = None
    hpa_pod_selector: str | None = None

    def with_conditions(self, *args: Mapping[str, Any]) -> LeaderWorkerSetStatusApplyConfiguration:
        """Append conditions; each call adds to those already present."""
        self.conditions.extend(_entries(args, "with_conditions"))
        return self

    def with_ready_replicas(self, value: int) -> LeaderWorkerSetStatusApplyConfiguration:
        self.ready_replicas = _int(value, "readyReplicas")
        return self

    def with_updated_replicas(self, value: int) -> LeaderWorkerSetStatusApplyConfiguration:
        self.updated_replicas = _int(value, "updatedReplicas")
        return self

    def with_replicas(self, value: int) -> LeaderWorkerSetStatusApplyConfiguration:
        self.replicas = _int(value, "replicas")
        return self

    def with_hpa_pod_selector(self, value: str) -> LeaderWorkerSetStatusApplyConfiguration:
        self.hpa_pod_selector = _str(value, "hpaPodSelector")
        return self

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.conditions:
            out["conditions"] = copy.deepcopy(self.conditions)
        if self.ready_replicas is not None:
            out["readyReplicas"] = self.ready_replicas
        if self.updated_replicas is not None:
            out["updatedReplicas"] = self.updated_replicas
        if self.replicas is not None:
            out["replicas"] = self.replicas
        if self.hpa_pod_selector is not None:
            out["hpaPodSelector"] = self.hpa_pod_selector
        return out


@dataclass
class ObjectMetaApplyConfiguration:
    """Apply configuration of object metadata."""

    name: str | None = None
    generate_name: str | None = None
    namespace: str | None = None
    uid: str | None = None
    resource_version: str | None = None
    generation: int | None = None
    creation_timestamp: str | None = None
    deletion_timestamp: str | None = None
    deletion_grace_period_seconds: int | None = None
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None
    owner_references: list[dict[str, Any]] = field(default_factory=list)
    finalizers: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        scalars = (
            ("name", self.name),
            ("generateName", self.generate_name),
            ("namespace", self.namespace),
            ("uid", self.uid),
            ("resourceVersion", self.resource_version),
            ("generation", self.generation),
            ("creationTimestamp", self.creation_timestamp),
            ("deletionTimestamp", self.deletion_timestamp),
            ("deletionGracePeriodSeconds", self.deletion_grace_period_seconds),
        )
        out.update((key, value) for key, value in scalars if value is not None)
        if self.labels:
            out["labels"] = dict(self.labels)
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        if self.owner_references:
            out["ownerReferences"] = copy.deepcopy(self.owner_references)
        if self.finalizers:
            out["finalizers"] = list(self.finalizers)
        return out


@dataclass
class LeaderWorkerSetApplyConfiguration:
    """Apply configuration of a whole LeaderWorkerSet."""

    kind: str | None = None
    api_version: str | None = None
    metadata: ObjectMetaApplyConfiguration | None = None
    spec: LeaderWorkerSetSpecApplyConfiguration | None = None
    status: LeaderWorkerSetStatusApplyConfiguration | None = None

    def _meta(self) -> ObjectMetaApplyConfiguration:
        if self.metadata is None:
            self.metadata = ObjectMetaApplyConfiguration()
        return self.metadata

    @property
    def name(self) -> str | None:
        """The configured object name, or None when none was set."""
        return self.metadata.name if self.metadata is not None else None

    def with_kind(self, value: str) -> LeaderWorkerSetApplyConfiguration:
        self.kind = _str(value, "kind")
        return self

    def with_api_version(self, value: str) -> LeaderWorkerSetApplyConfiguration:
        self.api_version = _str(value, "apiVersion")
        return self

    def with_name(self, value: str) -> LeaderWorkerSetApplyConfiguration:
        self._meta().name = _str(value, "name")
        return self

    def with_generate_name(self, value: str) -> LeaderWorkerSetApplyConfiguration:
        self._meta().generate_name = _str(value, "generateName")
        return self

    def with_namespace(self, value: str) -> LeaderWorkerSetApplyConfiguration:
        self._meta().namespace = _str(value, "namespace")
        return self

    def with_uid(self, value: str) -> LeaderWorkerSetApplyConfiguration:
        self._meta().uid = _str(str(value) if not isinstance(value, str) else value, "uid")
        return self

    def with_resource_version(self, value: str) -> LeaderWorkerSetApplyConfiguration:
        self._meta().resource_version = _str(value, "resourceVersion")
        return self

    def with_generation(self, value: int) -> LeaderWorkerSetApplyConfiguration:
        self._meta().generation = _int(value, "generation")
        return self

    def with_creation_timestamp(self, value: Timestamp) -> LeaderWorkerSetApplyConfiguration:
        self._meta().creation_timestamp = _timestamp(value, "creationTimestamp")
        return self

    def with_deletion_timestamp(self, value: Timestamp) -> LeaderWorkerSetApplyConfiguration:
        self._meta().deletion_timestamp = _timestamp(value, "deletionTimestamp")
        return self

    def with_deletion_grace_period_seconds(self, value: int) -> LeaderWorkerSetApplyConfiguration:
        self._meta().deletion_grace_period_seconds = _int(value, "deletionGracePeriodSeconds")
        return self

    def with_labels(self, entries: Mapping[str, str]) -> LeaderWorkerSetApplyConfiguration:
        """Merge entries into the labels, overwriting keys already present."""
        meta = self._meta()
        new = _string_map(entries, "labels")
        if meta.labels is None and new:
            meta.labels = {}
        if new:
            meta.labels.update(new)
        return self

    def with_annotations(self, entries: Mapping[str, str]) -> LeaderWorkerSetApplyConfiguration:
        """Merge entries into the annotations, overwriting keys already present."""
        meta = self._meta()
        new = _string_map(entries, "annotations")
        if meta.annotations is None and new:
            meta.annotations = {}
        if new:
            meta.annotations.update(new)
        return self

    def with_owner_references(self, *args: Mapping[str, Any]) -> LeaderWorkerSetApplyConfiguration:
        """Append owner references; each call adds to those already present."""
        meta = self._meta()
        meta.owner_references.extend(_entries(args, "with_owner_references"))
        return self

    def with_finalizers(self, *args: str) -> LeaderWorkerSetApplyConfiguration:
        """Append finalizers; each call adds to those already present."""
        meta = self._meta()
        meta.finalizers.extend(_str(value, "finalizer") for value in args)
        return self

    def with_spec(
        self, value: LeaderWorkerSetSpecApplyConfiguration | None
    ) -> LeaderWorkerSetApplyConfiguration:
        self.spec = value
        return self

    def with_status(
        self, value: LeaderWorkerSetStatusApplyConfiguration | None
    ) -> LeaderWorkerSetApplyConfiguration:
        self.status = value
        return self

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.kind is not None:
            out["kind"] = self.kind
        if self.api_version is not None:
            out["apiVersion"] = self.api_version
        if self.metadata is not None:
            out["metadata"] = self.metadata.to_dict()
        if self.spec is not None:
            out["spec"] = self.spec.to_dict()
        if self.status is not None:
            out["status"] = self.status.to_dict()
        return out


def leader_worker_set_status() -> LeaderWorkerSetStatusApplyConfiguration:
    """Start an empty LeaderWorkerSetStatus apply configuration."""
    return LeaderWorkerSetStatusApplyConfiguration()


def leader_worker_set(name: str, namespace: str) -> LeaderWorkerSetApplyConfiguration:
    """Start an apply configuration for the named LeaderWorkerSet."""
    return (
        LeaderWorkerSetApplyConfiguration()
        .with_name(name)
        .with_namespace(namespace)
        .with_kind(KIND)
        .with_api_version(GROUP_VERSION.api_version)
    )


_KINDS = {
    "LeaderWorkerSet": LeaderWorkerSetApplyConfiguration,
    "LeaderWorkerSetSpec": LeaderWorkerSetSpecApplyConfiguration,
    "LeaderWorkerSetStatus": LeaderWorkerSetStatusApplyConfiguration,
    "LeaderWorkerTemplate": LeaderWorkerTemplateApplyConfiguration,
    "NetworkConfig": NetworkConfigApplyConfiguration,
    "RollingUpdateConfiguration": RollingUpdateConfigurationApplyConfiguration,
    "RolloutStrategy": RolloutStrategyApplyConfiguration,
    "SubGroupPolicy": SubGroupPolicyApplyConfiguration,
}


def for_kind(kind: GroupVersionKind) -> Any:
    """Return a fresh apply configuration for the kind, or None if there is none."""
    if kind.group != GROUP_VERSION.group or kind.version != GROUP_VERSION.version:
        return None
    factory = _KINDS.get(kind.kind)
    return factory() if factory is not None else None
"""Resource types of the leaderworkerset.x-k8s.io/v1 API group."""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

GROUP = "leaderworkerset.x-k8s.io"
VERSION = "v1"

EXCLUSIVE_KEY_ANNOTATION_KEY = "leaderworkerset.sigs.k8s.io/exclusive-topology"
SUB_GROUP_EXCLUSIVE_KEY_ANNOTATION_KEY = "leaderworkerset.sigs.k8s.io/subgroup-exclusive-topology"
SET_NAME_LABEL_KEY = "leaderworkerset.sigs.k8s.io/name"
GROUP_INDEX_LABEL_KEY = "leaderworkerset.sigs.k8s.io/group-index"
WORKER_INDEX_LABEL_KEY = "leaderworkerset.sigs.k8s.io/worker-index"
SIZE_ANNOTATION_KEY = "leaderworkerset.sigs.k8s.io/size"
REPLICAS_ANNOTATION_KEY = "leaderworkerset.sigs.k8s.io/replicas"
GROUP_UNIQUE_HASH_LABEL_KEY = "leaderworkerset.sigs.k8s.io/group-key"
LEADER_POD_NAME_ANNOTATION_KEY = "leaderworkerset.sigs.k8s.io/leader-name"
TEMPLATE_REVISION_HASH_KEY = "leaderworkerset.sigs.k8s.io/template-revision-hash"
LWS_LEADER_ADDRESS = "LWS_LEADER_ADDRESS"
LWS_GROUP_SIZE = "LWS_GROUP_SIZE"
SUB_GROUP_INDEX_LABEL_KEY = "leaderworkerset.sigs.k8s.io/subgroup-index"
SUB_GROUP_SIZE_ANNOTATION_KEY = "leaderworkerset.gke.io/subgroup-size"
SUB_GROUP_UNIQUE_HASH_LABEL_KEY = "leaderworkerset.sigs.k8s.io/subgroup-key"
SUBDOMAIN_POLICY_ANNOTATION_KEY = "leaderworkerset.sigs.k8s.io/subdomainPolicy"

KIND = "LeaderWorkerSet"
LIST_KIND = "LeaderWorkerSetList"

IntOrString = Union[int, str]


@dataclass(frozen=True)
class GroupResource:
    """A resource name qualified by its API group."""

    group: str
    resource: str

    def __str__(self) -> str:
        return f"{self.resource}.{self.group}" if self.group else self.resource


@dataclass(frozen=True)
class GroupVersionKind:
    """A kind qualified by API group and version."""

    group: str
    version: str
    kind: str

    def __str__(self) -> str:
        return f"{self.group}/{self.version}, Kind={self.kind}"


@dataclass(frozen=True)
class GroupVersionResource:
    """A resource qualified by API group and version."""

    group: str
    version: str
    resource: str

    def group_resource(self) -> GroupResource:
        return GroupResource(self.group, self.resource)

    def __str__(self) -> str:
        return f"{self.group}/{self.version}, Resource={self.resource}"


@dataclass(frozen=True)
class GroupVersion:
    """An API group together with one of its versions."""

    group: str
    version: str

    @property
    def api_version(self) -> str:
        return str(self)

    def with_kind(self, kind: str) -> GroupVersionKind:
        return GroupVersionKind(self.group, self.version, kind)

    def with_resource(self, resource: str) -> GroupVersionResource:
        return GroupVersionResource(self.group, self.version, resource)

    def __str__(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version


GROUP_VERSION = GroupVersion(GROUP, VERSION)
SCHEME_GROUP_VERSION = GROUP_VERSION


def resource(resource: str) -> GroupResource:
    """Qualify a resource name with the leaderworkerset API group."""
    return GROUP_VERSION.with_resource(resource).group_resource()


class SubdomainPolicy(str, Enum):
    SHARED = "Shared"
    UNIQUE_PER_REPLICA = "UniquePerReplica"


class RolloutStrategyType(str, Enum):
    ROLLING_UPDATE = "RollingUpdate"


class RestartPolicyType(str, Enum):
    RECREATE_GROUP_ON_POD_RESTART = "RecreateGroupOnPodRestart"
    DEPRECATED_DEFAULT = "Default"
    NONE = "None"


class StartupPolicyType(str, Enum):
    LEADER_READY = "LeaderReady"
    LEADER_CREATED = "LeaderCreated"


class LeaderWorkerSetConditionType(str, Enum):
    AVAILABLE = "Available"
    PROGRESSING = "Progressing"
    UPGRADE_IN_PROGRESS = "UpgradeInProgress"


@dataclass
class SubGroupPolicy:
    """How pods of a group are split into subgroups."""

    sub_group_size: int | None = None


@dataclass
class NetworkConfig:
    """Network configuration of the groups."""

    subdomain_policy: SubdomainPolicy | None = None


@dataclass
class RollingUpdateConfiguration:
    """Limits applied during a rolling update; values are counts or percentages."""

    max_unavailable: IntOrString = 1
    max_surge: IntOrString = 0

    def __post_init__(self) -> None:
        self.max_unavailable = _int_or_string(self.max_unavailable, "maxUnavailable")
        self.max_surge = _int_or_string(self.max_surge, "maxSurge")


@dataclass
class RolloutStrategy:
    """Strategy used to update replicas after a template change."""

    type: RolloutStrategyType = RolloutStrategyType.ROLLING_UPDATE
    rolling_update_configuration: RollingUpdateConfiguration | None = None


@dataclass
class LeaderWorkerTemplate:
    """Pod templates and sizing of one leader-worker group."""

    worker_template: dict[str, Any] = field(default_factory=dict)
    leader_template: dict[str, Any] | None = None
    size: int | None = 1
    restart_policy: RestartPolicyType | None = RestartPolicyType.RECREATE_GROUP_ON_POD_RESTART
    sub_group_policy: SubGroupPolicy | None = None


@dataclass
class LeaderWorkerSetSpec:
    """Desired state of a LeaderWorkerSet."""

    leader_worker_template: LeaderWorkerTemplate = field(default_factory=LeaderWorkerTemplate)
    replicas: int | None = 1
    rollout_strategy: RolloutStrategy = field(default_factory=RolloutStrategy)
    startup_policy: StartupPolicyType | None = StartupPolicyType.LEADER_CREATED
    network_config: NetworkConfig | None = None


@dataclass
class LeaderWorkerSetStatus:
    """Observed state of a LeaderWorkerSet."""

    conditions: list[dict[str, Any]] = field(default_factory=list)
    ready_replicas: int = 0
    updated_replicas: int = 0
    replicas: int = 0
    hpa_pod_selector: str = ""


@dataclass
class LeaderWorkerSet:
    """A set of leader-worker pod groups."""

    metadata: dict[str, Any] = field(default_factory=dict)
    spec: LeaderWorkerSetSpec = field(default_factory=LeaderWorkerSetSpec)
    status: LeaderWorkerSetStatus = field(default_factory=LeaderWorkerSetStatus)

    @property
    def name(self) -> str:
        return self.metadata.get("name", "")

    @property
    def namespace(self) -> str:
        return self.metadata.get("namespace", "")

    @property
    def labels(self) -> dict[str, str]:
        return self.metadata.get("labels", {})

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": GROUP_VERSION.api_version,
            "kind": KIND,
            "metadata": copy.deepcopy(self.metadata),
            "spec": _spec_to_dict(self.spec),
            "status": _status_to_dict(self.status),
        }


@dataclass
class LeaderWorkerSetList:
    """A list of LeaderWorkerSet objects."""

    items: list[LeaderWorkerSet] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)

    def __iter__(self):
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def to_dict(self) -> dict[str, Any]:
        return {
            "apiVersion": GROUP_VERSION.api_version,
            "kind": LIST_KIND,
            "metadata": copy.deepcopy(self.metadata),
            "items": [item.to_dict() for item in self.items],
        }


def leader_worker_set_from_dict(data: Mapping[str, Any]) -> LeaderWorkerSet:
    """Build a LeaderWorkerSet from its JSON-shaped mapping."""
    data = _mapping(data, "LeaderWorkerSet")
    api_version = data.get("apiVersion")
    if api_version is not None and api_version != GROUP_VERSION.api_version:
        raise ValueError(f"unexpected apiVersion {api_version!r}")
    kind = data.get("kind")
    if kind is not None and kind != KIND:
        raise ValueError(f"unexpected kind {kind!r}")
    kwargs: dict[str, Any] = {}
    if data.get("metadata") is not None:
        kwargs["metadata"] = copy.deepcopy(dict(_mapping(data["metadata"], "metadata")))
    if data.get("spec") is not None:
        kwargs["spec"] = _spec_from_dict(data["spec"])
    if data.get("status") is not None:
        kwargs["status"] = _status_from_dict(data["status"])
    return LeaderWorkerSet(**kwargs)


def _mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise TypeError(f"{what} must be a mapping, got {type(value).__name__}")
    return value


def _int_or_string(value: Any, what: str) -> IntOrString:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise TypeError(f"{what} must be an int or a string, got {value!r}")
    return value


def _enum_value(value: Enum | None) -> str | None:
    return None if value is None else value.value


def _spec_to_dict(spec: LeaderWorkerSetSpec) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if spec.replicas is not None:
        out["replicas"] = spec.replicas
    out["leaderWorkerTemplate"] = _template_to_dict(spec.leader_worker_template)
    out["rolloutStrategy"] = _rollout_to_dict(spec.rollout_strategy)
    out["startupPolicy"] = _enum_value(spec.startup_policy) or ""
    if spec.network_config is not None:
        out["networkConfig"] = {
            "subdomainPolicy": _enum_value(spec.network_config.subdomain_policy)
        }
    return out


def _template_to_dict(template: LeaderWorkerTemplate) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if template.leader_template is not None:
        out["leaderTemplate"] = copy.deepcopy(template.leader_template)
    out["workerTemplate"] = copy.deepcopy(template.worker_template)
    if template.size is not None:
        out["size"] = template.size
    if template.restart_policy is not None:
        out["restartPolicy"] = template.restart_policy.value
    if template.sub_group_policy is not None:
        policy: dict[str, Any] = {}
        if template.sub_group_policy.sub_group_size is not None:
            policy["subGroupSize"] = template.sub_group_policy.sub_group_size
        out["subGroupPolicy"] = policy
    return out


def _rollout_to_dict(strategy: RolloutStrategy) -> dict[str, Any]:
    out: dict[str, Any] = {"type": strategy.type.value}
    config = strategy.rolling_update_configuration
    if config is not None:
        out["rollingUpdateConfiguration"] = {
            "maxUnavailable": config.max_unavailable,
            "maxSurge": config.max_surge,
        }
    return out


def _status_to_dict(status: LeaderWorkerSetStatus) -> dict[str, Any]:
    out: dict[str, Any] = {}
    if status.conditions:
        out["conditions"] = copy.deepcopy(status.conditions)
    if status.ready_replicas:
        out["readyReplicas"] = status.ready_replicas
    if status.updated_replicas:
        out["updatedReplicas"] = status.updated_replicas
    if status.replicas:
        out["replicas"] = status.replicas
    if status.hpa_pod_selector:
        out["hpaPodSelector"] = status.hpa_pod_selector
    return out


def _spec_from_dict(data: Any) -> LeaderWorkerSetSpec:
    data = _mapping(data, "spec")
    kwargs: dict[str, Any] = {}
    if "replicas" in data:
        kwargs["replicas"] = data["replicas"]
    if data.get("leaderWorkerTemplate") is not None:
        kwargs["leader_worker_template"] = _template_from_dict(data["leaderWorkerTemplate"])
    if data.get("rolloutStrategy") is not None:
        kwargs["rollout_strategy"] = _rollout_from_dict(data["rolloutStrategy"])
    if data.get("startupPolicy"):
        kwargs["startup_policy"] = StartupPolicyType(data["startupPolicy"])
    if data.get("networkConfig") is not None:
        network = _mapping(data["networkConfig"], "networkConfig")
        policy = network.get("subdomainPolicy")
        kwargs["network_config"] = NetworkConfig(
            SubdomainPolicy(policy) if policy is not None else None
        )
    return LeaderWorkerSetSpec(**kwargs)


def _template_from_dict(data: Any) -> LeaderWorkerTemplate:
    data = _mapping(data, "leaderWorkerTemplate")
    kwargs: dict[str, Any] = {}
    if data.get("workerTemplate") is not None:
        kwargs["worker_template"] = copy.deepcopy(
            dict(_mapping(data["workerTemplate"], "workerTemplate"))
        )
    if data.get("leaderTemplate") is not None:
        kwargs["leader_template"] = copy.deepcopy(
            dict(_mapping(data["leaderTemplate"], "leaderTemplate"))
        )
    if "size" in data:
        kwargs["size"] = data["size"]
    if data.get("restartPolicy"):
        kwargs["restart_policy"] = RestartPolicyType(data["restartPolicy"])
    if data.get("subGroupPolicy") is not None:
        policy = _mapping(data["subGroupPolicy"], "subGroupPolicy")
        kwargs["sub_group_policy"] = SubGroupPolicy(policy.get("subGroupSize"))
    return LeaderWorkerTemplate(**kwargs)


def _rollout_from_dict(data: Any) -> RolloutStrategy:
    data = _mapping(data, "rolloutStrategy")
    kwargs: dict[str, Any] = {}
    if data.get("type"):
        kwargs["type"] = RolloutStrategyType(data["type"])
    if data.get("rollingUpdateConfiguration") is not None:
        config = _mapping(data["rollingUpdateConfiguration"], "rollingUpdateConfiguration")
        config_kwargs: dict[str, Any] = {}
        if config.get("maxUnavailable") is not None:
            config_kwargs["max_unavailable"] = config["maxUnavailable"]
        if config.get("maxSurge") is not None:
            config_kwargs["max_surge"] = config["maxSurge"]
        kwargs["rolling_update_configuration"] = RollingUpdateConfiguration(**config_kwargs)
    return RolloutStrategy(**kwargs)


def _status_from_dict(data: Any) -> LeaderWorkerSetStatus:
    data = _mapping(data, "status")
    conditions = data.get("conditions") or []
    return LeaderWorkerSetStatus(
        conditions=[dict(_mapping(c, "condition")) for c in conditions],
        ready_replicas=data.get("readyReplicas", 0),
        updated_replicas=data.get("updatedReplicas", 0),
        replicas=data.get("replicas", 0),
        hpa_pod_selector=data.get("hpaPodSelector", ""),
    )
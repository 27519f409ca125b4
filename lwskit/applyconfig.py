"""Declarative apply configurations for the parts of a LeaderWorkerSet spec.

Each configuration holds only the fields that were set. The ``with_*``
methods set a field and return the configuration itself, so calls can be
chained; calling one twice keeps the value of the last call. ``to_dict``
renders the JSON-shaped body sent with a server-side apply, leaving out
every field that was never set.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Union

from lwskit.api import (
    RestartPolicyType,
    RolloutStrategyType,
    StartupPolicyType,
    SubdomainPolicy,
)

IntOrString = Union[int, str]


def _int(value: Any, what: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{what} must be an int, got {value!r}")
    return value


def _int_or_string(value: Any, what: str) -> IntOrString:
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise TypeError(f"{what} must be an int or a string, got {value!r}")
    return value


def _pod_template(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, Mapping):
        raise TypeError(f"{what} must be a mapping, got {type(value).__name__}")
    return copy.deepcopy(dict(value))


@dataclass
class SubGroupPolicyApplyConfiguration:
    """Apply configuration of a SubGroupPolicy."""

    sub_group_size: int | None = None

    def with_sub_group_size(self, value: int) -> SubGroupPolicyApplyConfiguration:
        self.sub_group_size = _int(value, "subGroupSize")
        return self

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.sub_group_size is not None:
            out["subGroupSize"] = self.sub_group_size
        return out


@dataclass
class NetworkConfigApplyConfiguration:
    """Apply configuration of a NetworkConfig."""

    subdomain_policy: SubdomainPolicy | None = None

    def with_subdomain_policy(
        self, value: SubdomainPolicy | str
    ) -> NetworkConfigApplyConfiguration:
        self.subdomain_policy = SubdomainPolicy(value)
        return self

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.subdomain_policy is not None:
            out["subdomainPolicy"] = self.subdomain_policy.value
        return out


@dataclass
class RollingUpdateConfigurationApplyConfiguration:
    """Apply configuration of a RollingUpdateConfiguration."""

    max_unavailable: IntOrString | None = None
    max_surge: IntOrString | None = None

    def with_max_unavailable(
        self, value: IntOrString
    ) -> RollingUpdateConfigurationApplyConfiguration:
        self.max_unavailable = _int_or_string(value, "maxUnavailable")
        return self

    def with_max_surge(
        self, value: IntOrString
    ) -> RollingUpdateConfigurationApplyConfiguration:
        self.max_surge = _int_or_string(value, "maxSurge")
        return self

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.max_unavailable is not None:
            out["maxUnavailable"] = self.max_unavailable
        if self.max_surge is not None:
            out["maxSurge"] = self.max_surge
        return out


@dataclass
class RolloutStrategyApplyConfiguration:
    """Apply configuration of a RolloutStrategy."""

    type: RolloutStrategyType | None = None
    rolling_update_configuration: RollingUpdateConfigurationApplyConfiguration | None = None

    def with_type(
        self, value: RolloutStrategyType | str
    ) -> RolloutStrategyApplyConfiguration:
        self.type = RolloutStrategyType(value)
        return self

    def with_rolling_update_configuration(
        self, value: RollingUpdateConfigurationApplyConfiguration | None
    ) -> RolloutStrategyApplyConfiguration:
        self.rolling_update_configuration = value
        return self

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.type is not None:
            out["type"] = self.type.value
        if self.rolling_update_configuration is not None:
            out["rollingUpdateConfiguration"] = self.rolling_update_configuration.to_dict()
        return out


@dataclass
class LeaderWorkerTemplateApplyConfiguration:
    """Apply configuration of a LeaderWorkerTemplate."""

    leader_template: dict[str, Any] | None = None
    worker_template: dict[str, Any] | None = None
    size: int | None = None
    restart_policy: RestartPolicyType | None = None
    sub_group_policy: SubGroupPolicyApplyConfiguration | None = None

    def with_leader_template(
        self, value: Mapping[str, Any]
    ) -> LeaderWorkerTemplateApplyConfiguration:
        self.leader_template = _pod_template(value, "leaderTemplate")
        return self

    def with_worker_template(
        self, value: Mapping[str, Any]
    ) -> LeaderWorkerTemplateApplyConfiguration:
        self.worker_template = _pod_template(value, "workerTemplate")
        return self

    def with_size(self, value: int) -> LeaderWorkerTemplateApplyConfiguration:
        self.size = _int(value, "size")
        return self

    def with_restart_policy(
        self, value: RestartPolicyType | str
    ) -> LeaderWorkerTemplateApplyConfiguration:
        self.restart_policy = RestartPolicyType(value)
        return self

    def with_sub_group_policy(
        self, value: SubGroupPolicyApplyConfiguration | None
    ) -> LeaderWorkerTemplateApplyConfiguration:
        self.sub_group_policy = value
        return self

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.leader_template is not None:
            out["leaderTemplate"] = copy.deepcopy(self.leader_template)
        if self.worker_template is not None:
            out["workerTemplate"] = copy.deepcopy(self.worker_template)
        if self.size is not None:
            out["size"] = self.size
        if self.restart_policy is not None:
            out["restartPolicy"] = self.restart_policy.value
        if self.sub_group_policy is not None:
            out["subGroupPolicy"] = self.sub_group_policy.to_dict()
        return out


@dataclass
class LeaderWorkerSetSpecApplyConfiguration:
    """Apply configuration of a LeaderWorkerSetSpec."""

    replicas: int | None = None
    leader_worker_template: LeaderWorkerTemplateApplyConfiguration | None = None
    rollout_strategy: RolloutStrategyApplyConfiguration | None = None
    startup_policy: StartupPolicyType | None = None
    network_config: NetworkConfigApplyConfiguration | None = None

    def with_replicas(self, value: int) -> LeaderWorkerSetSpecApplyConfiguration:
        self.replicas = _int(value, "replicas")
        return self

    def with_leader_worker_template(
        self, value: LeaderWorkerTemplateApplyConfiguration | None
    ) -> LeaderWorkerSetSpecApplyConfiguration:
        self.leader_worker_template = value
        return self

    def with_rollout_strategy(
        self, value: RolloutStrategyApplyConfiguration | None
    ) -> LeaderWorkerSetSpecApplyConfiguration:
        self.rollout_strategy = value
        return self

    def with_startup_policy(
        self, value: StartupPolicyType | str
    ) -> LeaderWorkerSetSpecApplyConfiguration:
        self.startup_policy = StartupPolicyType(value)
        return self

    def with_network_config(
        self, value: NetworkConfigApplyConfiguration | None
    ) -> LeaderWorkerSetSpecApplyConfiguration:
        self.network_config = value
        return self

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.replicas is not None:
            out["replicas"] = self.replicas
        if self.leader_worker_template is not None:
            out["leaderWorkerTemplate"] = self.leader_worker_template.to_dict()
        if self.rollout_strategy is not None:
            out["rolloutStrategy"] = self.rollout_strategy.to_dict()
        if self.startup_policy is not None:
            out["startupPolicy"] = self.startup_policy.value
        if self.network_config is not None:
            out["networkConfig"] = self.network_config.to_dict()
        return out


def sub_group_policy() -> SubGroupPolicyApplyConfiguration:
    """Start an empty SubGroupPolicy apply configuration."""
    return SubGroupPolicyApplyConfiguration()


def network_config() -> NetworkConfigApplyConfiguration:
    """Start an empty NetworkConfig apply configuration."""
    return NetworkConfigApplyConfiguration()


def rolling_update_configuration() -> RollingUpdateConfigurationApplyConfiguration:
    """Start an empty RollingUpdateConfiguration apply configuration."""
    return RollingUpdateConfigurationApplyConfiguration()


def rollout_strategy() -> RolloutStrategyApplyConfiguration:
    """Start an empty RolloutStrategy apply configuration."""
    return RolloutStrategyApplyConfiguration()


def leader_worker_template() -> LeaderWorkerTemplateApplyConfiguration:
    """Start an empty LeaderWorkerTemplate apply configuration."""
    return LeaderWorkerTemplateApplyConfiguration()


def leader_worker_set_spec() -> LeaderWorkerSetSpecApplyConfiguration:
    """Start an empty LeaderWorkerSetSpec apply configuration."""
    return LeaderWorkerSetSpecApplyConfiguration()
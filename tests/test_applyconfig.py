import pytest

from lwskit.api import (
    RestartPolicyType,
    RolloutStrategyType,
    StartupPolicyType,
    SubdomainPolicy,
)
from lwskit.applyconfig import (
    LeaderWorkerSetSpecApplyConfiguration,
    leader_worker_set_spec,
    leader_worker_template,
    network_config,
    rolling_update_configuration,
    rollout_strategy,
    sub_group_policy,
)


@pytest.mark.parametrize(
    "factory",
    [
        sub_group_policy,
        network_config,
        rolling_update_configuration,
        rollout_strategy,
        leader_worker_template,
        leader_worker_set_spec,
    ],
)
def test_fresh_configuration_renders_empty(factory):
    assert factory().to_dict() == {}


def test_sub_group_policy_last_call_wins():
    policy = sub_group_policy()
    assert policy.with_sub_group_size(2) is policy
    policy.with_sub_group_size(4)
    assert policy.to_dict() == {"subGroupSize": 4}


def test_sub_group_size_rejects_non_int():
    with pytest.raises(TypeError):
        sub_group_policy().with_sub_group_size("2")
    with pytest.raises(TypeError):
        sub_group_policy().with_sub_group_size(True)


def test_network_config_accepts_string_and_enum():
    config = network_config().with_subdomain_policy("UniquePerReplica")
    assert config.subdomain_policy is SubdomainPolicy.UNIQUE_PER_REPLICA
    config.with_subdomain_policy(SubdomainPolicy.SHARED)
    assert config.to_dict() == {"subdomainPolicy": "Shared"}


def test_network_config_rejects_unknown_policy():
    with pytest.raises(ValueError):
        network_config().with_subdomain_policy("Everywhere")


def test_rolling_update_int_and_percentage():
    config = rolling_update_configuration().with_max_unavailable("30%").with_max_surge(2)
    assert config.to_dict() == {"maxUnavailable": "30%", "maxSurge": 2}


def test_rolling_update_only_set_fields_rendered():
    config = rolling_update_configuration().with_max_surge("10%")
    assert config.to_dict() == {"maxSurge": "10%"}


def test_rolling_update_rejects_other_types():
    with pytest.raises(TypeError):
        rolling_update_configuration().with_max_surge(1.5)
    with pytest.raises(TypeError):
        rolling_update_configuration().with_max_unavailable(None)


def test_rollout_strategy_nests_rolling_update():
    update = rolling_update_configuration().with_max_unavailable(1)
    strategy = rollout_strategy().with_type("RollingUpdate").with_rolling_update_configuration(update)
    assert strategy.type is RolloutStrategyType.ROLLING_UPDATE
    assert strategy.to_dict() == {
        "type": "RollingUpdate",
        "rollingUpdateConfiguration": update.to_dict(),
    }


def test_rollout_strategy_rejects_unknown_type():
    with pytest.raises(ValueError):
        rollout_strategy().with_type("Recreate")


def test_template_copies_pod_templates():
    pod = {"spec": {"containers": [{"name": "worker", "image": "busybox"}]}}
    template = leader_worker_template().with_worker_template(pod)
    pod["spec"]["containers"].append({"name": "extra"})
    assert template.to_dict()["workerTemplate"]["spec"]["containers"] == [
        {"name": "worker", "image": "busybox"}
    ]


def test_template_full_render():
    leader_pod = {"metadata": {"labels": {"role": "leader"}}}
    worker_pod = {"metadata": {"labels": {"role": "worker"}}}
    policy = sub_group_policy().with_sub_group_size(2)
    template = (
        leader_worker_template()
        .with_leader_template(leader_pod)
        .with_worker_template(worker_pod)
        .with_size(4)
        .with_restart_policy(RestartPolicyType.NONE)
        .with_sub_group_policy(policy)
    )
    assert template.to_dict() == {
        "leaderTemplate": leader_pod,
        "workerTemplate": worker_pod,
        "size": 4,
        "restartPolicy": "None",
        "subGroupPolicy": {"subGroupSize": 2},
    }


def test_template_restart_policy_from_string():
    template = leader_worker_template().with_restart_policy("RecreateGroupOnPodRestart")
    assert template.restart_policy is RestartPolicyType.RECREATE_GROUP_ON_POD_RESTART


def test_template_rejects_bad_values():
    with pytest.raises(TypeError):
        leader_worker_template().with_worker_template(["not", "a", "mapping"])
    with pytest.raises(ValueError):
        leader_worker_template().with_restart_policy("Always")


def test_spec_full_render_and_chaining():
    template = leader_worker_template().with_size(3)
    strategy = rollout_strategy().with_type(RolloutStrategyType.ROLLING_UPDATE)
    net = network_config().with_subdomain_policy(SubdomainPolicy.SHARED)
    spec = leader_worker_set_spec()
    result = (
        spec.with_replicas(2)
        .with_leader_worker_template(template)
        .with_rollout_strategy(strategy)
        .with_startup_policy("LeaderReady")
        .with_network_config(net)
    )
    assert result is spec
    assert isinstance(spec, LeaderWorkerSetSpecApplyConfiguration)
    assert spec.startup_policy is StartupPolicyType.LEADER_READY
    assert spec.to_dict() == {
        "replicas": 2,
        "leaderWorkerTemplate": {"size": 3},
        "rolloutStrategy": {"type": "RollingUpdate"},
        "startupPolicy": "LeaderReady",
        "networkConfig": {"subdomainPolicy": "Shared"},
    }


def test_spec_reset_nested_to_none_removes_it():
    spec = leader_worker_set_spec().with_network_config(network_config())
    assert "networkConfig" in spec.to_dict()
    spec.with_network_config(None)
    assert spec.to_dict() == {}


def test_spec_rejects_bad_values():
    with pytest.raises(TypeError):
        leader_worker_set_spec().with_replicas("3")
    with pytest.raises(ValueError):
        leader_worker_set_spec().with_startup_policy("LeaderGone")


def test_spec_dict_is_independent_of_later_changes():
    template = leader_worker_template().with_worker_template({"a": {"b": 1}})
    spec = leader_worker_set_spec().with_leader_worker_template(template)
    rendered = spec.to_dict()
    rendered["leaderWorkerTemplate"]["workerTemplate"]["a"]["b"] = 99
    assert template.worker_template == {"a": {"b": 1}}
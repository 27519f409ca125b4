from datetime import datetime, timezone

import pytest

from lwskit.api import GROUP_VERSION, GroupVersion
from lwskit.apply import (
    LeaderWorkerSetApplyConfiguration,
    LeaderWorkerSetStatusApplyConfiguration,
    ObjectMetaApplyConfiguration,
    for_kind,
    leader_worker_set,
    leader_worker_set_status,
)
from lwskit.applyconfig import (
    LeaderWorkerSetSpecApplyConfiguration,
    LeaderWorkerTemplateApplyConfiguration,
    NetworkConfigApplyConfiguration,
    RollingUpdateConfigurationApplyConfiguration,
    RolloutStrategyApplyConfiguration,
    SubGroupPolicyApplyConfiguration,
    leader_worker_set_spec,
)


def test_leader_worker_set_constructor_sets_type_and_identity():
    lws = leader_worker_set("my-lws", "default")
    assert lws.to_dict() == {
        "kind": "LeaderWorkerSet",
        "apiVersion": "leaderworkerset.x-k8s.io/v1",
        "metadata": {"name": "my-lws", "namespace": "default"},
    }
    assert lws.name == "my-lws"


def test_empty_configuration_renders_empty():
    lws = LeaderWorkerSetApplyConfiguration()
    assert lws.to_dict() == {}
    assert lws.name is None


def test_last_call_wins_for_scalars():
    lws = leader_worker_set("a", "ns").with_name("b").with_generation(3).with_generation(5)
    meta = lws.to_dict()["metadata"]
    assert meta["name"] == "b"
    assert meta["generation"] == 5


def test_labels_merge_and_overwrite():
    lws = leader_worker_set("a", "ns")
    lws.with_labels({"x": "1", "y": "2"}).with_labels({"y": "3"})
    assert lws.to_dict()["metadata"]["labels"] == {"x": "1", "y": "3"}


def test_empty_labels_are_not_rendered():
    lws = leader_worker_set("a", "ns").with_labels({}).with_annotations({})
    meta = lws.to_dict()["metadata"]
    assert "labels" not in meta
    assert "annotations" not in meta


def test_annotations_merge():
    lws = leader_worker_set("a", "ns").with_annotations({"k": "v"}).with_annotations({"k2": "v2"})
    assert lws.to_dict()["metadata"]["annotations"] == {"k": "v", "k2": "v2"}


def test_finalizers_and_owner_references_append():
    ref = {"apiVersion": "v1", "kind": "Pod", "name": "p", "uid": "u"}
    lws = (
        leader_worker_set("a", "ns")
        .with_finalizers("f1")
        .with_finalizers("f2", "f3")
        .with_owner_references(ref)
        .with_owner_references(ref)
    )
    meta = lws.to_dict()["metadata"]
    assert meta["finalizers"] == ["f1", "f2", "f3"]
    assert meta["ownerReferences"] == [ref, ref]


def test_owner_reference_none_raises():
    with pytest.raises(ValueError):
        leader_worker_set("a", "ns").with_owner_references(None)


def test_metadata_created_on_demand():
    lws = LeaderWorkerSetApplyConfiguration().with_uid("abc")
    assert lws.metadata == ObjectMetaApplyConfiguration(uid="abc")
    assert lws.to_dict() == {"metadata": {"uid": "abc"}}


def test_timestamps_rendered_rfc3339():
    moment = datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
    lws = leader_worker_set("a", "ns").with_creation_timestamp(moment)
    lws.with_deletion_timestamp("2024-01-02T03:04:05Z")
    meta = lws.to_dict()["metadata"]
    assert meta["creationTimestamp"] == "2024-01-02T03:04:05Z"
    assert meta["deletionTimestamp"] == meta["creationTimestamp"]


def test_invalid_types_raise():
    lws = leader_worker_set("a", "ns")
    with pytest.raises(TypeError):
        lws.with_generation("1")
    with pytest.raises(TypeError):
        lws.with_deletion_grace_period_seconds(True)
    with pytest.raises(TypeError):
        lws.with_creation_timestamp(12)


def test_spec_and_status_nested():
    spec = leader_worker_set_spec().with_replicas(2)
    status = leader_worker_set_status().with_ready_replicas(1)
    lws = leader_worker_set("a", "ns").with_spec(spec).with_status(status)
    body = lws.to_dict()
    assert body["spec"] == {"replicas": 2}
    assert body["status"] == {"readyReplicas": 1}


def test_status_fields():
    cond = {"type": "Available", "status": "True"}
    status = (
        leader_worker_set_status()
        .with_conditions(cond)
        .with_conditions({"type": "Progressing", "status": "False"})
        .with_replicas(3)
        .with_updated_replicas(2)
        .with_hpa_pod_selector("leaderworkerset.sigs.k8s.io/name=a")
    )
    body = status.to_dict()
    assert [c["type"] for c in body["conditions"]] == ["Available", "Progressing"]
    assert body["replicas"] == 3
    assert body["updatedReplicas"] == 2
    assert body["hpaPodSelector"] == "leaderworkerset.sigs.k8s.io/name=a"


def test_status_conditions_are_copied():
    cond = {"type": "Available"}
    status = leader_worker_set_status().with_conditions(cond)
    cond["type"] = "changed"
    assert status.to_dict()["conditions"] == [{"type": "Available"}]


def test_status_none_condition_raises():
    with pytest.raises(ValueError):
        leader_worker_set_status().with_conditions(None)


def test_empty_status_renders_empty():
    assert LeaderWorkerSetStatusApplyConfiguration().to_dict() == {}


@pytest.mark.parametrize(
    "kind, cls",
    [
        ("LeaderWorkerSet", LeaderWorkerSetApplyConfiguration),
        ("LeaderWorkerSetSpec", LeaderWorkerSetSpecApplyConfiguration),
        ("LeaderWorkerSetStatus", LeaderWorkerSetStatusApplyConfiguration),
        ("LeaderWorkerTemplate", LeaderWorkerTemplateApplyConfiguration),
        ("NetworkConfig", NetworkConfigApplyConfiguration),
        ("RollingUpdateConfiguration", RollingUpdateConfigurationApplyConfiguration),
        ("RolloutStrategy", RolloutStrategyApplyConfiguration),
        ("SubGroupPolicy", SubGroupPolicyApplyConfiguration),
    ],
)
def test_for_kind_known(kind, cls):
    result = for_kind(GROUP_VERSION.with_kind(kind))
    assert isinstance(result, cls)
    assert result.to_dict() == {}


def test_for_kind_unknown():
    assert for_kind(GROUP_VERSION.with_kind("Pod")) is None
    assert for_kind(GroupVersion("apps", "v1").with_kind("LeaderWorkerSet")) is None


def test_for_kind_returns_fresh_instances():
    gvk = GROUP_VERSION.with_kind("LeaderWorkerSet")
    first = for_kind(gvk)
    first.with_name("x")
    assert for_kind(gvk).to_dict() == {}
"""Shared fixtures: a small web shop namespace."""

import pytest

from astrolabe.core.schema import parse_resource


@pytest.fixture
def shop_nodes():
    """Raw snapshot nodes in the provider's wire format (camelCase)."""
    return [
        {"uid": "ing1", "kind": "Ingress", "name": "web", "namespace": "shop", "status": "Ready"},
        {"uid": "svc1", "kind": "Service", "name": "web", "namespace": "shop", "status": "Ready"},
        {
            "uid": "ep1",
            "kind": "Endpoints",
            "name": "web",
            "namespace": "shop",
            "targetPods": ["web-abc-1", "web-abc-2"],
        },
        {
            "uid": "d1",
            "kind": "Deployment",
            "name": "web",
            "namespace": "shop",
            "status": "Ready",
            "usedConfigMaps": ["web-config"],
            "usedSecrets": ["web-secret"],
            "serviceAccountName": "web-sa",
            "replicasDesired": 2,
            "replicasReady": 2,
        },
        {
            "uid": "rs1",
            "kind": "ReplicaSet",
            "name": "web-abc",
            "namespace": "shop",
            "ownerReferences": [{"kind": "Deployment", "name": "web"}],
        },
        {
            "uid": "p1",
            "kind": "Pod",
            "name": "web-abc-1",
            "namespace": "shop",
            "status": "Ready",
            "ownerReferences": [{"kind": "ReplicaSet", "name": "web-abc"}],
            "usedConfigMaps": ["web-config"],
            "mountedPVCs": ["data"],
        },
        {
            "uid": "p2",
            "kind": "Pod",
            "name": "web-abc-2",
            "namespace": "shop",
            "status": "Pending",
            "ownerReferences": [{"kind": "ReplicaSet", "name": "web-abc"}],
            "usedConfigMaps": ["web-config"],
            "mountedPVCs": ["data"],
        },
        {"uid": "cm1", "kind": "ConfigMap", "name": "web-config", "namespace": "shop"},
        {"uid": "sec1", "kind": "Secret", "name": "web-secret", "namespace": "shop"},
        {"uid": "sa1", "kind": "ServiceAccount", "name": "web-sa", "namespace": "shop"},
        {
            "uid": "pvc1",
            "kind": "PersistentVolumeClaim",
            "name": "data",
            "namespace": "shop",
            "volumeName": "pv-data",
        },
        {
            "uid": "pv1",
            "kind": "PersistentVolume",
            "name": "pv-data",
            "isClusterScoped": True,
            "claimRef": {"name": "data", "namespace": "shop"},
            "storageClassName": "standard",
        },
        {"uid": "sc1", "kind": "StorageClass", "name": "standard", "isClusterScoped": True},
        {"uid": "hpa1", "kind": "HorizontalPodAutoscaler", "name": "web", "namespace": "shop"},
    ]


@pytest.fixture
def shop(shop_nodes):
    """Parsed shop resources."""
    return [parse_resource(n) for n in shop_nodes]


@pytest.fixture
def by_uid(shop):
    return {r.uid: r for r in shop}

from unittest import mock

import pytest
from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import MaxRetryError

from hpatuner.errors import ConflictError, InvalidPolicyError, NotFoundError, TransientIOError, from_api_exception
from hpatuner.kube import AutoscalerAccessor, TuningPolicyStore, build_apply_patch
from hpatuner.types import NamespacedName, TargetAutoscaler, TuningPolicy

KEY = NamespacedName("apps", "web-hpa")
SCALE_REF = {"apiVersion": "apps/v1", "kind": "Deployment", "name": "web"}

def make_hpa(min_replicas=2, max_replicas=10):
    return client.V2HorizontalPodAutoscaler(
        api_version="autoscaling/v2",
        kind="HorizontalPodAutoscaler",
        metadata=client.V1ObjectMeta(name="web-hpa", namespace="apps", resource_version="7"),
        spec=client.V2HorizontalPodAutoscalerSpec(
            min_replicas=min_replicas,
            max_replicas=max_replicas,
            scale_target_ref=client.V2CrossVersionObjectReference(api_version="apps/v1", kind="Deployment", name="web"),
            metrics=[],
        ),
    )

@pytest.fixture
def api():
    return mock.MagicMock()

@pytest.fixture
def accessor(api):
    return AutoscalerAccessor(api=api, field_manager="hpatuner-controller", timeout=3)

@pytest.fixture
def target():
    return TargetAutoscaler("web-hpa", "apps", 2, 10, dict(SCALE_REF))

def test_get_target_reads_bounds_and_scale_ref(accessor, api):
    api.read_namespaced_horizontal_pod_autoscaler.return_value = make_hpa()

    target = accessor.get_target(KEY)

    assert target == TargetAutoscaler("web-hpa", "apps", 2, 10, SCALE_REF)
    api.read_namespaced_horizontal_pod_autoscaler.assert_called_once_with(
        name="web-hpa", namespace="apps", _request_timeout=3,
    )

def test_unset_min_replicas_defaults_to_one(accessor, api):
    api.read_namespaced_horizontal_pod_autoscaler.return_value = make_hpa(min_replicas=None)

    assert accessor.get_target(KEY).min_replicas == 1

@pytest.mark.parametrize(
    "status, expected",
    [(404, NotFoundError), (409, ConflictError), (500, TransientIOError), (403, TransientIOError)],
)
def test_get_target_maps_api_errors(accessor, api, status, expected):
    api.read_namespaced_horizontal_pod_autoscaler.side_effect = ApiException(status=status, reason="boom")

    with pytest.raises(expected):
        accessor.get_target(KEY)

def test_transport_failure_is_transient(accessor, api):
    api.read_namespaced_horizontal_pod_autoscaler.side_effect = MaxRetryError(None, "/apis", "connection refused")

    with pytest.raises(TransientIOError):
        accessor.get_target(KEY)

def test_apply_patch_carries_only_owned_fields(target):
    patch = build_apply_patch(target, 4, 10)

    assert patch == {
        "apiVersion": "autoscaling/v2",
        "kind": "HorizontalPodAutoscaler",
        "metadata": {"name": "web-hpa", "namespace": "apps"},
        "spec": {"scaleTargetRef": SCALE_REF, "minReplicas": 4, "maxReplicas": 10},
    }

def test_apply_bounds_uses_forced_server_side_apply(accessor, api, target):
    accessor.apply_bounds(target, 4, 10)

    api.patch_namespaced_horizontal_pod_autoscaler.assert_called_once_with(
        name="web-hpa",
        namespace="apps",
        body=build_apply_patch(target, 4, 10),
        field_manager="hpatuner-controller",
        force=True,
        _content_type="application/apply-patch+yaml",
        _request_timeout=3,
    )

def test_reapplying_bounds_sends_the_same_apply(accessor, api, target):
    accessor.apply_bounds(target, 4, 10)
    accessor.apply_bounds(target, 4, 10)

    first, second = api.patch_namespaced_horizontal_pod_autoscaler.call_args_list
    assert first == second

@pytest.mark.parametrize("status, expected", [(409, ConflictError), (404, NotFoundError), (422, TransientIOError)])
def test_apply_bounds_maps_api_errors(accessor, api, target, status, expected):
    api.patch_namespaced_horizontal_pod_autoscaler.side_effect = ApiException(status=status, reason="boom")

    with pytest.raises(expected):
        accessor.apply_bounds(target, 4, 10)

def tuner_object():
    return {
        "apiVersion": "mycrds.akmusa.com/v1alpha1",
        "kind": "HpaTuner",
        "metadata": {"name": "web-tuner", "namespace": "default", "resourceVersion": "41"},
        "spec": {
            "hpaName": "web-hpa",
            "hpaNamespace": "apps",
            "metricEndpoint": "http://metrics.local/error-rate",
            "metricThreshold": 5,
            "hpaMaxReplicas": 10,
        },
    }

def test_store_get_parses_the_policy():
    api = mock.MagicMock()
    api.get_namespaced_custom_object.return_value = tuner_object()
    store = TuningPolicyStore(api=api, timeout=3)

    policy = store.get(NamespacedName("default", "web-tuner"))

    assert policy.target_key == KEY
    assert policy.metric_threshold == 5
    assert policy.max_ceiling == 10
    api.get_namespaced_custom_object.assert_called_once_with(
        group="mycrds.akmusa.com", version="v1alpha1", namespace="default",
        plural="hpatuners", name="web-tuner", _request_timeout=3,
    )

def test_store_get_missing_object():
    api = mock.MagicMock()
    api.get_namespaced_custom_object.side_effect = ApiException(status=404, reason="Not Found")

    with pytest.raises(NotFoundError):
        TuningPolicyStore(api=api).get(NamespacedName("default", "web-tuner"))

def test_store_update_status_replaces_status_with_resource_version():
    api = mock.MagicMock()
    store = TuningPolicyStore(api=api)
    policy = TuningPolicy.from_object(tuner_object())
    status = {"lastObservedMin": 4, "lastObservedMax": 10, "lastMetricValue": "7.00",
              "lastUpdateTime": "2026-10-18T12:00:00Z"}

    store.update_status(policy, status)

    kwargs = api.replace_namespaced_custom_object_status.call_args.kwargs
    assert kwargs["name"] == "web-tuner"
    assert kwargs["body"]["status"] == status
    assert kwargs["body"]["metadata"]["resourceVersion"] == "41"
    # The policy's own copy of the object is untouched.
    assert "status" not in policy.body

def test_store_update_status_conflict():
    api = mock.MagicMock()
    api.replace_namespaced_custom_object_status.side_effect = ApiException(status=409, reason="Conflict")
    store = TuningPolicyStore(api=api)

    with pytest.raises(ConflictError):
        store.update_status(TuningPolicy.from_object(tuner_object()), {})

@pytest.mark.parametrize(
    "field, value",
    [("metricThreshold", "5"), ("hpaMaxReplicas", 2.5), ("hpaMaxReplicas", 0), ("hpaName", ""), ("metricEndpoint", None)],
)
def test_invalid_specs_are_rejected(field, value):
    obj = tuner_object()
    obj["spec"][field] = value

    with pytest.raises(InvalidPolicyError):
        TuningPolicy.from_object(obj)

def test_untranslatable_error_is_a_type_error():
    with pytest.raises(TypeError):
        from_api_exception(ValueError("bad"), "HpaTuner default/web-tuner")

from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from hpatuner.constants import (
    APPLY_PATCH_CONTENT_TYPE,
    DEFAULT_KUBE_TIMEOUT,
    FIELD_MANAGER,
    HPA_API_VERSION,
    HPA_KIND,
)
from hpatuner.errors import from_api_exception
from hpatuner.types import NamespacedName, TargetAutoscaler

def build_apply_patch(target: TargetAutoscaler, desired_min: int, desired_max: int) -> dict:
    """Builds the server-side apply body for the replica bounds.

    Only identity, the unchanged scaleTargetRef (required by validation) and the
    two bounds are included, so the field manager never claims anything else.
    """

    return {
        "apiVersion": HPA_API_VERSION,
        "kind": HPA_KIND,
        "metadata": {
            "name": target.name,
            "namespace": target.namespace,
        },
        "spec": {
            "scaleTargetRef": dict(target.scale_target_ref),
            "minReplicas": desired_min,
            "maxReplicas": desired_max,
        },
    }

class AutoscalerAccessor:
    """Reads HorizontalPodAutoscalers and applies the bounds this operator owns."""

    def __init__(self, api=None, field_manager=FIELD_MANAGER, timeout=DEFAULT_KUBE_TIMEOUT):
        self.api = api or client.AutoscalingV2Api()
        self.field_manager = field_manager
        self.timeout = timeout
        self._serializer = client.ApiClient()

    def get_target(self, key: NamespacedName) -> TargetAutoscaler:
        try:
            hpa = self.api.read_namespaced_horizontal_pod_autoscaler(
                name=key.name,
                namespace=key.namespace,
                _request_timeout=self.timeout,
            )
        except (ApiException, HTTPError, OSError) as e:
            raise from_api_exception(e, f"HorizontalPodAutoscaler {key}") from e

        return self.to_target(hpa)

    def to_target(self, hpa) -> TargetAutoscaler:
        """Converts a V2HorizontalPodAutoscaler (or its dict form) into a TargetAutoscaler."""

        if not isinstance(hpa, dict):
            hpa = self._serializer.sanitize_for_serialization(hpa)

        metadata = hpa.get("metadata") or {}
        spec = hpa.get("spec") or {}
        min_replicas = spec.get("minReplicas")

        return TargetAutoscaler(
            name=metadata["name"],
            namespace=metadata["namespace"],
            # The API server defaults an unset minReplicas to 1.
            min_replicas=1 if min_replicas is None else min_replicas,
            max_replicas=spec["maxReplicas"],
            scale_target_ref=spec.get("scaleTargetRef") or {},
        )

    def apply_bounds(self, target: TargetAutoscaler, desired_min: int, desired_max: int) -> None:
        body = build_apply_patch(target, desired_min, desired_max)
        try:
            self.api.patch_namespaced_horizontal_pod_autoscaler(
                name=target.name,
                namespace=target.namespace,
                body=body,
                field_manager=self.field_manager,
                force=True,
                _content_type=APPLY_PATCH_CONTENT_TYPE,
                _request_timeout=self.timeout,
            )
        except (ApiException, HTTPError, OSError) as e:
            raise from_api_exception(e, f"HorizontalPodAutoscaler {target.key}") from e

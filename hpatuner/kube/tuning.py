import copy

from kubernetes import client
from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

from hpatuner.constants import DEFAULT_KUBE_TIMEOUT, GROUP, PLURAL, VERSION
from hpatuner.errors import from_api_exception
from hpatuner.types import NamespacedName, TuningPolicy

class TuningPolicyStore:
    """Reads HpaTuner objects and replaces their status subresource."""

    def __init__(self, api=None, group=GROUP, version=VERSION, plural=PLURAL, timeout=DEFAULT_KUBE_TIMEOUT):
        self.api = api or client.CustomObjectsApi()
        self.group = group
        self.version = version
        self.plural = plural
        self.timeout = timeout

    def get(self, key: NamespacedName) -> TuningPolicy:
        try:
            obj = self.api.get_namespaced_custom_object(
                group=self.group,
                version=self.version,
                namespace=key.namespace,
                plural=self.plural,
                name=key.name,
                _request_timeout=self.timeout,
            )
        except (ApiException, HTTPError, OSError) as e:
            raise from_api_exception(e, f"HpaTuner {key}") from e

        return TuningPolicy.from_object(obj)

    def update_status(self, policy: TuningPolicy, status: dict) -> dict:
        """Replaces the status of ``policy`` with ``status``.

        The body carries the resourceVersion that was read, so a concurrent
        writer makes this fail with a conflict instead of being overwritten.
        """

        body = copy.deepcopy(policy.body)
        body["status"] = status
        try:
            return self.api.replace_namespaced_custom_object_status(
                group=self.group,
                version=self.version,
                namespace=policy.key.namespace,
                plural=self.plural,
                name=policy.key.name,
                body=body,
                _request_timeout=self.timeout,
            )
        except (ApiException, HTTPError, OSError) as e:
            raise from_api_exception(e, f"HpaTuner {policy.key} status") from e

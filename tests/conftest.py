"""
Shared pytest fixtures: in-memory stand-ins for the API server, the metric
endpoint and the event sink.
"""

import copy

import pytest

from hpatuner.controller import HpaTunerReconciler
from hpatuner.errors import ConflictError, NotFoundError, TransientIOError
from hpatuner.events import EventSink
from hpatuner.kube import build_apply_patch
from hpatuner.logger import TunerLogger
from hpatuner.types import NamespacedName, TargetAutoscaler, TuningPolicy

POLICY_KEY = NamespacedName("default", "web-tuner")
TARGET_KEY = NamespacedName("apps", "web-hpa")
ENDPOINT = "http://metrics.local/error-rate"

def make_policy_object(key=POLICY_KEY, target=TARGET_KEY, threshold=5, ceiling=10, endpoint=ENDPOINT):
    return {
        "apiVersion": "mycrds.akmusa.com/v1alpha1",
        "kind": "HpaTuner",
        "metadata": {
            "name": key.name,
            "namespace": key.namespace,
            "uid": "0b8e7f4e-1111-2222-3333-444455556666",
            "resourceVersion": "41",
        },
        "spec": {
            "hpaName": target.name,
            "hpaNamespace": target.namespace,
            "metricEndpoint": endpoint,
            "metricThreshold": threshold,
            "hpaMaxReplicas": ceiling,
        },
    }

class FakeStore:
    """HpaTuner objects kept in a dict, with status writes recorded."""

    def __init__(self):
        self.objects = {}
        self.statuses = []
        self.status_error = None

    def add(self, obj):
        meta = obj["metadata"]
        self.objects[NamespacedName(meta["namespace"], meta["name"])] = obj

    def get(self, key):
        if key not in self.objects:
            raise NotFoundError(f"HpaTuner {key} not found")
        return TuningPolicy.from_object(copy.deepcopy(self.objects[key]))

    def update_status(self, policy, status):
        if self.status_error is not None:
            raise self.status_error
        self.statuses.append((policy.key, status))
        self.objects[policy.key]["status"] = status
        return self.objects[policy.key]

class FakeAccessor:
    """HPAs kept in a dict. Apply errors are consumed one per call from ``apply_errors``.

    ``on_conflict`` runs before each scripted conflict, to play the concurrent writer.
    """

    def __init__(self):
        self.targets = {}
        self.patches = []
        self.apply_errors = []
        self.on_conflict = None

    def add(self, key=TARGET_KEY, min_replicas=2, max_replicas=10):
        self.targets[key] = TargetAutoscaler(
            name=key.name,
            namespace=key.namespace,
            min_replicas=min_replicas,
            max_replicas=max_replicas,
            scale_target_ref={"apiVersion": "apps/v1", "kind": "Deployment", "name": "web"},
        )

    def get_target(self, key):
        if key not in self.targets:
            raise NotFoundError(f"HorizontalPodAutoscaler {key} not found")
        return self.targets[key]

    def apply_bounds(self, target, desired_min, desired_max):
        if self.apply_errors:
            error = self.apply_errors.pop(0)
            if isinstance(error, ConflictError) and self.on_conflict:
                self.on_conflict(self)
            raise error
        self.patches.append(build_apply_patch(target, desired_min, desired_max))
        current = self.targets[target.key]
        self.targets[target.key] = TargetAutoscaler(
            name=current.name,
            namespace=current.namespace,
            min_replicas=desired_min,
            max_replicas=desired_max,
            scale_target_ref=current.scale_target_ref,
        )

class FakeFetcher:

    def __init__(self, value=0.0):
        self.value = value
        self.error = None
        self.calls = []

    def fetch(self, endpoint):
        self.calls.append(endpoint)
        if self.error is not None:
            raise self.error
        return self.value

class RecordingEventSink(EventSink):

    def __init__(self):
        super().__init__(TunerLogger("test-events"))
        self.events = []

    def post(self, policy, event_type, reason, message):
        self.events.append((event_type, reason, message))

    @property
    def reasons(self):
        return [reason for _, reason, _ in self.events]

@pytest.fixture
def store():
    store = FakeStore()
    store.add(make_policy_object())
    return store

@pytest.fixture
def accessor():
    accessor = FakeAccessor()
    accessor.add()
    return accessor

@pytest.fixture
def fetcher():
    return FakeFetcher()

@pytest.fixture
def events():
    return RecordingEventSink()

@pytest.fixture
def reconciler(store, accessor, fetcher, events):
    return HpaTunerReconciler(
        store=store,
        accessor=accessor,
        fetcher=fetcher,
        events=events,
        logger=TunerLogger("test-reconciler"),
        requeue_after=30.0,
        max_conflict_retries=3,
    )

@pytest.fixture
def transient_error():
    return TransientIOError("API error on HorizontalPodAutoscaler apps/web-hpa: 500 Internal Server Error")

@pytest.fixture
def policy_factory():
    return make_policy_object

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from hpatuner.errors import InvalidPolicyError

@dataclass(frozen=True)
class NamespacedName:
    namespace: str
    name: str

    def __str__(self):
        return f"{self.namespace}/{self.name}"

@dataclass(frozen=True)
class TuningPolicy:
    """The spec of an HpaTuner object, plus the raw body it was read from."""

    key: NamespacedName
    hpa_name: str
    hpa_namespace: str
    metric_endpoint: str
    metric_threshold: int
    max_ceiling: int
    body: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @property
    def target_key(self) -> NamespacedName:
        return NamespacedName(self.hpa_namespace, self.hpa_name)

    @classmethod
    def from_object(cls, obj: Dict[str, Any]) -> "TuningPolicy":
        """Parses an HpaTuner custom object as returned by the API server."""

        metadata = obj.get("metadata") or {}
        spec = obj.get("spec") or {}
        key = NamespacedName(metadata.get("namespace", ""), metadata.get("name", ""))

        missing = [k for k in ("hpaName", "hpaNamespace", "metricEndpoint", "metricThreshold", "hpaMaxReplicas")
                   if spec.get(k) in (None, "")]
        if missing:
            raise InvalidPolicyError(f"HpaTuner {key} is missing spec fields: {', '.join(missing)}")

        threshold = _as_int(spec["metricThreshold"], "metricThreshold", key)
        ceiling = _as_int(spec["hpaMaxReplicas"], "hpaMaxReplicas", key)
        if ceiling < 1:
            raise InvalidPolicyError(f"HpaTuner {key}: hpaMaxReplicas must be at least 1, got {ceiling}")

        return cls(
            key=key,
            hpa_name=str(spec["hpaName"]),
            hpa_namespace=str(spec["hpaNamespace"]),
            metric_endpoint=str(spec["metricEndpoint"]),
            metric_threshold=threshold,
            max_ceiling=ceiling,
            body=obj,
        )

def _as_int(value, name, key):
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPolicyError(f"HpaTuner {key}: {name} must be an integer, got {value!r}")
    return value

@dataclass(frozen=True)
class TargetAutoscaler:
    name: str
    namespace: str
    min_replicas: int
    max_replicas: int
    scale_target_ref: Dict[str, Any] = field(default_factory=dict)

    @property
    def key(self) -> NamespacedName:
        return NamespacedName(self.namespace, self.name)

@dataclass(frozen=True)
class Decision:
    desired_min: int
    desired_max: int
    changed: bool

@dataclass(frozen=True)
class ReconcileResult:
    """What the scheduler should do after a pass.

    ``requeue`` asks for an immediate re-run, ``requeue_after`` for one after a delay.
    Neither set means the object needs no further work until it changes.
    """

    requeue: bool = False
    requeue_after: Optional[float] = None

    @classmethod
    def done(cls) -> "ReconcileResult":
        return cls()

    @classmethod
    def retry(cls) -> "ReconcileResult":
        return cls(requeue=True)

    @classmethod
    def after(cls, seconds: float) -> "ReconcileResult":
        return cls(requeue_after=seconds)

import logging

# Custom log levels, sitting between INFO and WARNING.
TUNER_STDOUT = logging.INFO + 2
TUNER_CSV = logging.INFO + 4
TUNER_FILE = logging.INFO + 8

DEFAULT_FMT = "[%(asctime)s][%(levelname)s][%(name)s] %(message)s"

# HpaTuner custom resource coordinates.
GROUP = "mycrds.akmusa.com"
VERSION = "v1alpha1"
PLURAL = "hpatuners"
KIND = "HpaTuner"

# Target autoscaler coordinates.
HPA_API_VERSION = "autoscaling/v2"
HPA_KIND = "HorizontalPodAutoscaler"

FIELD_MANAGER = "hpatuner-controller"
APPLY_PATCH_CONTENT_TYPE = "application/apply-patch+yaml"

DEFAULT_REQUEUE_AFTER = 30.0
DEFAULT_ERROR_BACKOFF = 10.0
DEFAULT_METRIC_TIMEOUT = 5.0
DEFAULT_KUBE_TIMEOUT = 10.0
DEFAULT_MAX_CONFLICT_RETRIES = 5
DEFAULT_MIN_STEP = 2

METRIC_FIELD = "error_rate"

# Event severities and reasons.
EVENT_NORMAL = "Normal"
EVENT_WARNING = "Warning"

REASON_RECONCILING = "Reconciling"
REASON_THRESHOLD_BREACHED = "ThresholdBreached"
REASON_HPA_UPDATED = "HPAUpdated"
REASON_UPDATE_FAILED = "UpdateFailed"
REASON_RECONCILE_COMPLETE = "ReconciliationComplete"

AUDIT_HEADER = [
    "timestamp", "logger", "policy", "target", "metric", "threshold",
    "old_min", "old_max", "new_min", "new_max", "outcome",
]

from hpatuner.errors import StatusWriteError, TunerError
from hpatuner.logger import TunerLogger
from hpatuner.utils.data import format_metric
from hpatuner.utils.time import format_timestamp, get_timestamp

def build_status(metric_value, observed_min, observed_max, now):
    return {
        "lastObservedMin": observed_min,
        "lastObservedMax": observed_max,
        "lastMetricValue": format_metric(metric_value),
        "lastUpdateTime": format_timestamp(now),
    }

class StatusRecorder:
    """Writes the latest observation onto the HpaTuner status.

    Best-effort: a failed write is logged and reported as False, it never
    fails the reconciliation.
    """

    def __init__(self, store, logger: TunerLogger = None, clock=get_timestamp):
        self.store = store
        self.logger = logger or TunerLogger("status")
        self.clock = clock

    def record(self, policy, metric_value, observed_min, observed_max) -> bool:
        status = build_status(metric_value, observed_min, observed_max, self.clock())
        try:
            self.store.update_status(policy, status)
        except TunerError as e:
            error = StatusWriteError(f"failed to update status of HpaTuner {policy.key}: {e}")
            self.logger.warning(str(error), policy=policy.key)
            return False

        self.logger.std_log("Status updated", policy=policy.key, **status)
        return True

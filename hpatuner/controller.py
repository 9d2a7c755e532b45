"""Reconciliation of HpaTuner objects.

One pass loads the HpaTuner, loads its target HorizontalPodAutoscaler,
reads the error rate, asks the scaling policy for the desired bounds,
applies them when they differ, records the observation on the HpaTuner
status and asks to be run again after ``requeue_after`` seconds.

A pass keeps no state between invocations. Everything it decides on is
read fresh from the API server and the metric endpoint.
"""

from hpatuner.auto_scaling import ErrorRatePolicy, ScalingPolicy
from hpatuner.config import TunerConfig
from hpatuner.constants import (
    DEFAULT_MAX_CONFLICT_RETRIES,
    DEFAULT_REQUEUE_AFTER,
    EVENT_NORMAL,
    EVENT_WARNING,
    REASON_HPA_UPDATED,
    REASON_RECONCILE_COMPLETE,
    REASON_RECONCILING,
    REASON_THRESHOLD_BREACHED,
    REASON_UPDATE_FAILED,
)
from hpatuner.errors import ConflictError, NotFoundError, ReconcileCancelled, TunerError
from hpatuner.events import EventSink, LoggingEventSink
from hpatuner.kube import AutoscalerAccessor, TuningPolicyStore
from hpatuner.logger import TunerLogger
from hpatuner.metrics import MetricFetcher
from hpatuner.status import StatusRecorder
from hpatuner.types import NamespacedName, ReconcileResult

class HpaTunerReconciler:

    def __init__(
        self,
        store: TuningPolicyStore,
        accessor: AutoscalerAccessor,
        fetcher: MetricFetcher,
        events: EventSink = None,
        status: StatusRecorder = None,
        policy: ScalingPolicy = None,
        logger: TunerLogger = None,
        requeue_after: float = DEFAULT_REQUEUE_AFTER,
        max_conflict_retries: int = DEFAULT_MAX_CONFLICT_RETRIES,
    ):
        self.store = store
        self.accessor = accessor
        self.fetcher = fetcher
        self.logger = logger or TunerLogger("reconciler")
        self.events = events or LoggingEventSink(self.logger)
        self.status = status or StatusRecorder(store, self.logger)
        self.policy = policy or ErrorRatePolicy()
        self.requeue_after = requeue_after
        self.max_conflict_retries = max_conflict_retries

    @classmethod
    def from_config(cls, config: TunerConfig, events: EventSink = None, logger: TunerLogger = None):
        """Wires the reconciler to the live API server and metric endpoints."""

        logger = logger or TunerLogger("reconciler", dirname=config.log_dir or None, level=config.log_level_number)
        store = TuningPolicyStore(group=config.group, version=config.version,
                                  plural=config.plural, timeout=config.kube_timeout)
        return cls(
            store=store,
            accessor=AutoscalerAccessor(field_manager=config.field_manager, timeout=config.kube_timeout),
            fetcher=MetricFetcher(timeout=config.metric_timeout, allow_missing=config.metric_allow_missing),
            events=events,
            status=StatusRecorder(store, logger),
            policy=ErrorRatePolicy(min_step=config.min_step),
            logger=logger,
            requeue_after=config.requeue_after,
            max_conflict_retries=config.max_conflict_retries,
        )

    def run(self, key: NamespacedName, stopped=None) -> ReconcileResult:
        """Reconciles ``key``, re-running at once while the apply hits conflicts.

        Conflict retries do not sleep and do not count as failures. Once
        ``max_conflict_retries`` is exhausted the ConflictError is raised so
        the scheduler's own backoff takes over.
        """

        retries = 0
        while True:
            result = self.reconcile(key, stopped)
            if not result.requeue:
                return result

            if retries >= self.max_conflict_retries:
                raise ConflictError(f"HpaTuner {key}: still conflicting after {retries} immediate retries")
            retries += 1
            self.logger.std_log("Conflict updating HPA, retrying immediately", policy=key, attempt=retries)

    def reconcile(self, key: NamespacedName, stopped=None) -> ReconcileResult:
        """Runs a single pass for ``key``."""

        self._check_stopped(stopped, key)
        self.logger.std_log("Reconciliation started", policy=key)

        try:
            policy = self.store.get(key)
        except NotFoundError:
            self.logger.std_log("Resource not found, likely deleted", policy=key)
            self._audit(key, outcome="policy-missing")
            return ReconcileResult.done()

        self.events.emit(policy, EVENT_NORMAL, REASON_RECONCILING,
                         f"Starting reconciliation for resource {key.name}")
        self.logger.std_log("HpaTuner resource fetched", policy=key, target=policy.target_key,
                            endpoint=policy.metric_endpoint)

        self._check_stopped(stopped, key)
        try:
            target = self.accessor.get_target(policy.target_key)
        except NotFoundError:
            self.logger.std_log("Target HPA not found", policy=key, target=policy.target_key)
            self._audit(key, policy.target_key, outcome="target-missing")
            return ReconcileResult.done()

        self.logger.std_log("HPA fetched", target=target.key, min=target.min_replicas, max=target.max_replicas)

        self._check_stopped(stopped, key)
        try:
            metric = self.fetcher.fetch(policy.metric_endpoint)
        except TunerError as e:
            self.logger.error("Failed to fetch metrics", policy=key, endpoint=policy.metric_endpoint, error=e)
            self._audit(key, target.key, threshold=policy.metric_threshold, outcome="metric-failed")
            raise

        self.logger.std_log("Metrics fetched", policy=key, error_rate=metric, threshold=policy.metric_threshold)

        decision = self.policy.decide(
            target.min_replicas,
            target.max_replicas,
            policy.max_ceiling,
            metric,
            policy.metric_threshold,
        )
        bounds = dict(
            target=target.key,
            old_min=target.min_replicas,
            old_max=target.max_replicas,
            new_min=decision.desired_min,
            new_max=decision.desired_max,
        )
        audit = dict(metric=metric, threshold=policy.metric_threshold, **bounds)

        breached = self.policy.should_scale(metric, policy.metric_threshold)
        if breached and decision.changed:
            self.events.emit(policy, EVENT_NORMAL, REASON_THRESHOLD_BREACHED,
                             f"Updating target HPA {target.key}", **bounds)
        elif breached:
            self.events.emit(policy, EVENT_NORMAL, REASON_THRESHOLD_BREACHED,
                             f"Target HPA {target.key} already at desired bounds", changed=False, **bounds)

        if decision.changed:
            self._check_stopped(stopped, key)
            try:
                self.accessor.apply_bounds(target, decision.desired_min, decision.desired_max)
            except ConflictError as e:
                # Someone else touched the HPA; the whole pass is re-read, the
                # decision is not reused and no status is written for it.
                self.logger.std_log("Conflict updating HPA", policy=key, target=target.key, error=e)
                self._audit(key, outcome="conflict", **audit)
                return ReconcileResult.retry()
            except NotFoundError:
                self.logger.std_log("HPA not found during update, likely deleted", policy=key, target=target.key)
                self._audit(key, outcome="target-vanished", **audit)
                return ReconcileResult.done()
            except TunerError as e:
                self.logger.error("Failed to patch HPA", policy=key, target=target.key, error=e)
                self.events.emit(policy, EVENT_WARNING, REASON_UPDATE_FAILED,
                                 f"Failed to update HPA {target.key}: {e}", **bounds)
                self._audit(key, outcome="update-failed", **audit)
                raise

            self.events.emit(policy, EVENT_NORMAL, REASON_HPA_UPDATED,
                             f"Successfully updated HPA {target.key}", **bounds)
            observed_min, observed_max = decision.desired_min, decision.desired_max
            outcome = "updated"
        else:
            if not breached:
                self.logger.std_log("Threshold not breached, no HPA changes needed", policy=key)
            observed_min, observed_max = target.min_replicas, target.max_replicas
            outcome = "unchanged"

        self._check_stopped(stopped, key)
        self.status.record(policy, metric, observed_min, observed_max)

        self._audit(key, outcome=outcome, **audit)
        self.logger.std_log("Reconciliation completed", policy=key, requeue_after=self.requeue_after)
        self.events.emit(policy, EVENT_NORMAL, REASON_RECONCILE_COMPLETE,
                         f"Successfully reconciled resource {key.name}")
        return ReconcileResult.after(self.requeue_after)

    def _check_stopped(self, stopped, key):
        if stopped is not None and stopped.is_set():
            self.logger.std_log("Reconciliation cancelled", policy=key)
            raise ReconcileCancelled(f"reconciliation of HpaTuner {key} cancelled")

    def _audit(self, key, target="", metric="", threshold="", old_min="", old_max="",
               new_min="", new_max="", outcome=""):
        self.logger.csv_log([key, target, metric, threshold, old_min, old_max, new_min, new_max, outcome])

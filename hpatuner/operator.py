"""Kopf handlers driving HpaTunerReconciler.

Kopf watches HpaTuner objects and calls ``reconcile_handler`` on
create/update/resume, and ``reconcile_timer`` every ``requeue_after``
seconds. Both run in kopf's thread pool since the reconciler blocks.
Kopf runs timers apart from the other handlers, so passes for one HpaTuner
are serialized here with a lock per object.

Run with ``python -m hpatuner`` or ``kopf run -m hpatuner.operator``.
"""

import logging
import threading

import kopf

from hpatuner.config import TunerConfig
from hpatuner.controller import HpaTunerReconciler
from hpatuner.errors import ConflictError, InvalidPolicyError, TransientIOError
from hpatuner.events import KopfEventSink
from hpatuner.kube import load_kube_config
from hpatuner.logger import TunerLogger
from hpatuner.types import NamespacedName

# Handlers are registered at import time, so the configuration is too.
CONFIG = TunerConfig.from_env()

_locks_guard = threading.Lock()

@kopf.on.startup()
def configure(settings: kopf.OperatorSettings, memo: kopf.Memo, **_):
    settings.posting.level = logging.INFO
    settings.watching.connect_timeout = 60
    settings.watching.server_timeout = 600
    settings.networking.request_timeout = CONFIG.kube_timeout * 6
    settings.execution.max_workers = 10

    load_kube_config()

    logger = TunerLogger("hpatuner", dirname=CONFIG.log_dir or None, level=CONFIG.log_level_number)
    memo.reconciler = HpaTunerReconciler.from_config(CONFIG, events=KopfEventSink(logger), logger=logger)
    memo.tuned = set()
    memo.pass_locks = {}
    logger.std_log("hpatuner operator started", group=CONFIG.group, version=CONFIG.version,
                   field_manager=CONFIG.field_manager, requeue_after=CONFIG.requeue_after)

def pass_lock(memo, key):
    """Returns the lock every pass for ``key`` holds while it runs."""

    with _locks_guard:
        locks = memo.setdefault("pass_locks", {})
        return locks.setdefault(key, threading.Lock())

def run_pass(reconciler, key, stopped=None):
    """Runs one reconciliation and translates its errors for kopf."""

    try:
        return reconciler.run(key, stopped)
    except InvalidPolicyError as e:
        raise kopf.PermanentError(str(e)) from e
    except (TransientIOError, ConflictError) as e:
        raise kopf.TemporaryError(str(e), delay=CONFIG.error_backoff) from e

@kopf.on.create(CONFIG.group, CONFIG.version, CONFIG.plural, id="reconcile-on-create")
@kopf.on.update(CONFIG.group, CONFIG.version, CONFIG.plural, field="spec", id="reconcile-on-update")
@kopf.on.resume(CONFIG.group, CONFIG.version, CONFIG.plural, id="reconcile-on-resume")
def reconcile_handler(name, namespace, memo: kopf.Memo, **_):
    key = NamespacedName(namespace, name)
    memo.tuned.add(key)
    with pass_lock(memo, key):
        run_pass(memo.reconciler, key)

@kopf.timer(CONFIG.group, CONFIG.version, CONFIG.plural, interval=CONFIG.requeue_after, initial_delay=CONFIG.requeue_after)
def reconcile_timer(name, namespace, memo: kopf.Memo, stopped=None, **_):
    key = NamespacedName(namespace, name)
    with pass_lock(memo, key):
        run_pass(memo.reconciler, key, stopped)

@kopf.on.delete(CONFIG.group, CONFIG.version, CONFIG.plural, optional=True)
def forget(name, namespace, memo: kopf.Memo, **_):
    memo.tuned.discard(NamespacedName(namespace, name))

@kopf.on.probe(id="status")
def liveness(**_):
    return "alive"

@kopf.on.probe(id="tuned")
def tuned_count(memo: kopf.Memo, **_):
    return len(getattr(memo, "tuned", ()))

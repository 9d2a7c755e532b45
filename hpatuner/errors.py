"""Error taxonomy for a single reconciliation pass.

Every error here is scoped to one pass for one HpaTuner identity:

- ``NotFoundError``: the object is absent. Terminal and benign for that pass.
- ``ConflictError``: another writer owns the fields we tried to apply.
  Retried immediately.
- ``TransientIOError``: network or API failure, surfaced to the scheduler
  which backs off on its own.
- ``StatusWriteError``: the observation could not be persisted. Logged only.
- ``InvalidPolicyError``: the HpaTuner spec cannot be acted on until it changes.
- ``ReconcileCancelled``: the operator is shutting down.
"""

from kubernetes.client.rest import ApiException
from urllib3.exceptions import HTTPError

class TunerError(Exception):
    """Base class for all hpatuner errors."""

class NotFoundError(TunerError):
    pass

class ConflictError(TunerError):
    pass

class TransientIOError(TunerError):
    pass

class MetricFetchError(TransientIOError):
    """The metric endpoint could not be read or returned an unusable payload."""

class StatusWriteError(TunerError):
    pass

class InvalidPolicyError(TunerError):
    pass

class ReconcileCancelled(TunerError):
    pass

def from_api_exception(exc, what):
    """Translate a kubernetes client failure into the hpatuner taxonomy."""

    if isinstance(exc, ApiException):
        if exc.status == 404:
            return NotFoundError(f"{what} not found")
        if exc.status == 409:
            return ConflictError(f"conflict on {what}: {exc.reason}")
        return TransientIOError(f"API error on {what}: {exc.status} {exc.reason}")

    if isinstance(exc, (HTTPError, OSError)):
        return TransientIOError(f"transport error on {what}: {exc}")

    raise TypeError(f"cannot translate {type(exc).__name__} on {what}") from exc

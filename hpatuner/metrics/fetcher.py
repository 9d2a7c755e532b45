import logging
import math
import threading

import requests

from hpatuner.constants import DEFAULT_METRIC_TIMEOUT, METRIC_FIELD
from hpatuner.errors import MetricFetchError

logger = logging.getLogger(__name__)

class MetricFetcher:
    """Reads the current error rate from a JSON metric endpoint.

    One GET per call, no retries: retrying is the scheduler's job.
    The endpoint must answer with a JSON object such as
    ``{"error_rate": 7.5, "message": "ok"}``; other fields are ignored.
    """

    def __init__(self, session=None, timeout=DEFAULT_METRIC_TIMEOUT, allow_missing=False, field=METRIC_FIELD):
        self._session = session
        self._local = threading.local()
        self.timeout = timeout
        self.allow_missing = allow_missing
        self.field = field

    @property
    def session(self):
        """The injected session, else one per thread: Session is not thread-safe."""

        if self._session is not None:
            return self._session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    def fetch(self, endpoint: str) -> float:
        try:
            response = self.session.get(endpoint, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise MetricFetchError(f"GET {endpoint} failed: {e}") from e

        # Closing releases the connection back to the pool on every path.
        with response:
            if not response.ok:
                raise MetricFetchError(f"GET {endpoint} returned HTTP {response.status_code}")
            try:
                payload = response.json()
            except ValueError as e:
                raise MetricFetchError(f"GET {endpoint} returned invalid JSON: {e}") from e
            except requests.exceptions.RequestException as e:
                raise MetricFetchError(f"reading body of {endpoint} failed: {e}") from e

        return self.parse(payload, endpoint)

    def parse(self, payload, endpoint="<payload>") -> float:
        if not isinstance(payload, dict):
            raise MetricFetchError(f"{endpoint} returned {type(payload).__name__}, expected a JSON object")

        if self.field not in payload or payload[self.field] is None:
            if not self.allow_missing:
                raise MetricFetchError(f"{endpoint} returned no {self.field!r} field")
            logger.warning("%s returned no %r field, reading it as 0.0", endpoint, self.field)
            return 0.0

        value = payload[self.field]
        # bool is an int subclass, but true/false is not a rate.
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise MetricFetchError(f"{endpoint} returned non-numeric {self.field!r}: {value!r}")
        if not math.isfinite(value):
            raise MetricFetchError(f"{endpoint} returned non-finite {self.field!r}: {value!r}")
        return float(value)

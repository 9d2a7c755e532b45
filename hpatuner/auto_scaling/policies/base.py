from abc import ABC, abstractmethod
from typing import Tuple

from hpatuner.types import Decision

class ScalingPolicy(ABC):
    """Base class for replica-bound tuning policies.

    Policies are pure: the same inputs always give the same Decision.
    """

    @abstractmethod
    def should_scale(self, metric_value: float, threshold: float) -> bool:
        """Determines if the bounds should move for this observation."""
        pass

    @abstractmethod
    def target_bounds(self, current_min: int, current_max: int, ceiling: int) -> Tuple[int, int]:
        """Calculates the desired (min, max) once scaling is called for."""
        pass

    def decide(self, current_min: int, current_max: int, ceiling: int,
               metric_value: float, threshold: float) -> Decision:
        if not self.should_scale(metric_value, threshold):
            return Decision(current_min, current_max, changed=False)

        desired_min, desired_max = self.target_bounds(current_min, current_max, ceiling)
        changed = (desired_min, desired_max) != (current_min, current_max)
        return Decision(desired_min, desired_max, changed=changed)

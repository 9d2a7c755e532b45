from typing import Tuple

from hpatuner.constants import DEFAULT_MIN_STEP
from .base import ScalingPolicy

class ErrorRatePolicy(ScalingPolicy):
    """Widens the bounds when the error rate breaches its threshold.

    On a breach the max bound jumps to the ceiling and the min bound climbs
    by ``min_step``, capped at the ceiling. Below or at the threshold the
    bounds are left alone; this policy never shrinks them back.
    """

    def __init__(self, min_step: int = DEFAULT_MIN_STEP):
        if min_step < 0:
            raise ValueError(f"min_step must not be negative, got {min_step}")
        self.min_step = min_step

    def should_scale(self, metric_value: float, threshold: float) -> bool:
        return metric_value > threshold

    def target_bounds(self, current_min: int, current_max: int, ceiling: int) -> Tuple[int, int]:
        desired_max = ceiling
        desired_min = min(current_min + self.min_step, desired_max)
        return desired_min, desired_max

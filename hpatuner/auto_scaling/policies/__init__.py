from .base import ScalingPolicy
from .error_rate import ErrorRatePolicy

__all__ = ["ScalingPolicy", "ErrorRatePolicy"]

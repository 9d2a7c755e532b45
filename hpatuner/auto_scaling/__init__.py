from .policies.base import ScalingPolicy
from .policies.error_rate import ErrorRatePolicy

__all__ = ["ScalingPolicy", "ErrorRatePolicy"]

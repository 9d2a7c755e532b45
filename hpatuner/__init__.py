from . import auto_scaling
from . import kube
from . import logger
from . import metrics
from .controller import HpaTunerReconciler
from .config import TunerConfig

__version__ = "0.1.0"

__all__ = [
    "auto_scaling",
    "kube",
    "logger",
    "metrics",
    "HpaTunerReconciler",
    "TunerConfig",
]

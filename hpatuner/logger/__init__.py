from .tuner_logger import TunerLogger

__all__ = ["TunerLogger"]

"""Model, schedules and training loops."""

from .schedules import learning_rate
from .trainer import RegressionModel, Trainer, TrainerState, TrainingConfig, TrainingResult

__all__ = [
    "RegressionModel",
    "Trainer",
    "TrainerState",
    "TrainingConfig",
    "TrainingResult",
    "learning_rate",
]

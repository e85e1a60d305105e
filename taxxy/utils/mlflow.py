"""Central MLflow setup for tracing dspy LM calls."""

from typing import Optional

import mlflow

from taxxy.config import get_config

# Track if autolog has been initialized
_autolog_initialized = False


def setup_mlflow_tracing(experiment_name: Optional[str] = None):
    """
    Set up MLflow tracing for dspy.

    Safe to call more than once; autolog is only enabled the first time.
    Does nothing when MLFLOW_ENABLED is false.

    Args:
        experiment_name: Name of the MLflow experiment. If None, uses config default.

    Example:
        >>> from taxxy.utils.mlflow import setup_mlflow_tracing
        >>> setup_mlflow_tracing(experiment_name="transaction_classification")
    """
    global _autolog_initialized

    config = get_config()

    if not config.mlflow.enabled:
        return

    if config.mlflow.tracking_uri:
        mlflow.set_tracking_uri(config.mlflow.tracking_uri)

    mlflow.set_experiment(experiment_name or config.mlflow.experiment_name)

    if not _autolog_initialized:
        mlflow.dspy.autolog()
        _autolog_initialized = True

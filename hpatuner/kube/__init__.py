"""Kubernetes client configuration and object store access."""

import logging

from kubernetes import config

from .autoscaler import AutoscalerAccessor, build_apply_patch
from .tuning import TuningPolicyStore

logger = logging.getLogger(__name__)

def load_kube_config():
    """Loads in-cluster config, falling back to the local kubeconfig."""

    try:
        config.load_incluster_config()
        logger.info("Loaded in-cluster Kubernetes config")
    except config.ConfigException:
        config.load_kube_config()
        logger.info("Loaded local Kubernetes config")

__all__ = ["AutoscalerAccessor", "TuningPolicyStore", "build_apply_patch", "load_kube_config"]

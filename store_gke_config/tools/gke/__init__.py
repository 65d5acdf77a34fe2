"""
GKE config tool for workflow steps.

Fetches GKE cluster credentials with gcloud and stores the cluster endpoint,
CA data and OAuth token as the `kubernetes` output of the step.
"""

from store_gke_config.tools.gke.executor import TOOL_NAME, execute_store_gke_config_task
from store_gke_config.tools.gke.kubeconfig import generate_store_params
from store_gke_config.tools.gke.models import KubernetesConfig, StoreGkeConfigRequest

__all__ = [
    'TOOL_NAME',
    'execute_store_gke_config_task',
    'generate_store_params',
    'KubernetesConfig',
    'StoreGkeConfigRequest',
]

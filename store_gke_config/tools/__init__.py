"""
Tool implementations exposed to the host workflow engine.

- gke: store_gke_config, GKE cluster credentials as step output
"""

from store_gke_config.tools import gke
from store_gke_config.tools.gke import execute_store_gke_config_task

# Tool registry for dynamic lookup
REGISTRY = {
    "store_gke_config": gke,
}

__all__ = [
    "gke",
    "execute_store_gke_config_task",
    "REGISTRY",
]

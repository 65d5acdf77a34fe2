from store_gke_config.core.logger import setup_logger
from store_gke_config.tools import REGISTRY, execute_store_gke_config_task
from store_gke_config.tools.gke import generate_store_params

__version__ = "0.1.0"

__all__ = [
    "setup_logger",
    "REGISTRY",
    "execute_store_gke_config_task",
    "generate_store_params",
]

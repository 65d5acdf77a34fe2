"""
Kubeconfig parsing for the GKE config tool.

The kubeconfig written by `gcloud container clusters get-credentials` is
loaded with the kubernetes client library into a private Configuration
object, and the API server URL, CA data and bearer token are read back
from it.
"""

import base64
import os
from typing import Optional

from kubernetes import client, config
from kubernetes.config.config_exception import ConfigException

from store_gke_config.core.config import Settings, get_settings
from store_gke_config.core.errors import ConfigError
from store_gke_config.core.logger import setup_logger
from store_gke_config.tools.gke.models import DEFAULT_NAMESPACE, KubernetesConfig

logger = setup_logger(__name__, include_location=True)

KUBECONFIG_READ_ERROR = "Could not read kubeConfig, check kube_config_path."


def resolve_kubeconfig_path(kube_config_path: Optional[str] = None, settings: Optional[Settings] = None) -> str:
    """
    Resolve the kubeconfig location: explicit path, then KUBECONFIG, then
    $HOME/.kube/config. A KUBECONFIG list is returned unchanged.
    """
    if kube_config_path:
        return os.path.expanduser(kube_config_path)
    settings = settings or get_settings(reload=True)
    if settings.kubeconfig:
        return settings.kubeconfig
    default = settings.default_kubeconfig_path
    if not default:
        raise ConfigError(KUBECONFIG_READ_ERROR)
    return default


def _read_ca_data(ssl_ca_cert: Optional[str]) -> Optional[str]:
    if not ssl_ca_cert:
        return None
    try:
        with open(ssl_ca_cert, "rb") as f:
            return base64.standard_b64encode(f.read()).decode("ascii")
    except OSError as e:
        raise ConfigError(f"Could not read cluster CA certificate {ssl_ca_cert}: {e}") from e


def _bearer_token(configuration: client.Configuration) -> Optional[str]:
    # newer client releases store the header under "BearerToken", older ones under
    # "authorization"; basic auth users land there too, only bearer tokens count
    api_key = configuration.api_key or {}
    authorization = api_key.get("BearerToken") or api_key.get("authorization")
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization[len("Bearer "):]


def get_kube_config_from_path(path: str) -> client.Configuration:
    """Load a kubeconfig (or a KUBECONFIG-style list of files) into a new Configuration."""
    paths = [p for p in path.split(os.pathsep) if p]
    if not any(os.path.isfile(p) for p in paths):
        logger.error(f"GKE.KUBECONFIG: No kubeconfig found at {path}")
        raise ConfigError(KUBECONFIG_READ_ERROR)

    configuration = client.Configuration()
    try:
        config.load_kube_config(
            config_file=path,
            client_configuration=configuration,
            persist_config=False,
        )
    except (ConfigException, OSError) as e:
        logger.error(f"GKE.KUBECONFIG: Failed to load {path}: {e}")
        raise ConfigError(KUBECONFIG_READ_ERROR) from e
    return configuration


def build_kubernetes_config(
    cluster: str,
    namespace: str = DEFAULT_NAMESPACE,
    kube_config_path: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> KubernetesConfig:
    path = resolve_kubeconfig_path(kube_config_path, settings)
    logger.debug(f"GKE.KUBECONFIG: Loading {path}")
    configuration = get_kube_config_from_path(path)
    return KubernetesConfig(
        name=cluster,
        master=configuration.host,
        certs_ca_data=_read_ca_data(configuration.ssl_ca_cert),
        oauth_token=_bearer_token(configuration),
        namespace=namespace or DEFAULT_NAMESPACE,
    )


def generate_store_params(
    cluster: str,
    namespace: str = DEFAULT_NAMESPACE,
    kube_config_path: Optional[str] = None,
    settings: Optional[Settings] = None,
) -> dict:
    """Store params for later steps: {"kubernetes": {name, master, certs_ca_data, oauth_token, namespace}}."""
    return build_kubernetes_config(cluster, namespace, kube_config_path, settings).to_store_params()


__all__ = [
    "KUBECONFIG_READ_ERROR",
    "resolve_kubeconfig_path",
    "get_kube_config_from_path",
    "build_kubernetes_config",
    "generate_store_params",
]

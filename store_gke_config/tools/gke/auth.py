"""
Credential resolution for the GKE config tool.

A step may carry one service account credential in one of three forms:
inline JSON, a path to a key file, or a secret key resolved through the
host secret store. The resolved key file is activated with gcloud before
cluster credentials are fetched.
"""

import json
from typing import Any, Optional

from store_gke_config.core.errors import ConfigError
from store_gke_config.core.logger import setup_logger
from store_gke_config.tools.gke.models import StoreGkeConfigRequest
from store_gke_config.worker.secrets import get_secret

logger = setup_logger(__name__, include_location=True)


def _strip_newlines(value: str) -> str:
    return value.replace("\r", "").replace("\n", "")


def read_credential_file(path: str) -> str:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return _strip_newlines(f.read())
    except OSError as e:
        logger.error(f"GKE.AUTH: Could not read credential file {path}: {e}")
        raise ConfigError("Please check gcp credential file and file path.") from e


def read_credential_secret(key: str, secret_manager: Any = None) -> str:
    try:
        value = get_secret(key, secret_manager=secret_manager)
    except LookupError as e:
        raise ConfigError(f"Could not access to secret:{key}") from e
    if not value:
        raise ConfigError(f"Could not access to secret:{key}")
    return value


def resolve_credential_json(request: StoreGkeConfigRequest, secret_manager: Any = None) -> Optional[str]:
    """
    Resolve the configured credential source to a JSON string.

    Returns None when the step carries no credential.
    """
    credential = None
    if request.credential_json:
        logger.debug("GKE.AUTH: Using inline credential_json")
        credential = _strip_newlines(request.credential_json)
    elif request.credential_json_path:
        logger.debug(f"GKE.AUTH: Reading credential_json_path {request.credential_json_path}")
        credential = read_credential_file(request.credential_json_path)
    elif request.credential_json_from_secret_key:
        logger.debug(f"GKE.AUTH: Looking up secret {request.credential_json_from_secret_key}")
        credential = read_credential_secret(request.credential_json_from_secret_key, secret_manager)

    if credential is None:
        return None

    try:
        parsed = json.loads(credential)
    except json.JSONDecodeError as e:
        raise ConfigError(f"GCP credential is not valid JSON: {e.msg}") from e
    if not isinstance(parsed, dict):
        raise ConfigError("GCP credential must be a JSON object")
    return credential


__all__ = ["read_credential_file", "read_credential_secret", "resolve_credential_json"]

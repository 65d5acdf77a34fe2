"""
Worker-side helpers to fetch credentials from the host engine server.

These helpers return credential metadata merged with decrypted payload
when include_data=true is supported by the server endpoint.
"""

from __future__ import annotations

from typing import Any, Dict, Optional
import json

import httpx
from store_gke_config.core.config import get_settings
from store_gke_config.core.logger import setup_logger

logger = setup_logger(__name__, include_location=True)


def fetch_credential_by_key(key: str) -> Dict:
    """Fetch a credential record; returns {} when it is missing or unreachable."""
    if not key:
        return {}
    settings = get_settings()
    url = settings.endpoint_credential_by_key(key, include_data=True)

    try:
        with httpx.Client(timeout=settings.secret_timeout) as c:
            r = c.get(url)
            if r.status_code != 200:
                logger.warning(f"Failed to fetch credential '{key}': HTTP {r.status_code}")
                return {}
            body = r.json() or {}
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"Failed to fetch credential '{key}': {e}")
        return {}

    data = body.get('data') or {}
    payload = data.get('data') if isinstance(data, dict) and isinstance(data.get('data'), dict) else data
    payload = payload if isinstance(payload, dict) else {}
    return {
        'key': key,
        'type': (body.get('type') or body.get('credential_type') or '').lower(),
        'secret_name': body.get('secret_name') or body.get('name') or key,
        'data': payload,
    }


def credential_json_from_record(record: Dict[str, Any]) -> Optional[str]:
    """
    Extract a service account JSON string from a credential record.

    Records registered as GCP service accounts carry the key file under
    'service_account_json'; otherwise the whole payload is the key file.
    """
    payload = record.get('data') if isinstance(record.get('data'), dict) else {}
    if not payload:
        return None
    sa_json = payload.get('service_account_json', payload)
    if isinstance(sa_json, str):
        return sa_json
    return json.dumps(sa_json)


def get_secret(key: str, secret_manager: Any = None) -> Optional[str]:
    """
    Resolve a secret key to a credential JSON string.

    The host secret store is used when provided (any object exposing
    get_secret(key)); otherwise the credential is read from the server.
    """
    if secret_manager is not None:
        value = secret_manager.get_secret(key)
        if value is None or isinstance(value, str):
            return value
        return json.dumps(value)

    record = fetch_credential_by_key(key)
    if not record:
        return None
    return credential_json_from_record(record)


__all__ = ['fetch_credential_by_key', 'credential_json_from_record', 'get_secret']

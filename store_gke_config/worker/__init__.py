"""Worker-side helpers shared by tool executors."""

from store_gke_config.worker.secrets import fetch_credential_by_key, get_secret

__all__ = ['fetch_credential_by_key', 'get_secret']

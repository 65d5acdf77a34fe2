import os
import sys
from typing import Optional, Dict, List
from pydantic import BaseModel, Field, ConfigDict, field_validator


_ENV_LOADED = False


def _load_env_file(path: str, allow_override: bool = False) -> None:
    """
    Minimal .env loader: loads KEY=VALUE pairs into os.environ.
    - Ignores empty lines and lines starting with '#'
    - Supports values wrapped in single or double quotes
    - By default, does not override existing environment variables
    """
    if not path or not os.path.exists(path):
        return
    try:
        with open(path, "r", encoding="utf-8") as f:
            for raw_line in f:
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                if line.startswith("export "):
                    line = line[len("export "):].strip()
                if "=" not in line:
                    continue
                key, value = line.split("=", 1)
                key = key.strip()
                value = value.strip()
                if (value.startswith('"') and value.endswith('"')) or (value.startswith("'") and value.endswith("'")):
                    value = value[1:-1]
                if allow_override or key not in os.environ:
                    os.environ[key] = value
    except PermissionError as e:
        print(f"FATAL: Permission denied reading environment file {path}: {e}", file=sys.stderr)
        raise


def load_env_if_present(force_reload: bool = False) -> None:
    """
    Load environment variables from .env files in order of precedence:
    1. STORE_GKE_ENV_FILE when set (only that file)
    2. .env.local (not committed)
    3. .env
    Variables already present in the environment always win.
    """
    global _ENV_LOADED
    if _ENV_LOADED and not force_reload:
        return

    custom = os.environ.get("STORE_GKE_ENV_FILE")
    if custom:
        _load_env_file(custom, allow_override=False)
    else:
        for env_file in ('.env.local', '.env'):
            _load_env_file(env_file, allow_override=False)

    _ENV_LOADED = True


class Settings(BaseModel):
    """GKE config tool settings derived from environment variables."""
    model_config = ConfigDict(validate_assignment=True, populate_by_name=True)

    server_url: str = Field("http://localhost:8082", alias="NOETL_SERVER_URL")
    gcloud_bin: str = Field("gcloud", alias="STORE_GKE_GCLOUD_BIN")
    kubectl_bin: str = Field("kubectl", alias="STORE_GKE_KUBECTL_BIN")
    verify_cluster: bool = Field(True, alias="STORE_GKE_VERIFY_CLUSTER")
    secret_timeout: float = Field(5.0, alias="STORE_GKE_SECRET_TIMEOUT")
    log_json: bool = Field(False, alias="STORE_GKE_LOG_JSON")
    kubeconfig: Optional[str] = Field(None, alias="KUBECONFIG")
    home: Optional[str] = Field(None, alias="HOME")

    @field_validator('gcloud_bin', 'kubectl_bin', 'server_url', mode='before')
    def validate_not_empty_str(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("must be a non-empty string")
        return str(v).strip()

    @field_validator('verify_cluster', 'log_json', mode='before')
    def coerce_bool(cls, v):
        if isinstance(v, bool):
            return v
        if isinstance(v, str):
            val = v.strip().lower()
            if val in {"true", "1", "yes", "y", "on"}:
                return True
            if val in {"false", "0", "no", "n", "off"}:
                return False
        raise ValueError("Invalid boolean value")

    @field_validator('secret_timeout', mode='before')
    def coerce_float(cls, v):
        if isinstance(v, (int, float)):
            return float(v)
        if isinstance(v, str):
            return float(v.strip())
        raise ValueError("Invalid numeric value")

    @field_validator('kubeconfig', 'home', mode='before')
    def blank_to_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def server_api_url(self) -> str:
        """Server API base URL, tolerant of a trailing /api in NOETL_SERVER_URL."""
        base = self.server_url.rstrip('/')
        if not base.endswith('/api'):
            base = base + '/api'
        return base

    @property
    def endpoint_credentials(self) -> str:
        """Base credentials endpoint"""
        return f"{self.server_api_url}/credentials"

    def endpoint_credential_by_key(self, key: str, include_data: bool = True) -> str:
        """Get credential by key endpoint with optional data inclusion"""
        url = f"{self.endpoint_credentials}/{key}"
        if include_data:
            url += "?include_data=true"
        return url

    @property
    def default_kubeconfig_path(self) -> Optional[str]:
        """$HOME/.kube/config, or None when HOME is not set."""
        if not self.home:
            return None
        return os.path.join(self.home, ".kube", "config")

    @property
    def kubeconfig_paths(self) -> List[str]:
        """Kubeconfig files the client library would merge, in order."""
        if self.kubeconfig:
            return [p for p in self.kubeconfig.split(os.pathsep) if p]
        default = self.default_kubeconfig_path
        return [default] if default else []


_settings: Optional[Settings] = None


def get_settings(reload: bool = False) -> Settings:
    """
    Retrieve tool settings, built once from the environment.
    Pass reload=True after changing os.environ (tests, CLI overrides).
    """
    global _settings
    if _settings is None or reload:
        load_env_if_present(force_reload=reload)
        env: Dict[str, str] = dict(os.environ)
        _settings = Settings(
            NOETL_SERVER_URL=env.get('NOETL_SERVER_URL', 'http://localhost:8082'),
            STORE_GKE_GCLOUD_BIN=env.get('STORE_GKE_GCLOUD_BIN', 'gcloud'),
            STORE_GKE_KUBECTL_BIN=env.get('STORE_GKE_KUBECTL_BIN', 'kubectl'),
            STORE_GKE_VERIFY_CLUSTER=env.get('STORE_GKE_VERIFY_CLUSTER', 'true'),
            STORE_GKE_SECRET_TIMEOUT=env.get('STORE_GKE_SECRET_TIMEOUT', '5.0'),
            STORE_GKE_LOG_JSON=env.get('STORE_GKE_LOG_JSON', 'false'),
            KUBECONFIG=env.get('KUBECONFIG'),
            HOME=env.get('HOME'),
        )
    return _settings


__all__ = ["Settings", "get_settings", "load_env_if_present"]

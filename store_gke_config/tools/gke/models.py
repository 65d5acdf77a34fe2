import json
import os
from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from store_gke_config.core.errors import ConfigError

CREDENTIAL_FIELDS = ("credential_json", "credential_json_path", "credential_json_from_secret_key")
REQUIRED_FIELDS = ("cluster", "project_id", "zone")
DEFAULT_NAMESPACE = "default"


class StoreGkeConfigRequest(BaseModel):
    """Validated step configuration for the store_gke_config tool."""
    model_config = ConfigDict(extra="ignore")

    cluster: str
    project_id: str
    zone: str
    namespace: str = DEFAULT_NAMESPACE
    credential_json: Optional[str] = None
    credential_json_path: Optional[str] = None
    credential_json_from_secret_key: Optional[str] = None
    kube_config_path: Optional[str] = None
    verify: Optional[bool] = None

    @field_validator("cluster", "project_id", "zone", mode="before")
    def validate_not_empty_str(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("must be a non-empty string")
        return str(v).strip()

    @field_validator("namespace", mode="before")
    def default_namespace(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_NAMESPACE
        return str(v).strip()

    @field_validator("credential_json", mode="before")
    def dump_mapping(cls, v):
        # an inline credential may arrive already parsed from YAML
        if isinstance(v, dict):
            return json.dumps(v)
        return v

    @field_validator("kube_config_path", mode="before")
    def expand_kube_config_path(cls, v):
        # gcloud, kubectl and the parser must all see the same file
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return os.pathsep.join(os.path.expanduser(p) for p in str(v).strip().split(os.pathsep))

    @property
    def credential_sources(self) -> List[str]:
        return [name for name in CREDENTIAL_FIELDS if getattr(self, name)]

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "StoreGkeConfigRequest":
        """Build a request, turning validation failures into ConfigError."""
        missing = [name for name in REQUIRED_FIELDS if config.get(name) in (None, "")]
        if missing:
            raise ConfigError(f"Parameter {', '.join(repr(m) for m in missing)} is required")
        try:
            request = cls.model_validate(config)
        except ValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
            raise ConfigError(f"Invalid parameter {', '.join(fields)}: {e.errors()[0]['msg']}") from e

        sources = request.credential_sources
        if len(sources) > 1:
            raise ConfigError(
                f"Only one of {', '.join(CREDENTIAL_FIELDS)} can be set, got: {', '.join(sources)}"
            )
        return request


class KubernetesConfig(BaseModel):
    """Cluster access record handed to later steps as store params."""

    name: str
    master: Optional[str] = None
    certs_ca_data: Optional[str] = None
    oauth_token: Optional[str] = Field(None, repr=False)
    namespace: str = DEFAULT_NAMESPACE

    def to_store_params(self) -> Dict[str, Dict[str, Any]]:
        return {"kubernetes": self.model_dump()}


__all__ = [
    "CREDENTIAL_FIELDS",
    "DEFAULT_NAMESPACE",
    "StoreGkeConfigRequest",
    "KubernetesConfig",
]

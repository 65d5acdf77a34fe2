import base64
from types import SimpleNamespace

import pytest
import yaml

from store_gke_config.core.config import get_settings

CA_PEM = (
    b"-----BEGIN CERTIFICATE-----\n"
    b"MIIDDDCCAfSgAwIBAgIRAJz3b2FmYWtlLWdrZS1jYS1mb3ItdGVzdHMwDQYJKoZI\n"
    b"-----END CERTIFICATE-----\n"
)
CA_DATA = base64.standard_b64encode(CA_PEM).decode("ascii")
MASTER_URL = "https://34.66.10.20"
OAUTH_TOKEN = "ya29.c.test-oauth-token"


def write_kubeconfig(path, server=MASTER_URL, ca_data=CA_DATA, token=OAUTH_TOKEN, name="gke_acme_us-central1-a_analytics"):
    cluster = {"server": server}
    if ca_data:
        cluster["certificate-authority-data"] = ca_data
    else:
        cluster["insecure-skip-tls-verify"] = True
    user = {"token": token} if token else {"username": "admin", "password": "secret"}
    document = {
        "apiVersion": "v1",
        "kind": "Config",
        "clusters": [{"name": name, "cluster": cluster}],
        "users": [{"name": name, "user": user}],
        "contexts": [{"name": name, "context": {"cluster": name, "user": name, "namespace": "default"}}],
        "current-context": name,
        "preferences": {},
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(document), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    for var in ("KUBECONFIG", "STORE_GKE_VERIFY_CLUSTER", "STORE_GKE_GCLOUD_BIN", "STORE_GKE_KUBECTL_BIN",
                "NOETL_SERVER_URL", "STORE_GKE_ENV_FILE"):
        monkeypatch.delenv(var, raising=False)
    get_settings(reload=True)
    yield
    get_settings(reload=True)


@pytest.fixture
def kubeconfig_file(tmp_path, monkeypatch):
    path = write_kubeconfig(tmp_path / "kube" / "config")
    monkeypatch.setenv("KUBECONFIG", str(path))
    return SimpleNamespace(path=path, master=MASTER_URL, ca_data=CA_DATA, token=OAUTH_TOKEN)


@pytest.fixture
def make_kubeconfig():
    return write_kubeconfig

import httpx

from store_gke_config.core.config import get_settings
from store_gke_config.worker import secrets as secrets_module


class Resp:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._json = body

    def json(self):
        if isinstance(self._json, Exception):
            raise self._json
        return self._json


def _fake_client(response=None, error=None, captured=None):
    class FakeClient:
        def __init__(self, timeout=None):
            self.timeout = timeout
        def __enter__(self):
            return self
        def __exit__(self, exc_type, exc, tb):
            return False
        def get(self, url):
            if captured is not None:
                captured.append((url, self.timeout))
            if error is not None:
                raise error
            return response

    return FakeClient


def test_fetch_credential_by_key(monkeypatch):
    monkeypatch.setenv("NOETL_SERVER_URL", "http://noetl.internal:8082/")
    monkeypatch.setenv("STORE_GKE_SECRET_TIMEOUT", "2.5")
    get_settings(reload=True)
    captured = []
    body = {
        "name": "gke_deployer",
        "type": "GCP_SERVICE_ACCOUNT",
        "data": {"service_account_json": {"type": "service_account"}},
    }
    monkeypatch.setattr(secrets_module.httpx, "Client", _fake_client(Resp(200, body), captured=captured))

    record = secrets_module.fetch_credential_by_key("gke_deployer")

    assert captured == [("http://noetl.internal:8082/api/credentials/gke_deployer?include_data=true", 2.5)]
    assert record == {
        "key": "gke_deployer",
        "type": "gcp_service_account",
        "secret_name": "gke_deployer",
        "data": {"service_account_json": {"type": "service_account"}},
    }


def test_fetch_credential_unwraps_nested_data(monkeypatch):
    body = {"type": "json", "data": {"data": {"type": "service_account"}}}
    monkeypatch.setattr(secrets_module.httpx, "Client", _fake_client(Resp(200, body)))

    record = secrets_module.fetch_credential_by_key("gke_deployer")

    assert record["data"] == {"type": "service_account"}


def test_fetch_credential_not_found(monkeypatch):
    monkeypatch.setattr(secrets_module.httpx, "Client", _fake_client(Resp(404, {"detail": "not found"})))

    assert secrets_module.fetch_credential_by_key("gke_deployer") == {}


def test_fetch_credential_server_unreachable(monkeypatch):
    error = httpx.ConnectError("connection refused")
    monkeypatch.setattr(secrets_module.httpx, "Client", _fake_client(error=error))

    assert secrets_module.fetch_credential_by_key("gke_deployer") == {}


def test_fetch_credential_invalid_json(monkeypatch):
    monkeypatch.setattr(secrets_module.httpx, "Client", _fake_client(Resp(200, ValueError("bad json"))))

    assert secrets_module.fetch_credential_by_key("gke_deployer") == {}


def test_credential_json_from_record():
    assert secrets_module.credential_json_from_record({"data": {}}) is None
    assert secrets_module.credential_json_from_record(
        {"data": {"service_account_json": '{"type": "service_account"}'}}
    ) == '{"type": "service_account"}'
    assert secrets_module.credential_json_from_record(
        {"data": {"type": "service_account"}}
    ) == '{"type": "service_account"}'


def test_get_secret_prefers_secret_manager(monkeypatch):
    class SecretManager:
        def get_secret(self, key):
            return {"type": "service_account", "key": key}

    def _unexpected(_key):
        raise AssertionError("server should not be called")

    monkeypatch.setattr(secrets_module, "fetch_credential_by_key", _unexpected)

    value = secrets_module.get_secret("gke_deployer", secret_manager=SecretManager())

    assert value == '{"type": "service_account", "key": "gke_deployer"}'


def test_get_secret_missing_on_server(monkeypatch):
    monkeypatch.setattr(secrets_module, "fetch_credential_by_key", lambda _key: {})

    assert secrets_module.get_secret("gke_deployer") is None

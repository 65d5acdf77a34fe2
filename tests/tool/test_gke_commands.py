import io
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from store_gke_config.core.config import get_settings
from store_gke_config.core.errors import CommandError
from store_gke_config.tools.gke.commands import (
    activate_service_account,
    fetch_cluster_credentials,
    get_credentials_commands,
    run_command,
)


def _completed(returncode=0):
    return SimpleNamespace(returncode=returncode)


def test_get_credentials_commands_order():
    commands = get_credentials_commands("analytics", "us-central1-a", "acme-data", "jobs", get_settings())

    assert commands == [
        ["gcloud", "container", "clusters", "get-credentials", "analytics",
         "--zone", "us-central1-a", "--project", "acme-data"],
        ["kubectl", "get", "po"],
        ["kubectl", "config", "set-context", "--current", "--namespace=jobs"],
    ]


def test_get_credentials_commands_without_verify(monkeypatch):
    monkeypatch.setenv("STORE_GKE_GCLOUD_BIN", "/opt/google-cloud-sdk/bin/gcloud")
    settings = get_settings(reload=True)

    commands = get_credentials_commands("analytics", "us-central1-a", "acme-data", "default", settings, verify=False)

    assert [c[0] for c in commands] == ["/opt/google-cloud-sdk/bin/gcloud", "kubectl"]
    assert ["kubectl", "get", "po"] not in commands


@patch("store_gke_config.tools.gke.commands.subprocess.run", return_value=_completed(0))
def test_run_command_success(mock_run):
    run_command(["kubectl", "get", "po"])

    mock_run.assert_called_once_with(["kubectl", "get", "po"], env=None, input=None, stdout=None, text=None, check=False)


@patch("store_gke_config.tools.gke.commands.subprocess.run", return_value=_completed(2))
def test_run_command_nonzero_exit_raises(_mock_run):
    with pytest.raises(CommandError) as exc_info:
        run_command(["kubectl", "get", "po"])

    assert exc_info.value.returncode == 2
    assert exc_info.value.command == ["kubectl", "get", "po"]
    assert "exit code 2" in str(exc_info.value)


@patch("store_gke_config.tools.gke.commands.subprocess.run", side_effect=FileNotFoundError("gcloud"))
def test_run_command_missing_binary_propagates(_mock_run):
    with pytest.raises(FileNotFoundError):
        run_command(["gcloud", "version"])


@patch("store_gke_config.tools.gke.commands.subprocess.run", return_value=_completed(0))
def test_activate_service_account_uses_stdin(mock_run):
    credential = '{"type": "service_account"}'

    activate_service_account(credential, get_settings())

    args, kwargs = mock_run.call_args
    assert args[0] == ["gcloud", "auth", "activate-service-account", "--key-file=-"]
    assert kwargs["input"] == credential
    assert kwargs["text"] is True
    assert credential not in " ".join(args[0])


@patch("store_gke_config.tools.gke.commands.subprocess.run")
def test_fetch_stops_at_first_failure(mock_run):
    mock_run.side_effect = [_completed(0), _completed(1), _completed(0)]

    with pytest.raises(CommandError) as exc_info:
        fetch_cluster_credentials("analytics", "us-central1-a", "acme-data", "jobs", get_settings())

    assert exc_info.value.command == ["kubectl", "get", "po"]
    assert mock_run.call_count == 2


@patch("store_gke_config.tools.gke.commands.subprocess.run", return_value=_completed(0))
def test_fetch_exports_kube_config_path(mock_run, tmp_path):
    target = str(tmp_path / "gke-config")

    fetch_cluster_credentials(
        "analytics", "us-central1-a", "acme-data", "jobs", get_settings(), kube_config_path=target
    )

    assert mock_run.call_count == 3
    for call in mock_run.call_args_list:
        assert call.kwargs["env"]["KUBECONFIG"] == target


@patch("store_gke_config.tools.gke.commands.subprocess.run", return_value=_completed(0))
def test_child_stdout_redirected(mock_run):
    sink = io.StringIO()

    activate_service_account('{"type": "service_account"}', get_settings(), stdout=sink)
    fetch_cluster_credentials("analytics", "us-central1-a", "acme-data", "jobs", get_settings(), stdout=sink)

    assert mock_run.call_count == 4
    assert all(call.kwargs["stdout"] is sink for call in mock_run.call_args_list)

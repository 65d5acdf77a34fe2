import pytest

from store_gke_config.core.errors import (
    CommandError,
    ConfigError,
    ErrorInfo,
    ErrorKind,
    classify_command_error,
    classify_error,
)


def test_command_error_message():
    error = CommandError(["kubectl", "get", "po"], 1)

    assert str(error) == "Command 'kubectl get po' failed with exit code 1"
    assert error.returncode == 1


def test_config_error_is_value_error():
    with pytest.raises(ValueError):
        raise ConfigError("Parameter 'cluster' is required")


@pytest.mark.parametrize(
    "argv,kind,retryable,code",
    [
        (["gcloud", "auth", "activate-service-account", "--key-file=-"], ErrorKind.AUTH, False, "GCLOUD_1"),
        (["kubectl", "get", "po"], ErrorKind.CONNECTION, True, "KUBECTL_1"),
        (["/usr/bin/gcloud", "container", "clusters", "get-credentials", "analytics"],
         ErrorKind.COMMAND, False, "GCLOUD_1"),
        (["kubectl", "config", "set-context", "--current", "--namespace=jobs"], ErrorKind.COMMAND, False, "KUBECTL_1"),
    ],
)
def test_classify_command_error(argv, kind, retryable, code):
    info = classify_command_error(CommandError(argv, 1))

    assert info.kind == kind
    assert info.retryable is retryable
    assert info.code == code
    assert info.exit_code == 1
    assert info.command == " ".join(argv)


def test_classify_config_error():
    info = classify_error(ConfigError("Could not access to secret:gke_deployer"))

    assert info.to_dict() == {
        "kind": "config",
        "retryable": False,
        "code": "CONFIG",
        "message": "Could not access to secret:gke_deployer",
        "source": "store_gke_config",
        "exception_type": "ConfigError",
    }


def test_classify_timeout_and_unknown():
    assert classify_error(TimeoutError("gcloud timed out")).kind == ErrorKind.TIMEOUT
    assert classify_error(RuntimeError("request timeout")).retryable is True

    info = classify_error(KeyError("boom"))
    assert info.kind == ErrorKind.UNKNOWN
    assert info.code == "PY_KeyError"


def test_error_info_to_dict_omits_empty_fields():
    d = ErrorInfo(kind=ErrorKind.AUTH, message="denied").to_dict()

    assert d["kind"] == "auth"
    assert "exit_code" not in d
    assert "command" not in d

"""
gcloud/kubectl invocations for the GKE config tool.

Commands run synchronously with the standard streams inherited from the
worker process, so gcloud and kubectl output lands in the step log unless
the caller redirects stdout. Exit codes are checked; OS-level failures to
start a process propagate as-is.
"""

import os
import subprocess
from typing import IO, Dict, List, Optional, Sequence

from store_gke_config.core.config import Settings
from store_gke_config.core.errors import CommandError
from store_gke_config.core.logger import setup_logger

logger = setup_logger(__name__, include_location=True)


def run_command(
    argv: Sequence[str],
    env: Optional[Dict[str, str]] = None,
    input_text: Optional[str] = None,
    display: Optional[str] = None,
    stdout: Optional[IO] = None,
) -> None:
    """
    Run a command and raise CommandError on a non-zero exit.

    Args:
        argv: Command and arguments, never passed through a shell
        env: Full environment for the child, defaults to the current one
        input_text: Text fed to the child's stdin
        display: Command line to log instead of argv
        stdout: Stream for the child's stdout, inherited when None
    """
    shown = display or " ".join(argv)
    logger.info(f"GKE.COMMAND: Running {shown}")
    completed = subprocess.run(
        list(argv),
        env=env,
        input=input_text,
        stdout=stdout,
        text=True if input_text is not None else None,
        check=False,
    )
    if completed.returncode != 0:
        logger.error(f"GKE.COMMAND: {shown} exited with code {completed.returncode}")
        raise CommandError(argv, completed.returncode)
    logger.debug(f"GKE.COMMAND: {shown} completed")


def activate_service_account(credential_json: str, settings: Settings, stdout: Optional[IO] = None) -> None:
    """Activate a service account for gcloud, key file supplied on stdin."""
    argv = [settings.gcloud_bin, "auth", "activate-service-account", "--key-file=-"]
    run_command(argv, input_text=credential_json, stdout=stdout)


def get_credentials_commands(
    cluster: str,
    zone: str,
    project_id: str,
    namespace: str,
    settings: Settings,
    verify: bool = True,
) -> List[List[str]]:
    """The command chain that writes cluster credentials into the kubeconfig."""
    commands = [
        [settings.gcloud_bin, "container", "clusters", "get-credentials", cluster,
         "--zone", zone, "--project", project_id],
    ]
    if verify:
        commands.append([settings.kubectl_bin, "get", "po"])
    commands.append(
        [settings.kubectl_bin, "config", "set-context", "--current", f"--namespace={namespace}"]
    )
    return commands


def fetch_cluster_credentials(
    cluster: str,
    zone: str,
    project_id: str,
    namespace: str,
    settings: Settings,
    verify: bool = True,
    kube_config_path: Optional[str] = None,
    stdout: Optional[IO] = None,
) -> None:
    """
    Fetch cluster credentials and switch the active namespace.

    Commands run in order and stop at the first failure. With
    kube_config_path set, the children see it as KUBECONFIG. A CLI
    caller passes stdout=sys.stderr so its own stdout stays machine-readable.
    """
    env = None
    if kube_config_path:
        env = dict(os.environ)
        env["KUBECONFIG"] = kube_config_path

    for argv in get_credentials_commands(cluster, zone, project_id, namespace, settings, verify=verify):
        run_command(argv, env=env, stdout=stdout)


__all__ = [
    "run_command",
    "activate_service_account",
    "get_credentials_commands",
    "fetch_cluster_credentials",
]

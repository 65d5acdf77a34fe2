import json
import sys
from typing import Optional

import typer
import yaml
from jinja2 import Environment

from store_gke_config.core.errors import ConfigError
from store_gke_config.core.logger import set_log_stream
from store_gke_config.tools.gke import execute_store_gke_config_task, generate_store_params

cli_app = typer.Typer(help="Store GKE cluster credentials as workflow step output.")


@cli_app.callback()
def main():
    # stdout carries only the store params; logs and child output go to stderr
    set_log_stream(sys.stderr)


def _echo_params(params: dict, output_format: str) -> None:
    if output_format == "yaml":
        typer.echo(yaml.safe_dump(params, default_flow_style=False, sort_keys=False))
    else:
        typer.echo(json.dumps(params, indent=2))


def _check_format(output_format: str) -> str:
    value = (output_format or "json").lower()
    if value not in ("json", "yaml"):
        raise typer.BadParameter("must be 'json' or 'yaml'", param_hint="--format")
    return value


@cli_app.command("run")
def run(
    cluster: str = typer.Option(..., "--cluster", "-c", help="GKE cluster name"),
    project_id: str = typer.Option(..., "--project-id", "-p", help="GCP project id"),
    zone: str = typer.Option(..., "--zone", "-z", help="Cluster zone"),
    namespace: str = typer.Option("default", "--namespace", "-n", help="Namespace for the kubectl context"),
    credential_json_path: Optional[str] = typer.Option(None, "--credential-json-path", help="Service account key file"),
    credential_json_from_secret_key: Optional[str] = typer.Option(
        None, "--credential-json-from-secret-key", help="Credential key in the server secret store"
    ),
    kube_config_path: Optional[str] = typer.Option(None, "--kube-config-path", help="Kubeconfig location override"),
    verify: bool = typer.Option(True, "--verify/--no-verify", help="Run `kubectl get po` after fetching credentials"),
    output_format: str = typer.Option("json", "--format", "-f", help="Output format: json or yaml"),
):
    """
    Fetch cluster credentials with gcloud and print the store params.
    """
    output_format = _check_format(output_format)
    task_config = {
        "tool": "store_gke_config",
        "cluster": cluster,
        "project_id": project_id,
        "zone": zone,
        "namespace": namespace,
        "credential_json_path": credential_json_path,
        "credential_json_from_secret_key": credential_json_from_secret_key,
        "kube_config_path": kube_config_path,
        "verify": verify,
    }
    try:
        result = execute_store_gke_config_task(task_config, {}, Environment(), command_stdout=sys.stderr)
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=1)

    if result.get("status") != "success":
        typer.echo(f"Error: {result.get('error')}", err=True)
        raise typer.Exit(code=1)
    _echo_params(result["data"], output_format)


@cli_app.command("show")
def show(
    cluster: str = typer.Option(..., "--cluster", "-c", help="Cluster name to record"),
    namespace: str = typer.Option("default", "--namespace", "-n", help="Namespace to record"),
    kube_config_path: Optional[str] = typer.Option(None, "--kube-config-path", help="Kubeconfig location override"),
    output_format: str = typer.Option("json", "--format", "-f", help="Output format: json or yaml"),
):
    """
    Print the store params for the current kubeconfig without calling gcloud.
    """
    output_format = _check_format(output_format)
    try:
        params = generate_store_params(cluster, namespace, kube_config_path=kube_config_path)
    except ConfigError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=1)
    _echo_params(params, output_format)


if __name__ == "__main__":
    cli_app()

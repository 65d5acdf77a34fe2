"""
store_gke_config task execution.

Authenticates to a GKE cluster through the gcloud CLI and stores the
cluster endpoint and credentials as step output:
- Optional service account activation (inline JSON, key file or secret)
- gcloud get-credentials into the kubeconfig, namespace switch with kubectl
- Kubeconfig parsing into the `kubernetes` store params record
"""

import datetime
import uuid
from typing import IO, Any, Callable, Dict, Optional

from jinja2 import Environment

from store_gke_config.core.config import get_settings
from store_gke_config.core.errors import CommandError, ConfigError, classify_error
from store_gke_config.core.logger import LoggingContext, setup_logger
from store_gke_config.core.render import render_template
from store_gke_config.tools.gke.auth import resolve_credential_json
from store_gke_config.tools.gke.commands import activate_service_account, fetch_cluster_credentials
from store_gke_config.tools.gke.kubeconfig import generate_store_params
from store_gke_config.tools.gke.models import StoreGkeConfigRequest

logger = setup_logger(__name__, include_location=True)

TOOL_NAME = "store_gke_config"

PARAMETER_FIELDS = (
    "cluster",
    "project_id",
    "zone",
    "namespace",
    "credential_json",
    "credential_json_path",
    "credential_json_from_secret_key",
    "kube_config_path",
    "verify",
)


def _collect_parameters(
    task_config: Dict[str, Any],
    task_with: Optional[Dict[str, Any]],
    context: Dict[str, Any],
    jinja_env: Environment,
) -> Dict[str, Any]:
    """Merge step fields over `with` parameters and render them."""
    task_with = task_with or {}
    params = {}
    for name in PARAMETER_FIELDS:
        value = task_config.get(name)
        if value is None:
            value = task_with.get(name)
        if value is not None:
            params[name] = render_template(jinja_env, value, context)
    return params


def _args_meta(request: StoreGkeConfigRequest) -> Dict[str, Any]:
    # credential values stay out of events
    return {
        "cluster": request.cluster,
        "project_id": request.project_id,
        "zone": request.zone,
        "namespace": request.namespace,
        "credential_source": (request.credential_sources or [None])[0],
    }


def _report_error(
    log_event_callback: Optional[Callable],
    error: Exception,
    task_id: str,
    task_name: str,
    start_time: datetime.datetime,
    context: Dict[str, Any],
    args_meta: Dict[str, Any],
    event_id: Any,
) -> None:
    if not log_event_callback:
        return
    duration = (datetime.datetime.now() - start_time).total_seconds()
    log_event_callback(
        'task_error', task_id, task_name, TOOL_NAME,
        'error', duration, context, None,
        {"error": str(error), "error_info": classify_error(error).to_dict(), **args_meta}, event_id
    )


def execute_store_gke_config_task(
    task_config: Dict[str, Any],
    context: Dict[str, Any],
    jinja_env: Environment,
    task_with: Optional[Dict[str, Any]] = None,
    log_event_callback: Optional[Callable] = None,
    secret_manager: Any = None,
    command_stdout: Optional[IO] = None,
) -> Dict[str, Any]:
    """
    Execute a store_gke_config task.

    Args:
        task_config: The task configuration containing:
            - cluster: GKE cluster name (required)
            - project_id: GCP project id (required)
            - zone: Cluster zone (required)
            - namespace: Namespace for the kubectl context (default 'default')
            - credential_json / credential_json_path / credential_json_from_secret_key:
              at most one service account credential source
            - kube_config_path: Kubeconfig location override
            - verify: Run `kubectl get po` after fetching credentials
        context: The execution context for Jinja2 rendering
        jinja_env: The Jinja2 environment for template rendering
        task_with: Rendered 'with' parameters, used for fields missing in task_config
        log_event_callback: Optional callback function to log events
        secret_manager: Optional host secret store exposing get_secret(key)
        command_stdout: Stream for gcloud/kubectl stdout, inherited when None

    Returns:
        A dictionary containing the task execution result:
        - id: Task identifier (UUID)
        - status: 'success' or 'error'
        - data: {'kubernetes': {name, master, certs_ca_data, oauth_token, namespace}}
        - error / error_info: on command failure

    Raises:
        ConfigError: Missing or invalid parameters, unreadable credential or kubeconfig

    Example:
        >>> result = execute_store_gke_config_task(
        ...     task_config={
        ...         'tool': 'store_gke_config',
        ...         'cluster': 'analytics',
        ...         'project_id': 'acme-data',
        ...         'zone': 'us-central1-a',
        ...         'credential_json_from_secret_key': 'gke_deployer',
        ...     },
        ...     context={'execution_id': 'exec-123'},
        ...     jinja_env=Environment(),
        ... )
        >>> result['data']['kubernetes']['name']
        'analytics'
    """
    task_id = str(uuid.uuid4())
    task_name = task_config.get('name') or task_config.get('task') or TOOL_NAME
    execution_id = (context or {}).get('execution_id', 'unknown')
    settings = get_settings(reload=True)

    params = _collect_parameters(task_config, task_with, context or {}, jinja_env)
    request = StoreGkeConfigRequest.from_config(params)
    verify = settings.verify_cluster if request.verify is None else request.verify
    args_meta = _args_meta(request)

    with LoggingContext(logger, execution_id=execution_id, cluster=request.cluster):
        logger.info(
            f"GKE.EXECUTE: Starting task_id={task_id} project={request.project_id} "
            f"zone={request.zone} namespace={request.namespace}"
        )
        start_time = datetime.datetime.now()

        event_id = None
        if log_event_callback:
            event_id = log_event_callback(
                'task_start', task_id, task_name, TOOL_NAME,
                'in_progress', 0, context, None,
                args_meta, None
            )

        try:
            credential_json = resolve_credential_json(request, secret_manager=secret_manager)
            if credential_json is not None:
                logger.info(f"GKE.EXECUTE: Activating service account from {args_meta['credential_source']}")
                activate_service_account(credential_json, settings, stdout=command_stdout)

            fetch_cluster_credentials(
                request.cluster,
                request.zone,
                request.project_id,
                request.namespace,
                settings,
                verify=verify,
                kube_config_path=request.kube_config_path,
                stdout=command_stdout,
            )

            store_params = generate_store_params(
                request.cluster,
                request.namespace,
                kube_config_path=request.kube_config_path,
                settings=settings,
            )
        except CommandError as e:
            error_info = classify_error(e)
            logger.error(f"GKE.EXECUTE: Task {task_id} failed: {e}")
            _report_error(log_event_callback, e, task_id, task_name, start_time, context, args_meta, event_id)
            return {
                'id': task_id,
                'status': 'error',
                'error': str(e),
                'error_info': error_info.to_dict(),
                'data': {},
            }
        except ConfigError as e:
            logger.error(f"GKE.EXECUTE: Task {task_id} misconfigured: {e}")
            _report_error(log_event_callback, e, task_id, task_name, start_time, context, args_meta, event_id)
            raise

        duration = (datetime.datetime.now() - start_time).total_seconds()
        logger.success(f"GKE.EXECUTE: Stored kubernetes config for {request.cluster} in {duration:.2f}s")

        if log_event_callback:
            # the token is a credential; events only record where the cluster lives
            log_event_callback(
                'task_complete', task_id, task_name, TOOL_NAME,
                'success', duration, context,
                {"master": store_params["kubernetes"]["master"], "namespace": request.namespace},
                args_meta, event_id
            )

        return {
            'id': task_id,
            'status': 'success',
            'data': store_params,
        }


__all__ = ["TOOL_NAME", "execute_store_gke_config_task"]

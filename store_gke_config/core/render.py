import base64
from typing import Any, Dict
from jinja2 import Environment, Undefined

from store_gke_config.core.logger import setup_logger

logger = setup_logger(__name__, include_location=True)


def _has_template_markers(value: str) -> bool:
    return ('{{' in value and '}}' in value) or ('{%' in value and '%}' in value)


def _handle_undefined_values(value: Any) -> Any:
    """Convert Undefined values to None."""
    if isinstance(value, Undefined):
        return None
    elif isinstance(value, dict):
        return {k: _handle_undefined_values(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [_handle_undefined_values(item) for item in value]
    return value


def add_b64encode_filter(env: Environment) -> Environment:
    """
    Add the b64encode filter to a Jinja2 environment.

    Args:
        env: The Jinja2 environment

    Returns:
        The Jinja2 environment with the b64encode filter added
    """
    if 'b64encode' not in env.filters:
        env.filters['b64encode'] = lambda s: base64.b64encode(
            (s if isinstance(s, str) else str(s)).encode('utf-8')
        ).decode('utf-8')
    return env


def _lookup_path(var_path: str, render_ctx: Dict[str, Any]):
    value = render_ctx
    for part in var_path.split('.'):
        part = part.strip()
        if isinstance(value, dict) and part in value:
            value = value.get(part)
        else:
            return False, None
    return True, value


def render_template(env: Environment, template: Any, context: Dict) -> Any:
    """
    Render a step field with Jinja2.

    Strings without template markers are returned as-is. A bare reference such
    as "{{ workload.cluster }}" returns the referenced value itself, keeping
    its type. Dicts and lists are rendered recursively.

    Args:
        env: The Jinja2 environment
        template: The value to render
        context: The context to use for rendering

    Returns:
        The rendered value
    """
    env = add_b64encode_filter(env)
    render_ctx = dict(context or {})

    if isinstance(template, str):
        if not _has_template_markers(template):
            return template

        expr = template.strip()
        if expr.startswith('{{') and expr.endswith('}}') and expr.count('{{') == 1:
            var_path = expr[2:-2].strip()
            if var_path and not any(op in var_path for op in ['==', '!=', '<', '>', '+', '-', '*', '/', '|', '(', '[', ' if ', ' else ']):
                found, value = _lookup_path(var_path, render_ctx)
                if found:
                    return value

        logger.debug(f"render_template: rendering template with context_keys={list(render_ctx.keys())}")
        rendered = env.from_string(template).render(**render_ctx)
        return _handle_undefined_values(rendered)

    elif isinstance(template, dict):
        return {k: render_template(env, v, render_ctx) for k, v in template.items()}

    elif isinstance(template, list):
        return [render_template(env, item, render_ctx) for item in template]

    return template


__all__ = ["render_template", "add_b64encode_filter"]

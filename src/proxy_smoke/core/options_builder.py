import logging
from typing import Any, Mapping, Optional

from proxy_smoke.config.config import Config
from proxy_smoke.contracts.endpoint import EndpointInput
from proxy_smoke.contracts.harness_options import HarnessOptions
from proxy_smoke.core.endpoint_resolver import EndpointResolver, ensure_port

logger = logging.getLogger(__name__)


def _string_option(args: Mapping[str, Any], key: str) -> Optional[str]:
    # A bare flag (True) or an empty value carries no usable string
    value = args.get(key)
    if isinstance(value, str) and value:
        return value
    return None


def _positive_number(value, fallback: float) -> float:
    if isinstance(value, bool) or value is None:
        return fallback
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring invalid timeout {value!r}, using {fallback}")
        return fallback
    return number if number > 0 else fallback


def build_harness_options(
    args: Mapping[str, Any], resolver: Optional[EndpointResolver] = None
) -> HarnessOptions:
    """
    Build options from parsed command line arguments, falling back to Config.

    Args:
        args (Mapping[str, Any]): Output of ``parse_args``.
        resolver (Optional[EndpointResolver]): Resolver for the remote endpoint.

    Returns:
        HarnessOptions: The frozen options for this run.
    """
    resolver = resolver or EndpointResolver()
    remote_port = args.get("remote-port")
    remote = resolver.resolve(
        EndpointInput(
            protocol=_string_option(args, "remote-protocol"),
            host=_string_option(args, "remote-host"),
            port=None if isinstance(remote_port, bool) else remote_port,
            base_path=_string_option(args, "remote-base-path"),
        )
    )
    return HarnessOptions(
        remote=remote,
        remote_api_key=_string_option(args, "remote-api-key") or "",
        local_host=_string_option(args, "local-host") or Config.LOCAL_HOST,
        local_port=ensure_port(args.get("local-port"), Config.LOCAL_PORT),
        openai_base_path=_string_option(args, "openai-base-path")
        or Config.OPENAI_BASE_PATH,
        model=_string_option(args, "model") or Config.MODEL,
        prompt=_string_option(args, "prompt") or Config.PROMPT,
        system_prompt=_string_option(args, "system-prompt") or Config.SYSTEM_PROMPT,
        verbose=bool(args.get("verbose")),
        timeout=_positive_number(args.get("timeout"), Config.TIMEOUT_MS),
        proxy_controller=_string_option(args, "proxy-controller")
        or Config.PROXY_CONTROLLER_CLASS,
        log_service=_string_option(args, "log-service") or Config.LOG_SERVICE_CLASS,
    )

import logging
from typing import Optional

import httpx

from proxy_smoke.config.config import Config
from proxy_smoke.contracts.endpoint import EndpointInput, ResolvedEndpoint

logger = logging.getLogger(__name__)


def ensure_port(value, fallback: int) -> int:
    """
    Return ``value`` as an integer port if it is a whole number in 1..65535,
    otherwise ``fallback``.
    """
    # A bare ``--remote-port`` flag arrives as True
    if isinstance(value, bool):
        return fallback
    try:
        number = float(value)
    except (TypeError, ValueError):
        return fallback
    if number.is_integer() and 0 < number < 65536:
        return int(number)
    return fallback


def normalize_base_path(path: Optional[str]) -> str:
    """
    Force a leading slash and drop a single trailing slash. Empty paths become "/".
    """
    if not path:
        return "/"
    if not path.startswith("/"):
        path = f"/{path}"
    if len(path) > 1 and path.endswith("/"):
        path = path[:-1]
    return path


def _url_hostname(url: httpx.URL) -> str:
    """
    Host as it appears in a URL: IDNA-encoded, IPv6 literals in brackets.
    """
    host = url.raw_host.decode("ascii")
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    return host


def _strip_scheme_delimiter(protocol: Optional[str]) -> str:
    return (protocol or "").partition(":")[0]


class EndpointResolver:
    """
    Turns loosely specified upstream settings into a ResolvedEndpoint.

    The upstream may be given as discrete protocol/host/port/base-path values or as a
    single URL in ``host``. Values from the URL win over the discrete ones; anything
    missing or invalid degrades to the defaults instead of failing.
    """

    def __init__(self, defaults: Optional[ResolvedEndpoint] = None):
        self.defaults = defaults or ResolvedEndpoint(
            protocol=Config.DEFAULT_REMOTE_PROTOCOL,
            host=Config.DEFAULT_REMOTE_HOST,
            port=Config.DEFAULT_REMOTE_PORT,
            base_path=normalize_base_path(Config.DEFAULT_REMOTE_BASE_PATH),
        )

    def resolve(self, endpoint: EndpointInput) -> ResolvedEndpoint:
        """
        Resolve the user input into a complete endpoint.

        Args:
            endpoint (EndpointInput): Raw remote settings from the command line.

        Returns:
            ResolvedEndpoint: The normalized endpoint; never partially populated.
        """
        if endpoint.host and "://" in endpoint.host:
            try:
                return self._resolve_from_url(endpoint)
            except (httpx.InvalidURL, ValueError) as e:
                logger.warning(
                    f'Could not parse remote host "{endpoint.host}", falling back to defaults: {e}'
                )
        return self._resolve_discrete(endpoint)

    def _resolve_from_url(self, endpoint: EndpointInput) -> ResolvedEndpoint:
        url = httpx.URL(endpoint.host)
        if not url.scheme:
            raise httpx.InvalidURL(f"Missing scheme in {endpoint.host!r}")
        defaults = self.defaults
        # httpx reports port None both when it is absent and when it is the scheme default
        port = url.port if url.port is not None else endpoint.port
        # Keep percent-escapes; url.path is decoded
        raw_path = url.raw_path.decode("ascii").split("?", 1)[0]
        path = raw_path if raw_path and raw_path != "/" else endpoint.base_path
        resolved = ResolvedEndpoint(
            protocol=_strip_scheme_delimiter(url.scheme) or defaults.protocol,
            host=_url_hostname(url) or defaults.host,
            port=ensure_port(port, defaults.port),
            base_path=normalize_base_path(path or defaults.base_path),
        )
        logger.debug(f"Resolved remote endpoint from URL {endpoint.host}: {resolved!r}")
        return resolved

    def _resolve_discrete(self, endpoint: EndpointInput) -> ResolvedEndpoint:
        defaults = self.defaults
        resolved = ResolvedEndpoint(
            protocol=_strip_scheme_delimiter(endpoint.protocol) or defaults.protocol,
            host=endpoint.host or defaults.host,
            port=ensure_port(endpoint.port, defaults.port),
            base_path=normalize_base_path(endpoint.base_path or defaults.base_path),
        )
        if endpoint.port is not None and ensure_port(endpoint.port, None) is None:
            logger.warning(
                f"Ignoring invalid remote port {endpoint.port!r}, using {resolved.port}"
            )
        logger.debug(f"Resolved remote endpoint: {resolved!r}")
        return resolved

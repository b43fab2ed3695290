from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from proxy_smoke.config.config import Config
from proxy_smoke.contracts.endpoint import ResolvedEndpoint


class ProxyConfiguration:
    """
    Dotted-key lookup handed to the proxy controller.
    """

    def __init__(self, values: Dict[str, Any]):
        self._values = dict(values)

    def get(self, key: str, default_value: Any = None) -> Any:
        if key in self._values:
            return self._values[key]
        return default_value

    def __repr__(self):
        return f"ProxyConfiguration({self._values})"


class HarnessOptions(BaseModel):
    """
    Immutable per-run settings built once from the command line.
    """

    model_config = ConfigDict(frozen=True)

    remote: ResolvedEndpoint
    remote_api_key: str = ""
    local_host: str = Config.LOCAL_HOST
    local_port: int = Config.LOCAL_PORT
    openai_base_path: str = Config.OPENAI_BASE_PATH
    model: str = Config.MODEL
    prompt: str = Config.PROMPT
    system_prompt: str = Config.SYSTEM_PROMPT
    verbose: bool = False
    timeout: float = Config.TIMEOUT_MS
    proxy_controller: Optional[str] = Config.PROXY_CONTROLLER_CLASS
    log_service: str = Config.LOG_SERVICE_CLASS

    @property
    def local_base_url(self) -> str:
        return f"http://{self.local_host}:{self.local_port}"

    def to_proxy_configuration(self) -> ProxyConfiguration:
        return ProxyConfiguration(
            {
                "remote.protocol": self.remote.protocol,
                "remote.host": self.remote.host,
                "remote.port": self.remote.port,
                "remote.basePath": self.remote.base_path,
                "remote.apiKey": self.remote_api_key,
                "server.host": self.local_host,
                "server.port": self.local_port,
                "openai.basePath": self.openai_base_path,
            }
        )

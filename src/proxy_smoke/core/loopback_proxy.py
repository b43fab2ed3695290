import asyncio
import logging
from typing import Any, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import ORJSONResponse

from proxy_smoke.abstractions.host_runtime import HostRuntime
from proxy_smoke.abstractions.proxy_controller import ProxyController

logger = logging.getLogger(__name__)

LOOPBACK_MODEL = "loopback"


def create_loopback_app(openai_base_path: str = "/v1", remote_url: str = "") -> FastAPI:
    """
    Build an app answering the smoke-check endpoints with canned payloads.
    """
    app = FastAPI(default_response_class=ORJSONResponse)
    base = openai_base_path.rstrip("/")

    @app.get(f"{base}/models")
    async def list_models():
        return {"object": "list", "data": [{"id": LOOPBACK_MODEL, "object": "model"}]}

    @app.post(f"{base}/chat/completions")
    async def chat_completions(payload: dict):
        return {
            "object": "chat.completion",
            "model": payload.get("model", LOOPBACK_MODEL),
            "choices": [
                {
                    "index": 0,
                    "message": {
                        "role": "assistant",
                        "content": f"Hallo from the loopback proxy for {remote_url}",
                    },
                    "finish_reason": "stop",
                }
            ],
        }

    @app.get("/api/tags")
    async def tags():
        return {"models": [{"name": LOOPBACK_MODEL}]}

    return app


class LoopbackProxyController(ProxyController):
    """
    Controller serving canned responses instead of forwarding upstream. Useful to
    check the harness itself without a real proxy.
    """

    def __init__(self, output: Any, log_service: Any, host_runtime: HostRuntime):
        self.output = output
        self.log_service = log_service
        self._on_did_change_state = host_runtime.EventEmitter()
        self.on_did_change_state = self._on_did_change_state.event
        self._server: Optional[uvicorn.Server] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._server is not None and self._server.started

    async def start_from_configuration(self, config: Any):
        host = config.get("server.host", "127.0.0.1")
        port = int(config.get("server.port", 18000))
        remote_url = (
            f"{config.get('remote.protocol', 'http')}://{config.get('remote.host', '')}"
            f":{config.get('remote.port', '')}{config.get('remote.basePath', '/')}"
        )
        app = create_loopback_app(config.get("openai.basePath", "/v1"), remote_url)
        self._server = uvicorn.Server(
            uvicorn.Config(app, host=host, port=port, log_level="warning", lifespan="off")
        )
        self._task = asyncio.create_task(self._serve(self._server))

        while not self._server.started:
            if self._task.done():
                self._task.result()
                raise RuntimeError("Loopback proxy exited before it started listening")
            await asyncio.sleep(0.05)

        self.output.append_line(f"Loopback proxy listening on http://{host}:{port}")
        self._on_did_change_state.fire("running")

    async def stop_server(self):
        if self._task is not None and not self._task.done():
            self._server.should_exit = True
            await self._task
            self.output.append_line("Loopback proxy stopped")
        self._task = None
        self._server = None
        self._on_did_change_state.fire("stopped")

    @staticmethod
    async def _serve(server: uvicorn.Server):
        try:
            await server.serve()
        except SystemExit as e:
            # uvicorn exits the process when it cannot bind
            raise RuntimeError(f"Loopback proxy failed to start (exit code {e.code})") from e

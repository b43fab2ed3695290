import unittest
from unittest.mock import AsyncMock, MagicMock

import httpx
from fastapi import FastAPI
from fastapi.responses import JSONResponse

from proxy_smoke.abstractions.proxy_controller import ProxyController
from proxy_smoke.core.options_builder import build_harness_options
from proxy_smoke.core.http_json_client import HttpJsonClient
from proxy_smoke.core.smoke_orchestrator import SmokeOrchestrator

ARGS = {
    "local-host": "127.0.0.1",
    "local-port": "18000",
    "openai-base-path": "/v1",
    "model": "gpt-x",
    "prompt": "Hi there",
    "system-prompt": "You are a test",
}


def create_stub_proxy_app(events, openai_base_path="/v1", chat_status=200, models=None,
                          chat=None, tags=None):
    """Stand-in for the proxy under test answering the three smoke endpoints."""
    app = FastAPI()
    app.state.chat_payloads = []

    @app.get(f"{openai_base_path}/models")
    async def list_models():
        events.append(f"{openai_base_path}/models")
        return models if models is not None else {"data": [{"id": "a"}, {"id": "b"}]}

    @app.post(f"{openai_base_path}/chat/completions")
    async def chat_completions(data: dict):
        events.append(f"{openai_base_path}/chat/completions")
        app.state.chat_payloads.append(data)
        if chat_status >= 400:
            return JSONResponse({"error": "upstream failed"}, status_code=chat_status)
        return chat if chat is not None else {"choices": [{"message": {"content": "hello"}}]}

    @app.get("/api/tags")
    async def list_tags():
        events.append("/api/tags")
        return tags if tags is not None else {"models": [{"name": "x"}]}

    return app


class RecordingController(ProxyController):
    def __init__(self, events, start_error=None, stop_error=None):
        self.events = events
        self.start_error = start_error
        self.stop_error = stop_error
        self.config = None

    async def start_from_configuration(self, config):
        self.events.append("start")
        self.config = config
        if self.start_error:
            raise self.start_error

    async def stop_server(self):
        self.events.append("stop")
        if self.stop_error:
            raise self.stop_error


class TestSmokeOrchestrator(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.events = []

    def _orchestrator(self, app=None, args=None, controller=None, transport=None):
        options = build_harness_options({**ARGS, **(args or {})})
        app = app or create_stub_proxy_app(self.events)
        transport = transport or httpx.ASGITransport(app=app)
        self.http_client = httpx.AsyncClient(transport=transport)
        self.controller = controller or RecordingController(self.events)
        return SmokeOrchestrator(options, self.controller, HttpJsonClient(self.http_client))

    async def asyncTearDown(self):
        await self.http_client.aclose()

    async def test_all_checks_pass(self):
        """Test the happy path: three checks in order, then the proxy is stopped"""
        outcome = await self._orchestrator().run()

        self.assertTrue(outcome.success)
        self.assertEqual(outcome.exit_code, 0)
        self.assertIsNone(outcome.error)
        self.assertEqual(
            self.events,
            ["start", "/v1/models", "/v1/chat/completions", "/api/tags", "stop"],
        )
        self.assertEqual(
            [(c.name, c.detail) for c in outcome.checks],
            [("models", 2), ("chat_completion", "hello"), ("raw_tags", 1)],
        )

    async def test_chat_failure_stops_sequence_and_proxy(self):
        """Test that an HTTP 500 aborts the remaining checks but still stops the proxy"""
        app = create_stub_proxy_app(self.events, chat_status=500)
        outcome = await self._orchestrator(app=app).run()

        self.assertFalse(outcome.success)
        self.assertEqual(outcome.exit_code, 1)
        self.assertIn("HTTP 500", outcome.error)
        self.assertNotIn("/api/tags", self.events)
        self.assertEqual(self.events, ["start", "/v1/models", "/v1/chat/completions", "stop"])
        self.assertEqual([c.name for c in outcome.checks], ["models"])

    async def test_chat_request_payload(self):
        app = create_stub_proxy_app(self.events)
        await self._orchestrator(app=app).run()

        self.assertEqual(
            app.state.chat_payloads,
            [
                {
                    "model": "gpt-x",
                    "messages": [
                        {"role": "system", "content": "You are a test"},
                        {"role": "user", "content": "Hi there"},
                    ],
                    "stream": False,
                }
            ],
        )

    async def test_missing_lists_are_reported_as_empty(self):
        app = create_stub_proxy_app(self.events, models={}, chat={"choices": []}, tags={"models": None})
        outcome = await self._orchestrator(app=app).run()

        self.assertTrue(outcome.success)
        self.assertEqual([c.detail for c in outcome.checks], [0, None, 0])

    async def test_tags_path_ignores_openai_base_path(self):
        app = create_stub_proxy_app(self.events, openai_base_path="/openai")
        outcome = await self._orchestrator(app=app, args={"openai-base-path": "/openai"}).run()

        self.assertTrue(outcome.success)
        self.assertEqual(
            self.events,
            ["start", "/openai/models", "/openai/chat/completions", "/api/tags", "stop"],
        )

    async def test_controller_receives_configuration(self):
        orchestrator = self._orchestrator(
            args={"remote-host": "https://upstream.example:8443/ollama/", "remote-api-key": "k"}
        )
        await orchestrator.run()

        config = self.controller.config
        self.assertEqual(config.get("remote.protocol"), "https")
        self.assertEqual(config.get("remote.host"), "upstream.example")
        self.assertEqual(config.get("remote.port"), 8443)
        self.assertEqual(config.get("remote.basePath"), "/ollama")
        self.assertEqual(config.get("remote.apiKey"), "k")
        self.assertEqual(config.get("server.host"), "127.0.0.1")
        self.assertEqual(config.get("server.port"), 18000)
        self.assertEqual(config.get("openai.basePath"), "/v1")

    async def test_start_failure_still_stops_proxy(self):
        controller = RecordingController(self.events, start_error=RuntimeError("bind failed"))
        outcome = await self._orchestrator(controller=controller).run()

        self.assertFalse(outcome.success)
        self.assertEqual(outcome.error, "bind failed")
        self.assertEqual(self.events, ["start", "stop"])

    async def test_transport_error_fails_run(self):
        def refuse(request):
            raise httpx.ConnectError("Connection refused")

        orchestrator = self._orchestrator(transport=httpx.MockTransport(refuse))
        outcome = await orchestrator.run()

        self.assertFalse(outcome.success)
        self.assertIn("Connection refused", outcome.error)
        self.assertEqual(self.events, ["start", "stop"])

    async def test_stop_failure_turns_success_into_failure(self):
        controller = RecordingController(self.events, stop_error=RuntimeError("stuck"))
        outcome = await self._orchestrator(controller=controller).run()

        self.assertFalse(outcome.success)
        self.assertEqual(outcome.error, "stuck")
        self.assertEqual(len(outcome.checks), 3)

    async def test_stop_failure_keeps_original_check_error(self):
        app = create_stub_proxy_app(self.events, chat_status=503)
        controller = RecordingController(self.events, stop_error=RuntimeError("stuck"))
        outcome = await self._orchestrator(app=app, controller=controller).run()

        self.assertIn("HTTP 503", outcome.error)

    async def test_mocked_controller_is_awaited(self):
        controller = MagicMock(spec=ProxyController)
        controller.start_from_configuration = AsyncMock()
        controller.stop_server = AsyncMock()
        outcome = await self._orchestrator(controller=controller).run()

        self.assertTrue(outcome.success)
        controller.start_from_configuration.assert_awaited_once()
        controller.stop_server.assert_awaited_once()


class TestOrchestratorOwnedClient(unittest.IsolatedAsyncioTestCase):
    async def test_owned_http_client_is_closed(self):
        controller = RecordingController([], start_error=RuntimeError("no proxy"))
        orchestrator = SmokeOrchestrator(build_harness_options(ARGS), controller)
        await orchestrator.run()
        self.assertTrue(orchestrator.http.client.is_closed)


if __name__ == "__main__":
    unittest.main()

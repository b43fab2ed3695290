import logging
import time
from typing import Any, List, Optional

from proxy_smoke.abstractions.proxy_controller import ProxyController
from proxy_smoke.contracts.harness_options import HarnessOptions
from proxy_smoke.contracts.outcome import CheckResult, TestOutcome
from proxy_smoke.core.http_json_client import HttpJsonClient

logger = logging.getLogger(__name__)

# Served by the proxy outside the OpenAI-style base path
RAW_TAGS_PATH = "/api/tags"


def _count_items(payload: Any, key: str) -> int:
    items = payload.get(key) if isinstance(payload, dict) else None
    return len(items) if isinstance(items, list) else 0


def _first_choice_content(payload: Any) -> Optional[Any]:
    choices = payload.get("choices") if isinstance(payload, dict) else None
    if not isinstance(choices, list) or not choices:
        return None
    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    return message.get("content") if isinstance(message, dict) else None


class SmokeOrchestrator:
    """
    Runs the smoke checks one after another against a proxy it starts and stops.
    """

    def __init__(
        self,
        options: HarnessOptions,
        controller: ProxyController,
        http_client: Optional[HttpJsonClient] = None,
    ):
        """
        Initialize the SmokeOrchestrator.

        Args:
            options (HarnessOptions): Settings for this run.
            controller (ProxyController): Controller owning the proxy under test.
            http_client (Optional[HttpJsonClient]): Client for the checks; built from
                ``options`` when omitted.
        """
        self.options = options
        self.controller = controller
        self.http = http_client or HttpJsonClient(
            timeout_ms=options.timeout, verbose=options.verbose
        )
        self.checks = [
            ("models", self.check_models),
            ("chat_completion", self.check_chat_completion),
            ("raw_tags", self.check_raw_tags),
        ]

    def _openai_url(self, suffix: str) -> str:
        return f"{self.options.local_base_url}{self.options.openai_base_path}{suffix}"

    async def check_models(self) -> int:
        response = await self.http.fetch_json(self._openai_url("/models"))
        count = _count_items(response, "data")
        logger.info(f"Models response: {count}")
        return count

    async def check_chat_completion(self) -> Optional[Any]:
        payload = {
            "model": self.options.model,
            "messages": [
                {"role": "system", "content": self.options.system_prompt},
                {"role": "user", "content": self.options.prompt},
            ],
            "stream": False,
        }
        response = await self.http.fetch_json(
            self._openai_url("/chat/completions"), payload
        )
        content = _first_choice_content(response)
        logger.info(f"Chat completion: {content}")
        return content

    async def check_raw_tags(self) -> int:
        response = await self.http.fetch_json(
            f"{self.options.local_base_url}{RAW_TAGS_PATH}"
        )
        count = _count_items(response, "models")
        logger.info(f"Raw {RAW_TAGS_PATH}: {count}")
        return count

    async def run_checks(
        self, results: Optional[List[CheckResult]] = None
    ) -> List[CheckResult]:
        """
        Await each check in turn, appending to ``results`` as they pass. The first
        failing check raises and the rest are skipped.
        """
        results = results if results is not None else []
        for name, check in self.checks:
            start = time.perf_counter()
            detail = await check()
            results.append(
                CheckResult(name=name, detail=detail, elapsed=time.perf_counter() - start)
            )
        return results

    async def run(self) -> TestOutcome:
        """
        Start the proxy, run the checks and stop the proxy again, whatever happened.

        Returns:
            TestOutcome: Success only if startup, all checks and shutdown succeeded.
        """
        checks: List[CheckResult] = []
        try:
            await self.controller.start_from_configuration(
                self.options.to_proxy_configuration()
            )
            logger.info(
                f"Proxy started on {self.options.local_base_url} forwarding to "
                f"{self.options.remote.url}"
            )
            await self.run_checks(checks)
            outcome = TestOutcome.passed(checks)
            logger.info("✅ Proxy smoke test completed without errors.")
        except Exception as e:
            logger.error(f"❌ Test failed: {e!r}")
            outcome = TestOutcome.failed(e, checks)
        finally:
            stop_error = await self._stop_proxy()
            await self.http.aclose()

        if stop_error is not None and outcome.success:
            outcome = TestOutcome.failed(stop_error, checks)
        return outcome

    async def _stop_proxy(self) -> Optional[Exception]:
        try:
            await self.controller.stop_server()
        except Exception as e:
            logger.error("Failed to stop proxy server", exc_info=e)
            return e
        logger.info("Proxy server stopped.")
        return None

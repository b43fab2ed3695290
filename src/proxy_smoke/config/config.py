import os


class Config:
    """
    Configuration class for environment variables and default settings.
    """

    # Fallback upstream used when the CLI leaves a remote field unset or invalid
    DEFAULT_REMOTE_PROTOCOL = os.environ.get("DEFAULT_REMOTE_PROTOCOL", "http")
    DEFAULT_REMOTE_HOST = os.environ.get("DEFAULT_REMOTE_HOST", "45.11.228.163")
    DEFAULT_REMOTE_PORT = int(os.environ.get("DEFAULT_REMOTE_PORT", "11434"))
    DEFAULT_REMOTE_BASE_PATH = os.environ.get("DEFAULT_REMOTE_BASE_PATH", "/")

    LOCAL_HOST = os.environ.get("LOCAL_HOST", "127.0.0.1")
    LOCAL_PORT = int(os.environ.get("LOCAL_PORT", "18000"))
    OPENAI_BASE_PATH = os.environ.get("OPENAI_BASE_PATH", "/v1")

    MODEL = os.environ.get("SMOKE_MODEL", "gpt-oss:20b")
    PROMPT = os.environ.get("SMOKE_PROMPT", "Sag Hallo und nenne den Host.")
    SYSTEM_PROMPT = os.environ.get("SMOKE_SYSTEM_PROMPT", "Du bist ein Test")
    TIMEOUT_MS = int(os.environ.get("SMOKE_TIMEOUT_MS", "30000"))

    # Dotted import paths for the collaborators wired into the harness
    PROXY_CONTROLLER_CLASS = os.environ.get("PROXY_CONTROLLER_CLASS")
    LOG_SERVICE_CLASS = os.environ.get(
        "LOG_SERVICE_CLASS", "proxy_smoke.core.log_service.InMemoryLogService"
    )

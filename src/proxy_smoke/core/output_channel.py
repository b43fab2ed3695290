import logging

logger = logging.getLogger("proxy_smoke.proxy")


class ConsoleOutputChannel:
    """
    Output sink given to the proxy controller; each line goes to the harness log.
    """

    def __init__(self, channel_logger: logging.Logger = logger):
        self.logger = channel_logger

    def append_line(self, line: str):
        self.logger.info(line)

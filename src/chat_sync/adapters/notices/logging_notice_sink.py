"""Notice sink that writes user-visible notices to the log."""

import logging

from chat_sync.domain.contracts.notice_sink import NoticeSinkProtocol

logger = logging.getLogger(__name__)


class LoggingNoticeSink(NoticeSinkProtocol):
    """Shows notices as warnings in the log; keeps the latest for inspection."""

    def __init__(self) -> None:
        self.last_notice: str | None = None

    def show_notice(self, message: str) -> None:
        self.last_notice = message
        logger.warning(message)

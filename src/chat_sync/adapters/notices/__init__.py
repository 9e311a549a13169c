"""Notice adapters."""

from chat_sync.adapters.notices.logging_notice_sink import LoggingNoticeSink

__all__ = ["LoggingNoticeSink"]

"""Abstract message source — lifecycle and the fetch contract."""

from __future__ import annotations

import abc
from types import TracebackType

from src.core.types import RawMessage
from src.mailbox.window import TimeWindow


class MessageSource(abc.ABC):
    """Base class for mailbox stores that alerts are read from.

    Usage::

        async with MailpitSource(config) as source:
            messages = await source.fetch(day_window(date))
    """

    @abc.abstractmethod
    async def connect(self) -> None:
        """Open the connection to the store."""

    @abc.abstractmethod
    async def close(self) -> None:
        """Release the connection."""

    @abc.abstractmethod
    async def fetch(self, window: TimeWindow) -> list[RawMessage]:
        """Return messages created inside *window*, bodies resolved.

        Raises:
            SourceUnavailableError: the listing call failed.
        """

    async def __aenter__(self) -> MessageSource:
        await self.connect()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

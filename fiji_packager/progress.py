from __future__ import annotations

import logging
import sys
from contextlib import ExitStack
from typing import Optional, Protocol

import typer

logger = logging.getLogger(__name__)


class Progress(Protocol):
    def set_title(self, title: str) -> None: ...

    def set_count(self, count: int, total: int) -> None: ...

    def add_item(self, item: str) -> None: ...

    def item_done(self, item: str) -> None: ...

    def done(self) -> None: ...


class LoggingProgress:
    def __init__(self, level: int = logging.DEBUG) -> None:
        self._level = level
        self._title = ""

    def set_title(self, title: str) -> None:
        self._title = title
        logger.log(self._level, "%s", title)

    def set_count(self, count: int, total: int) -> None:
        logger.log(self._level, "%s: %d/%d", self._title, count, total)

    def add_item(self, item: str) -> None:
        logger.log(self._level, "%s", item)

    def item_done(self, item: str) -> None:
        pass

    def done(self) -> None:
        logger.log(self._level, "%s: done", self._title)

    def __enter__(self) -> LoggingProgress:
        return self

    def __exit__(self, *exc_info) -> None:
        pass


class ConsoleProgress:
    """Progress bar on stderr; the bar is created once the total is known.

    Use it as a context manager so the bar is closed even when a run fails.
    """

    def __init__(self) -> None:
        self._title = ""
        self._item: Optional[str] = None
        self._stack = ExitStack()
        self._bar = None
        self._position = 0

    def set_title(self, title: str) -> None:
        self._title = title

    def set_count(self, count: int, total: int) -> None:
        if self._bar is None:
            self._bar = self._stack.enter_context(
                typer.progressbar(
                    length=total,
                    label=self._title,
                    file=sys.stderr,
                    item_show_func=lambda item: item,
                )
            )
        if count > self._position:
            self._bar.update(count - self._position, self._item)
            self._position = count

    def add_item(self, item: str) -> None:
        self._item = item

    def item_done(self, item: str) -> None:
        pass

    def done(self) -> None:
        self._stack.close()
        self._bar = None
        self._position = 0

    def __enter__(self) -> ConsoleProgress:
        return self

    def __exit__(self, *exc_info) -> None:
        # closes the bar when the run stopped before done()
        self.done()

from __future__ import annotations

import asyncio
import datetime
import io
import pathlib
import sys
import threading
from typing import Callable, TypeVar

import msgspec

from .config import LoggingConfig, StreamType
from .models import Entry, Log


T = TypeVar('T', bound=Entry)

DEFAULT_TEMPLATE = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - {message}"
ERROR_TEMPLATE = "{timestamp} - {level} - {thread_id}.{filename}:{function_name}.{line_number} - {error}"


class Logger:
    """
    Async structured logger.

    Entries are rendered through a format template to stdout/stderr, or,
    when a path is configured, appended to that file as msgspec-encoded
    JSON lines. Level filtering and stream selection come from the shared
    LoggingConfig so every Logger in the process honours the same settings.
    """

    def __init__(
        self,
        name: str | None = None,
        template: str | None = None,
        path: str | None = None,
    ) -> None:
        if name is None:
            name = 'default'

        self._name = name
        self._template = template or DEFAULT_TEMPLATE
        self._logfile_path: pathlib.Path | None = None
        self._logfile: io.BufferedWriter | None = None
        self._write_lock = asyncio.Lock()
        self._config = LoggingConfig()
        self._closed = False

        if path:
            self._logfile_path = pathlib.Path(path).absolute()

    @property
    def name(self):
        return self._name

    def configure(
        self,
        template: str | None = None,
        path: str | None = None,
    ):
        if template:
            self._template = template

        if path:
            self._close_logfile()
            self._logfile_path = pathlib.Path(path).absolute()

    async def log(
        self,
        entry: T,
        template: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        if self._closed:
            return

        if self._config.enabled(self._name, entry.level) is False:
            return

        if filter and filter(entry) is False:
            return

        frame = sys._getframe(1)
        code = frame.f_code

        log = Log(
            entry=entry,
            filename=code.co_filename,
            function_name=code.co_name,
            line_number=frame.f_lineno,
            thread_id=threading.get_native_id(),
            timestamp=datetime.datetime.now(datetime.UTC).isoformat(),
        )

        loop = asyncio.get_running_loop()

        async with self._write_lock:
            try:
                if self._logfile_path:
                    await loop.run_in_executor(
                        None,
                        self._write_to_file,
                        log,
                    )

                else:
                    await loop.run_in_executor(
                        None,
                        self._write_to_stream,
                        log,
                        template or self._template,
                        self._config.output,
                    )

            except Exception as err:
                sys.stderr.write(
                    entry.to_template(
                        ERROR_TEMPLATE,
                        context={
                            "filename": log.filename,
                            "function_name": log.function_name,
                            "line_number": log.line_number,
                            "error": str(err),
                            "thread_id": log.thread_id,
                            "timestamp": log.timestamp,
                        },
                    ) + "\n"
                )

    def open(self):
        """Accept entries again after close(). The log file reopens on the next write."""
        self._closed = False

    async def close(self):
        self._closed = True

        async with self._write_lock:
            self._close_logfile()

    def _write_to_stream(self, log: Log, template: str, stream_type: StreamType):
        stream = sys.stdout if stream_type == StreamType.STDOUT else sys.stderr
        stream.write(
            log.entry.to_template(
                template,
                context={
                    "filename": log.filename,
                    "function_name": log.function_name,
                    "line_number": log.line_number,
                    "thread_id": log.thread_id,
                    "timestamp": log.timestamp,
                },
            ) + "\n"
        )
        stream.flush()

    def _write_to_file(self, log: Log):
        if self._logfile is None or self._logfile.closed:
            self._logfile_path.parent.mkdir(parents=True, exist_ok=True)
            self._logfile = open(self._logfile_path, 'ab')

        self._logfile.write(msgspec.json.encode(log) + b"\n")
        self._logfile.flush()

    def _close_logfile(self):
        if self._logfile and not self._logfile.closed:
            self._logfile.close()

        self._logfile = None

from enum import Enum
from typing import Callable, Optional
from urllib.parse import urlparse

import logging
import asyncio
import aiohttp
import aiofiles
import traceback
import time

from .constants import CHUNK_SIZE, REQUEST_TIMEOUT_SECONDS
from .exceptions import OutputFileError, TransportInitializationError, UnexpectedStatusException


class TransferState(Enum):
    PENDING = 0
    RUNNING = 1
    COMPLETED = 2
    ERROR = 3


def normalize_url(url: str) -> str:
    """
    Prefix scheme-less URLs with http:// and reject anything that is not http(s).
    """

    if "://" not in url:
        url = f"http://{url}"

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise TransportInitializationError(url, "only http and https URLs are supported")
    return url


class HttpTransport:
    """
    Streams a single HTTP GET with aiohttp and reports progress.

    Progress is reported by calling `progress_callback(self)` once the response
    headers arrive and after every received chunk. The callback runs on the
    event loop thread that runs `run()`.
    """

    def __init__(
            self,
            url: str,
            output_file: Optional[str] = None,
            progress_callback: Optional[Callable[["HttpTransport"], object]] = None,
            chunk_size: int = CHUNK_SIZE,
            request_timeout: float = REQUEST_TIMEOUT_SECONDS
        ) -> None:

        self.url = normalize_url(url)
        self.output_file = output_file
        self.state = TransferState.PENDING
        self.error_string = ""

        self._progress_callback = progress_callback
        self._chunk_size = chunk_size
        self._request_timeout = request_timeout
        self._output = None
        self._started_at: Optional[float] = None
        self._downloaded_bytes = 0

    def elapsed(self) -> float:
        if self._started_at is None:
            return 0.0
        return time.monotonic() - self._started_at

    def downloaded_bytes(self) -> int:
        return self._downloaded_bytes

    def speed(self) -> float:
        """Average bytes/sec since the request was issued."""
        elapsed = self.elapsed()
        if elapsed <= 0:
            return 0.0
        return self._downloaded_bytes / elapsed

    async def open_output(self) -> None:
        """
        Open the output file, truncating it.
        Does nothing when no output file was requested.

        Raises:
            OutputFileError: If the file cannot be opened for writing.
        """

        if not self.output_file:
            return
        try:
            self._output = await aiofiles.open(self.output_file, "wb")
        except OSError as err:
            raise OutputFileError(self.output_file, err) from err
        logging.debug(f"Opened output file {self.output_file}")

    async def _close_output(self) -> None:
        if self._output is not None:
            await self._output.close()
            self._output = None
            logging.debug(f"Closed output file {self.output_file}")

    def _notify_progress(self) -> None:
        if self._progress_callback is not None:
            self._progress_callback(self)

    async def run(self) -> TransferState:
        """
        Perform the transfer to completion.

        - Issues the GET and validates the response status
        - Writes each chunk verbatim to the output file, when there is one
        - Reports progress after the headers and after each chunk
        - Closes the output file whatever the outcome

        Returns:
            TransferState: COMPLETED or ERROR.
        """

        session = aiohttp.ClientSession()
        self._started_at = time.monotonic()
        self.state = TransferState.RUNNING
        logging.info(f"Starting transfer of {self.url}")

        try:
            async with session.get(self.url, timeout=aiohttp.ClientTimeout(total=self._request_timeout)) as resp:
                if resp.status not in [200, 206]:
                    raise UnexpectedStatusException(resp.status, expected=(200, 206), url=self.url)

                self._notify_progress()
                async for chunk in resp.content.iter_chunked(self._chunk_size):
                    if self._output is not None:
                        await self._output.write(chunk)
                    self._downloaded_bytes += len(chunk)
                    self._notify_progress()

            self.state = TransferState.COMPLETED
            logging.info(f"Transfer complete, {self._downloaded_bytes} bytes in {self.elapsed():.2f} seconds")
        except asyncio.CancelledError:
            self.state = TransferState.ERROR
            raise
        except Exception as err:
            tb = traceback.format_exc()
            logging.error(f"Traceback: {tb}")
            logging.error(f"Transfer failed: {repr(err)}, {err}")
            self.state = TransferState.ERROR
            self.error_string = f"{repr(err)}, {err}"
        finally:
            await self._close_output()
            await session.close()

        return self.state


__all__ = ["HttpTransport", "TransferState", "normalize_url"]

import asyncio
import pytest
import os
import logging

from bwplotter.asyncio_thread import AsyncioEventLoopThread


class MockResponse:
    def __init__(self, status):
        self.status = status
        self.content = self
        self.queue = asyncio.Queue()
        self.stop = False
        self.exception = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False

    async def iter_chunked(self, chunk_size_limit):
        while not self.stop or not self.queue.empty():
            if self.exception is not None:
                raise self.exception

            if not self.queue.empty():
                chunk = await self.queue.get()
                yield chunk
            else:
                await asyncio.sleep(0.05)

    def add_chunk(self, chunk):
        self.queue.put_nowait(chunk)

    def end_response(self):
        self.stop = True

    def set_exception(self, exception: Exception):
        self.exception = exception


class MockSession:
    def __init__(self, responses):
        self._responses = responses
        self.closed = False

    def get(self, url, timeout=None):
        return self._responses[url]

    async def close(self):
        self.closed = True
        return


class FakeTransport:
    """Scripted progress source for the rate estimator."""

    def __init__(self):
        self.now = 0.0
        self.bytes = 0
        self.rate = 0.0

    def at(self, now, n_bytes, rate=0.0):
        self.now = now
        self.bytes = n_bytes
        self.rate = rate
        return self

    def elapsed(self):
        return self.now

    def downloaded_bytes(self):
        return self.bytes

    def speed(self):
        return self.rate


@pytest.fixture
def async_thread_runner(request):
    runner = AsyncioEventLoopThread()

    def cleanup():
        logging.debug("Async thread fixture shutting down.")
        runner.shutdown()

    request.addfinalizer(cleanup)
    return runner


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def create_mock_response_and_set_mock_session(monkeypatch):

    def factory(return_status, mock_url, chunks=None):
        mock_res = MockResponse(return_status)
        for chunk in chunks or []:
            mock_res.add_chunk(chunk)
        monkeypatch.setattr("aiohttp.ClientSession", lambda: MockSession({mock_url: mock_res}))
        return mock_res

    return factory


@pytest.fixture
def test_file_setup_and_cleanup(request):
    test_file_name = ""

    def setup(file_name):
        nonlocal test_file_name
        test_file_name = file_name
        if os.path.exists(test_file_name):
            os.remove(test_file_name)

    def cleanup():
        if test_file_name != "" and os.path.exists(test_file_name):
            logging.debug(f"Cleaning up {test_file_name=}")
            os.remove(test_file_name)

    request.addfinalizer(cleanup)
    yield setup

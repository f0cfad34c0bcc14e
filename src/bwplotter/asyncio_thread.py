import asyncio
import logging
import threading

from concurrent.futures import Future, TimeoutError as FutureTimeoutError


class ProducerThreadError(Exception):
    pass


class AsyncioEventLoopThread:
    """
    Producer thread: an asyncio event loop running in its own thread.
    The transfer and the rate estimator run here; the render loop only submits
    coroutines and polls the returned futures.
    """

    def __init__(self, name: str = "producer"):
        self.loop = asyncio.new_event_loop()
        self.thread = threading.Thread(
            target=self._run_loop,
            name=name,
            daemon=True
        )
        self.thread.start()

    def _run_loop(self):
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()
        self.loop.close()

    def submit(self, coro) -> Future:
        return asyncio.run_coroutine_threadsafe(coro, self.loop)

    def run_setup(self, coro, timeout: float = 30.0):
        """
        Run an initialization coroutine and wait for it.
        Exceptions raised by the coroutine propagate to the caller.
        """
        future = self.submit(coro)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError as err:
            future.cancel()
            raise ProducerThreadError(f"Setup did not finish within {timeout} seconds") from err

    def shutdown(self, timeout: float = 30.0):
        if not self.thread.is_alive():
            return
        logging.debug("Stopping producer event loop")
        self.loop.call_soon_threadsafe(self.loop.stop)
        self.thread.join(timeout)
        if self.thread.is_alive():
            raise ProducerThreadError("Failed to join producer thread after timeout!")


__all__ = ["AsyncioEventLoopThread", "ProducerThreadError"]

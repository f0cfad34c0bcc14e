from enum import Enum
from typing import Optional, Protocol, List

import logging
import time
import traceback

from .asyncio_thread import AsyncioEventLoopThread
from .chart import ChartModel, DrawList
from .constants import FRAME_INTERVAL_SECONDS, DEFAULT_RATE_CEILING
from .rateestimator import RateEstimator
from .samplequeue import SampleQueue
from .transport import HttpTransport, TransferState


class AppState(Enum):
    RUNNING = 0
    CLOSED = 1


class InputEvent(Enum):
    CLOSE = 0
    QUIT_KEY = 1


class Renderer(Protocol):
    width: float
    height: float

    def poll_events(self) -> List[InputEvent]: ...
    def draw(self, draw_list: DrawList) -> None: ...
    def close(self) -> None: ...


class BandwidthPlotter:
    """
    Wires the transfer, the rate estimator and the chart together and drives the render loop.

    The producer thread runs the transfer with the estimator as its progress
    callback; the calling thread runs `run()`, consuming one Sample per frame.
    """

    def __init__(
            self,
            renderer: Renderer,
            url: str,
            output_file: Optional[str] = None,
            runner: Optional[AsyncioEventLoopThread] = None,
            initial_rate_ceiling: float = DEFAULT_RATE_CEILING,
            frame_interval_seconds: float = FRAME_INTERVAL_SECONDS
        ) -> None:

        self.renderer = renderer
        self.state = AppState.RUNNING
        self.sample_queue = SampleQueue()
        self.estimator = RateEstimator(self.sample_queue)

        self.transport = HttpTransport(url, output_file, progress_callback=self.estimator.on_progress)

        self.chart = ChartModel(
            self.sample_queue,
            renderer.width,
            renderer.height,
            url=self.transport.url,
            initial_rate_ceiling=initial_rate_ceiling
        )

        self._runner = runner
        self._frame_interval_seconds = frame_interval_seconds
        self._transfer_future = None
        self._opened = False

    def open(self) -> None:
        """
        Start the producer thread and open the output file.

        Raises:
            OutputFileError: If the output file cannot be opened.
        """

        if self._runner is None:
            self._runner = AsyncioEventLoopThread()
        try:
            self._runner.run_setup(self.transport.open_output())
        except Exception:
            self._runner.shutdown()
            raise
        self._opened = True

    def close(self) -> None:
        if self.state != AppState.CLOSED:
            logging.info("Closing window")
        self.state = AppState.CLOSED

    def frame(self) -> None:
        """
        One render loop iteration: input, update, draw.
        A close or quit event ends the frame without drawing.
        """

        for event in self.renderer.poll_events():
            if event in [InputEvent.CLOSE, InputEvent.QUIT_KEY]:
                self.close()

        if self.state == AppState.CLOSED:
            return

        # Outcome is shown only once every queued sample has been plotted
        if (self._transfer_future is not None and self._transfer_future.done()
                and self.chart.transfer_state is None and len(self.sample_queue) == 0):
            self.chart.set_transfer_state(self._transfer_outcome())

        self.chart.update()
        self.renderer.draw(self.chart.draw_list())

    def _transfer_outcome(self) -> TransferState:
        try:
            return self._transfer_future.result()
        except Exception as err:
            logging.error(f"Transfer task raised {repr(err)}, {err}")
            return TransferState.ERROR

    def run(self) -> int:
        """
        Run the render loop until the window is closed.

        Closing the window does not cancel the transfer: it is awaited before
        the producer thread is stopped.

        Returns:
            int: process exit code.
        """

        if not self._opened:
            self.open()

        self._transfer_future = self._runner.submit(self.transport.run())

        try:
            try:
                while self.state == AppState.RUNNING:
                    self.frame()
                    time.sleep(self._frame_interval_seconds)
            finally:
                self.renderer.close()
        finally:
            self._wait_for_transfer()

        return 0

    def _wait_for_transfer(self) -> None:
        if not self._transfer_future.done():
            logging.info("Render loop ended, waiting for the transfer to finish")
        try:
            state = self._transfer_future.result()
            logging.info(f"Transfer finished with state {state.name}")
        except Exception as err:
            tb = traceback.format_exc()
            logging.error(f"Traceback: {tb}")
            logging.error(f"{repr(err)}, {err}")
        finally:
            self._runner.shutdown()


__all__ = ["BandwidthPlotter", "AppState", "InputEvent", "Renderer"]

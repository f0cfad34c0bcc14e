from bwplotter.core import InputEvent
from bwplotter.rateestimator import Sample

def make_sample(time, instant=0.0, window=0.0, cumulative_kb=0.0):
    return Sample(time=time, cumulative_kb=cumulative_kb, instant_rate_kbs=instant, window_rate_kbs=window)


def push_samples(queue, samples):
    for sample in samples:
        queue.push(sample)


def drain(chart):
    """Update the chart until its queue is empty, returning the number of frames that changed it."""
    n = 0
    while chart.update():
        n += 1
    return n


def verify_file(file_name, expected_bytes):
    with open(file_name, "rb") as f:
        file_bytes = f.read()

    assert file_bytes == expected_bytes, f"Downloaded file did not match expected.\n{len(file_bytes)=}\n{len(expected_bytes)=}"


class FakeRenderer:
    def __init__(self, width=1200, height=400, close_after_frames=None, events=None):
        self.width = width
        self.height = height
        self.close_after_frames = close_after_frames
        self.events = list(events or [])
        self.frames = 0
        self.draws = []
        self.closed = False

    def poll_events(self):
        self.frames += 1
        if self.close_after_frames is not None and self.frames >= self.close_after_frames:
            return [InputEvent.CLOSE]
        if self.events:
            return self.events.pop(0)
        return []

    def draw(self, draw_list):
        self.draws.append(draw_list)

    def close(self):
        self.closed = True

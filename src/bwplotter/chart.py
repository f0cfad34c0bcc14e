from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import logging

from .constants import (
    ONE_KIBIBYTE, PIXELS_PER_SECOND, PADDING, RIGHT_MARGIN, DEFAULT_RATE_CEILING,
    AXIS_COLOR, TEXT_COLOR, AVERAGE_COLOR, CURRENT_COLOR, RATE_LABEL_SIZE, INFO_LABEL_SIZE
)
from .samplequeue import SampleQueue
from .transport import TransferState


@dataclass(frozen=True)
class SeriesPoint:
    time: float
    value: float


@dataclass(frozen=True)
class ScreenVertex:
    x: float
    y: float
    color: str


@dataclass
class AxisState:
    plot_width: float
    plot_height: float
    padding: Tuple[float, float] = PADDING
    origin_time: float = 0.0
    rate_ceiling: float = DEFAULT_RATE_CEILING
    pixels_per_second: float = PIXELS_PER_SECOND


@dataclass(frozen=True)
class Label:
    text: str
    x: float
    y: float
    size: int = INFO_LABEL_SIZE
    color: str = TEXT_COLOR


@dataclass(frozen=True)
class Rectangle:
    x: float
    y: float
    width: float
    height: float
    color: str = AXIS_COLOR


@dataclass(frozen=True)
class Polyline:
    color: str
    points: List[Tuple[float, float]]


@dataclass
class DrawList:
    polylines: List[Polyline] = field(default_factory=list)
    labels: List[Label] = field(default_factory=list)
    rectangles: List[Rectangle] = field(default_factory=list)


class Series:
    """Time-ordered (SeriesPoint, ScreenVertex) pairs."""

    def __init__(self, color: str, pairs: Optional[List[Tuple[SeriesPoint, ScreenVertex]]] = None):
        self.color = color
        self._pairs = list(pairs) if pairs else []

    def append(self, point: SeriesPoint, vertex: ScreenVertex) -> None:
        if self._pairs and point.time <= self._pairs[-1][0].time:
            raise ValueError(f"Series time must increase: {point.time=} after {self._pairs[-1][0].time}")
        self._pairs.append((point, vertex))

    @property
    def points(self) -> List[SeriesPoint]:
        return [point for point, _ in self._pairs]

    @property
    def vertices(self) -> List[ScreenVertex]:
        return [vertex for _, vertex in self._pairs]

    def pairs(self) -> List[Tuple[SeriesPoint, ScreenVertex]]:
        return list(self._pairs)

    def last_vertex(self) -> Optional[ScreenVertex]:
        return self._pairs[-1][1] if self._pairs else None

    def __len__(self) -> int:
        return len(self._pairs)


def project_x(time: float, axis: AxisState) -> float:
    """Unclamped, unpadded X of a logical time."""
    return (time - axis.origin_time) * axis.pixels_per_second


def project_point(point: SeriesPoint, axis: AxisState, color: str) -> ScreenVertex:
    """
    Map a logical point to padded canvas coordinates.

    X is clamped to [0, plot_width]; Y is inverted with zero at the bottom of the plot.
    """
    x = min(max(project_x(point.time, axis), 0.0), axis.plot_width)
    y = axis.plot_height - (point.value * axis.plot_height / axis.rate_ceiling)
    return ScreenVertex(x=x + axis.padding[0], y=y + axis.padding[1], color=color)


def relayout_series(series: Series, axis: AxisState) -> Series:
    return Series(
        series.color,
        [(point, project_point(point, axis, series.color)) for point in series.points]
    )


def drop_oldest(series: Series) -> Series:
    return Series(series.color, series.pairs()[1:])


class ChartModel:
    """
    Dual-series bandwidth chart fed one Sample per frame.

    The Y axis scales to the highest rate seen so far and never shrinks. When a
    new point would land past the right edge, the oldest point of each series is
    dropped and the origin moves to the next oldest one.
    Only the render loop thread touches this object.
    """

    def __init__(
            self,
            sample_queue: SampleQueue,
            width: float,
            height: float,
            url: str = "",
            padding: Tuple[float, float] = PADDING,
            initial_rate_ceiling: float = DEFAULT_RATE_CEILING,
            pixels_per_second: float = PIXELS_PER_SECOND
        ) -> None:

        if initial_rate_ceiling <= 0:
            raise ValueError(f"Rate ceiling must be positive, got {initial_rate_ceiling=}")

        self.sample_queue = sample_queue
        self.width = width
        self.height = height
        self.url = url
        self.axis = AxisState(
            plot_width=width - (padding[0] * 2 + RIGHT_MARGIN),
            plot_height=height - padding[1] * 2,
            padding=padding,
            rate_ceiling=initial_rate_ceiling,
            pixels_per_second=pixels_per_second
        )
        if self.axis.plot_width <= 0 or self.axis.plot_height <= 0:
            raise ValueError(f"Window {width}x{height} is too small for the plot area.")

        self.average = Series(AVERAGE_COLOR)
        self.current = Series(CURRENT_COLOR)
        self.last_sample = None
        self.transfer_state: Optional[TransferState] = None

        self.average_label: Optional[Label] = None
        self.current_label: Optional[Label] = None
        self.time_label = Label("", self.axis.plot_width - padding[0] - 50, height - padding[1])
        self.size_label = Label("", width / 2 - 100, 0)
        self.ceiling_label = Label(self._rate_text(self.axis.rate_ceiling), 10, padding[1] - 30)

    @staticmethod
    def _rate_text(rate_kbs: float) -> str:
        return f"{rate_kbs:.0f} KB/s"

    def _relayout(self) -> None:
        self.average = relayout_series(self.average, self.axis)
        self.current = relayout_series(self.current, self.axis)

    def update(self) -> bool:
        """
        Consume at most one Sample and advance the chart.

        - Raises the rate ceiling and re-projects both series when the sample exceeds it
        - Scrolls by dropping the oldest point when the sample falls past the plot's right edge
        - Appends the new points and refreshes the labels

        Returns:
            bool: False when the queue was empty and nothing changed.
        """

        sample = self.sample_queue.pop()
        if sample is None:
            return False

        if sample.instant_rate_kbs >= self.axis.rate_ceiling or sample.window_rate_kbs >= self.axis.rate_ceiling:
            self.axis.rate_ceiling = max(sample.instant_rate_kbs, sample.window_rate_kbs)
            logging.debug(f"Rate ceiling raised to {self.axis.rate_ceiling:.2f} KB/s")
            self._relayout()

        if project_x(sample.time, self.axis) > self.axis.plot_width:
            self.average = drop_oldest(self.average)
            self.current = drop_oldest(self.current)
            if len(self.average) > 0:
                self.axis.origin_time = self.average.points[0].time
            else:
                self.axis.origin_time = sample.time
            logging.debug(f"Scrolled chart, origin_time={self.axis.origin_time:.2f}")
            self._relayout()

        average_point = SeriesPoint(sample.time, sample.instant_rate_kbs)
        current_point = SeriesPoint(sample.time, sample.window_rate_kbs)
        average_vertex = project_point(average_point, self.axis, self.average.color)
        current_vertex = project_point(current_point, self.axis, self.current.color)
        self.average.append(average_point, average_vertex)
        self.current.append(current_point, current_vertex)

        self.last_sample = sample
        self._refresh_labels(sample, average_vertex, current_vertex)
        return True

    def _refresh_labels(self, sample, average_vertex: ScreenVertex, current_vertex: ScreenVertex) -> None:
        self.average_label = Label(
            self._rate_text(sample.instant_rate_kbs),
            average_vertex.x + 15,
            average_vertex.y - 15,
            size=RATE_LABEL_SIZE,
            color=AVERAGE_COLOR
        )
        self.current_label = Label(
            self._rate_text(sample.window_rate_kbs),
            current_vertex.x + 15,
            current_vertex.y - 15,
            size=RATE_LABEL_SIZE,
            color=CURRENT_COLOR
        )
        self.time_label = Label(f"Time : {sample.time:.2f} seconds", self.time_label.x, self.time_label.y)
        self.size_label = Label(f"Size downloaded : {sample.cumulative_kb / ONE_KIBIBYTE:.0f} MB", self.size_label.x, self.size_label.y)
        self.ceiling_label = Label(self._rate_text(self.axis.rate_ceiling), self.ceiling_label.x, self.ceiling_label.y)

    def set_transfer_state(self, state: TransferState) -> None:
        self.transfer_state = state

    def draw_list(self) -> DrawList:
        padding_x, padding_y = self.axis.padding
        draw_list = DrawList()

        draw_list.rectangles.append(Rectangle(padding_x, self.height - padding_y, self.axis.plot_width, 1))
        draw_list.rectangles.append(Rectangle(padding_x, padding_y, 1, self.axis.plot_height))

        for series in (self.average, self.current):
            draw_list.polylines.append(Polyline(series.color, [(v.x, v.y) for v in series.vertices]))

        # Legend
        draw_list.polylines.append(Polyline(AVERAGE_COLOR, [(10, self.height - 15), (40, self.height - 15)]))
        draw_list.polylines.append(Polyline(CURRENT_COLOR, [(10, self.height - 35), (40, self.height - 35)]))
        draw_list.labels.append(Label("Average speed", 50, self.height - 30))
        draw_list.labels.append(Label("Current speed", 50, self.height - 50))

        for label in (self.average_label, self.current_label):
            if label is not None:
                draw_list.labels.append(label)

        draw_list.labels.extend([self.time_label, self.size_label, self.ceiling_label])
        if self.url:
            draw_list.labels.append(Label(self.url, self.width - 300, 0))

        if self.transfer_state == TransferState.COMPLETED:
            draw_list.labels.append(Label("Transfer complete", padding_x + 10, padding_y))
        elif self.transfer_state == TransferState.ERROR:
            draw_list.labels.append(Label("Transfer failed", padding_x + 10, padding_y))

        return draw_list


__all__ = ["ChartModel", "AxisState", "Series", "SeriesPoint", "ScreenVertex", "DrawList", "Label", "Polyline", "Rectangle", "project_point", "relayout_series"]

from typing import List, Optional, Sequence

import tkinter as tk
from tkinter import font as tkfont

import logging

from .chart import DrawList
from .constants import BACKGROUND_COLOR, FONT_CANDIDATES, WINDOW_WIDTH_RATIO, WINDOW_HEIGHT_RATIO
from .core import InputEvent
from .exceptions import FontNotFoundError, WindowInitializationError


def find_font_family(available: Sequence[str], candidates: Sequence[str] = FONT_CANDIDATES) -> str:
    """
    Return the first candidate installed on this system (case-insensitive).

    Raises:
        FontNotFoundError: If none of the candidates is available.
    """

    installed = {family.lower(): family for family in available}
    for candidate in candidates:
        if candidate.lower() in installed:
            return installed[candidate.lower()]
    raise FontNotFoundError(tuple(candidates))


class BandwidthPlotterGUI:
    """
    Tk window with a single canvas, redrawn from a DrawList every frame.

    Window close and Escape are collected as InputEvents and handed out by
    `poll_events`, which also processes all pending Tk events.
    """

    def __init__(self, title: str = "Bandwidth Plotter", font_candidates: Sequence[str] = FONT_CANDIDATES):
        try:
            self.root = tk.Tk()
        except tk.TclError as err:
            raise WindowInitializationError(f"Cannot create rendering window: {err}") from err

        try:
            self.font_family = find_font_family(tkfont.families(self.root), font_candidates)
        except FontNotFoundError:
            self.root.destroy()
            raise
        logging.debug(f"Using font {self.font_family}")

        self.width = int(self.root.winfo_screenwidth() * WINDOW_WIDTH_RATIO)
        self.height = int(self.root.winfo_screenheight() * WINDOW_HEIGHT_RATIO)

        self.root.title(title)
        self.root.geometry(f"{self.width}x{self.height}")
        self.root.resizable(False, False)
        self.canvas = tk.Canvas(
            self.root,
            width=self.width,
            height=self.height,
            bg=BACKGROUND_COLOR,
            highlightthickness=0
        )
        self.canvas.pack(fill="both", expand=True)

        self._events: List[InputEvent] = []
        self._closed = False
        self.root.protocol("WM_DELETE_WINDOW", lambda: self._events.append(InputEvent.CLOSE))
        self.root.bind("<Escape>", lambda _event: self._events.append(InputEvent.QUIT_KEY))

    def poll_events(self) -> List[InputEvent]:
        if self._closed:
            return [InputEvent.CLOSE]
        try:
            self.root.update()
        except tk.TclError:
            # Window destroyed behind our back
            self._closed = True
            return [InputEvent.CLOSE]
        events, self._events = self._events, []
        return events

    def draw(self, draw_list: DrawList) -> None:
        self.canvas.delete("all")

        for rectangle in draw_list.rectangles:
            self.canvas.create_rectangle(
                rectangle.x,
                rectangle.y,
                rectangle.x + rectangle.width,
                rectangle.y + rectangle.height,
                fill=rectangle.color,
                outline=""
            )

        for polyline in draw_list.polylines:
            if len(polyline.points) < 2:
                continue
            flat = [coordinate for point in polyline.points for coordinate in point]
            self.canvas.create_line(*flat, fill=polyline.color)

        for label in draw_list.labels:
            self.canvas.create_text(
                label.x,
                label.y,
                text=label.text,
                fill=label.color,
                anchor="nw",
                font=(self.font_family, -label.size)
            )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.root.destroy()


def create_gui(font_family: Optional[str] = None) -> BandwidthPlotterGUI:
    candidates = (font_family,) + FONT_CANDIDATES if font_family else FONT_CANDIDATES
    return BandwidthPlotterGUI(font_candidates=candidates)


__all__ = ["BandwidthPlotterGUI", "create_gui", "find_font_family"]

"""
Data panel: the samples on top of the network output, edited with the mouse.
"""
import logging
from enum import IntEnum

import numpy as np
from matplotlib.backend_bases import MouseButton
from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.colors import LinearSegmentedColormap
from matplotlib.figure import Figure
from PyQt6.QtCore import QTimer

from nnplayground.config import (
    DATA_RANGE, DELETE_RADIUS, OUTPUT_GRID_RESOLUTION, PAINT_INTERVAL_MS,
    POSITIVE, NEGATIVE, POSITIVE_COLOR, NEGATIVE_COLOR, NEUTRAL_COLOR
)

logger = logging.getLogger(__name__)

# Orange (negative) to blue (positive), shared with the topology panel
OUTPUT_CMAP = LinearSegmentedColormap.from_list("output_cmap", [NEGATIVE_COLOR, NEUTRAL_COLOR, POSITIVE_COLOR])


class DataTool(IntEnum):
    POSITIVE = 0
    NEGATIVE = 1
    DELETE = 2


TOOL_LABELS = {
    DataTool.POSITIVE: 'Add positive',
    DataTool.NEGATIVE: 'Add negative',
    DataTool.DELETE: 'Delete',
}


def input_grid(resolution):
    """Grid points covering the input range, shape (resolution**2, 2), row major in y"""
    axis = np.linspace(DATA_RANGE[0], DATA_RANGE[1], resolution)
    xx, yy = np.meshgrid(axis, axis)
    return np.c_[xx.ravel(), yy.ravel()]


class DataPanel(FigureCanvas):
    def __init__(self, app, parent=None, width=5, height=5, dpi=100):
        self.fig = Figure(figsize=(width, height), dpi=dpi, facecolor='#f0f0f0')
        self.axes = self.fig.add_subplot(111)
        super().__init__(self.fig)
        self.setParent(parent)

        self.app = app
        self.tool = DataTool.POSITIVE
        self.test_mode = False
        self.grid_points = input_grid(OUTPUT_GRID_RESOLUTION)

        # Mouse state while painting
        self.drawing = False
        self.current_button = None
        self.current_mouse_pos = None

        # Keep adding points while the button is held down
        self.paint_timer = QTimer()
        self.paint_timer.timeout.connect(self.paint_timer_tick)

        self.fig.canvas.mpl_connect('button_press_event', self.on_press)
        self.fig.canvas.mpl_connect('motion_notify_event', self.on_motion)
        self.fig.canvas.mpl_connect('button_release_event', self.on_release)

    def set_tool(self, tool):
        self.tool = DataTool(tool)
        self.update_title()
        self.draw_idle()

    def set_test_mode(self, enabled):
        self.test_mode = bool(enabled)
        self.update_title()
        self.draw_idle()

    def on_press(self, event):
        if event.inaxes != self.axes or event.xdata is None:
            return
        self.drawing = True
        self.current_button = event.button
        self.current_mouse_pos = (event.xdata, event.ydata)
        self.apply_tool(event.xdata, event.ydata)
        self.paint_timer.start(PAINT_INTERVAL_MS)

    def on_motion(self, event):
        if not self.drawing or event.inaxes != self.axes or event.xdata is None:
            return
        self.current_mouse_pos = (event.xdata, event.ydata)

    def on_release(self, event):
        self.drawing = False
        self.current_button = None
        self.current_mouse_pos = None
        self.paint_timer.stop()

    def paint_timer_tick(self):
        if self.drawing and self.current_mouse_pos:
            self.apply_tool(*self.current_mouse_pos)

    def apply_tool(self, x, y):
        # The right button always deletes
        tool = DataTool.DELETE if self.current_button == MouseButton.RIGHT else self.tool
        data = self.app.get_data()
        with self.app.get_network_lock():
            if tool == DataTool.DELETE:
                removed = data.remove_samples(x, y, DELETE_RADIUS)
                if not removed:
                    return
            else:
                value = POSITIVE if tool == DataTool.POSITIVE else NEGATIVE
                data.add_sample(x, y, value, test=self.test_mode)
        self.update_output()

    def update_title(self):
        data = self.app.get_data()
        target = 'test' if self.test_mode else 'training'
        self.axes.set_title(f'{data.get_num_of_samples(True)} training / {data.get_num_of_samples(False)} test samples\n'
                            f'Tool: {TOOL_LABELS[self.tool]} ({target})', fontsize=10)

    def update_output(self):
        """Repaint the network output and all samples"""
        net = self.app.get_view_network()
        lo, hi = DATA_RANGE
        out = net.propagate_many(self.grid_points)[:, 0].reshape(OUTPUT_GRID_RESOLUTION, OUTPUT_GRID_RESOLUTION)

        self.axes.clear()
        self.axes.imshow(out, extent=(lo, hi, lo, hi), origin='lower', cmap=OUTPUT_CMAP,
                         vmin=NEGATIVE, vmax=POSITIVE, alpha=0.8, interpolation='bilinear')

        data = self.app.get_data()
        for lesson, marker in ((data.get_training_lesson(), 'o'), (data.get_test_lesson(), 'x')):
            X, Y = lesson.as_arrays()
            if len(X) == 0:
                continue
            positive = Y[:, 0] > 0
            for mask, color in ((positive, POSITIVE_COLOR), (~positive, NEGATIVE_COLOR)):
                if not np.any(mask):
                    continue
                if marker == 'o':
                    self.axes.scatter(X[mask, 0], X[mask, 1], c=color, s=30, marker=marker,
                                      edgecolors='black', linewidth=0.5)
                else:
                    self.axes.scatter(X[mask, 0], X[mask, 1], c=color, s=40, marker=marker, linewidth=1.5)

        self.axes.set_xlim(lo, hi)
        self.axes.set_ylim(lo, hi)
        self.axes.set_aspect('equal')
        self.axes.set_xticks([])
        self.axes.set_yticks([])
        self.update_title()
        self.fig.tight_layout()
        self.draw_idle()

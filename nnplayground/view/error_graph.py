from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure

from nnplayground.config import POSITIVE_COLOR, NEGATIVE_COLOR


class ErrorGraph(FigureCanvas):
    """Training and test error per iteration"""

    def __init__(self, parent=None, width=6, height=2, dpi=100):
        self.fig = Figure(figsize=(width, height), dpi=dpi, facecolor='#f0f0f0')
        self.axes = self.fig.add_subplot(111)
        super().__init__(self.fig)
        self.setParent(parent)
        self.plot_errors([], [], [])

    def plot_errors(self, iterations, training_errors, test_errors):
        self.axes.clear()
        self.axes.plot(iterations, training_errors, label='Training error', color=POSITIVE_COLOR)
        if any(e > 0 for e in test_errors):
            self.axes.plot(iterations, test_errors, label='Test error', color=NEGATIVE_COLOR)
        # Log scale needs positive values
        if any(e > 0 for e in training_errors):
            self.axes.set_yscale('log')
        self.axes.set_xlabel('Iteration')
        self.axes.set_ylabel('Error')
        if iterations:
            self.axes.legend(loc='upper right')
        self.axes.grid(True, linestyle='--', alpha=0.6)
        self.fig.tight_layout()
        self.draw_idle()

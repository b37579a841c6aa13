"""
Topology panel: every neuron as a small map of its activation over the input
plane, every synapse coloured by the sign and sized by the size of its weight.
"""
import networkx as nx
import numpy as np
from matplotlib.backends.backend_qtagg import FigureCanvasQTAgg as FigureCanvas
from matplotlib.figure import Figure
from matplotlib.patches import Rectangle

from nnplayground.config import NEURON_GRID_RESOLUTION, POSITIVE_COLOR, NEGATIVE_COLOR
from nnplayground.view.data_panel import OUTPUT_CMAP, input_grid

LAYER_SPACING = 2.0
THUMBNAIL_SIZE = 0.8


class TopologyPanel(FigureCanvas):
    def __init__(self, app, parent=None, width=6, height=5, dpi=100):
        self.fig = Figure(figsize=(width, height), dpi=dpi, facecolor='#f0f0f0')
        self.axes = self.fig.add_subplot(111)
        super().__init__(self.fig)
        self.setParent(parent)

        self.app = app
        self.grid_resolution = NEURON_GRID_RESOLUTION
        self.grid_points = input_grid(self.grid_resolution)

    def reset_grid_size(self):
        """Scale the thumbnail resolution down for big networks, so repaint cost stays bounded"""
        neurons = self.app.get_network().count_neurons()
        self.grid_resolution = int(np.clip(NEURON_GRID_RESOLUTION * 16 // max(neurons, 1), 8, NEURON_GRID_RESOLUTION))
        self.grid_points = input_grid(self.grid_resolution)

    @staticmethod
    def neuron_positions(topology):
        pos = {}
        for layer, size in enumerate(topology):
            for index in range(size):
                pos[f"L{layer}_N{index}"] = (layer * LAYER_SPACING, (size - 1) / 2.0 - index)
        return pos

    def update_topology(self):
        net = self.app.get_view_network()
        topology = net.get_topology()
        weights = net.get_layer_weights()
        activations = net.get_activations(self.grid_points)
        res = self.grid_resolution

        self.axes.clear()
        G = nx.DiGraph()
        pos = self.neuron_positions(topology)
        G.add_nodes_from(pos)

        edge_colors = []
        edge_widths = []
        max_weight = max((np.abs(W).max() for W, _ in weights), default=1.0) or 1.0
        for layer, (W, _) in enumerate(weights):
            for i in range(W.shape[0]):
                for j in range(W.shape[1]):
                    w = W[i, j]
                    G.add_edge(f"L{layer}_N{i}", f"L{layer + 1}_N{j}", weight=w)
                    edge_colors.append(POSITIVE_COLOR if w > 0 else NEGATIVE_COLOR)
                    edge_widths.append(0.3 + 3.5 * abs(w) / max_weight)

        nx.draw_networkx_edges(G, pos, ax=self.axes, edge_color=edge_colors, width=edge_widths,
                               alpha=0.7, arrows=False)  # type: ignore

        # Activation thumbnails, bias shown as the frame colour
        half = THUMBNAIL_SIZE / 2.0
        for layer, size in enumerate(topology):
            maps = activations[layer].reshape(res, res, size)
            bias = weights[layer - 1][1] if layer > 0 else None
            for index in range(size):
                x, y = pos[f"L{layer}_N{index}"]
                self.axes.imshow(maps[:, :, index], extent=(x - half, x + half, y - half, y + half),
                                 origin='lower', cmap=OUTPUT_CMAP, vmin=-1.0, vmax=1.0, zorder=2)
                frame_color = 'black'
                if bias is not None:
                    frame_color = POSITIVE_COLOR if bias[index] > 0 else NEGATIVE_COLOR
                self.axes.add_patch(self._frame(x, y, half, frame_color))

        max_nodes = max(topology)
        self.axes.set_xlim(-1, (len(topology) - 1) * LAYER_SPACING + 1)
        self.axes.set_ylim(-max_nodes / 2.0 - 0.5, max_nodes / 2.0 + 0.5)
        self.axes.set_aspect('equal')
        self.axes.set_title(f"{net.get_engine_name()}: {' - '.join(str(n) for n in topology)}", fontsize=10)
        self.axes.axis('off')
        self.draw_idle()

    @staticmethod
    def _frame(x, y, half, color):
        return Rectangle((x - half, y - half), 2 * half, 2 * half, fill=False,
                         edgecolor=color, linewidth=1.5, zorder=3)

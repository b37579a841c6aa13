"""Interactive playground for small feed-forward neural networks."""

__version__ = "0.3.0"

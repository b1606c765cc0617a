"""bloat-graph: estimate and visualize how much each crate adds to a binary."""

__version__ = "0.3.0"

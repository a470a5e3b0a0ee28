from __future__ import annotations


class GridBoundsError(IndexError):
    """Raised when a drawing primitive addresses a cell outside the grid."""

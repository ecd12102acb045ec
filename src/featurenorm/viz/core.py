"""
Figure wrapper used by the quality visualizations.

Keeps a matplotlib figure together with a title, a description and
creation metadata, and gives it one ``save`` entry point.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal, Optional
from datetime import datetime

import matplotlib
import matplotlib.figure
import matplotlib.pyplot as plt

OutputFormat = Literal["png", "pdf", "svg"]


@dataclass
class Figure:
    """
    A matplotlib figure with descriptive metadata.

    Attributes
    ----------
    fig : matplotlib.figure.Figure
        The underlying figure object
    title : str
        Human-readable title for the figure
    description : str
        Longer description explaining what the figure shows
    metadata : dict
        Additional metadata (creation time, parameters used, etc.)
    """
    fig: matplotlib.figure.Figure
    title: str
    description: str
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        if "created_at" not in self.metadata:
            self.metadata["created_at"] = datetime.now().isoformat()

    def save(
        self,
        path: Path | str,
        format: Optional[OutputFormat] = None,
        dpi: int = 300,
        **kwargs
    ) -> Path:
        """
        Save figure to file.

        Parameters
        ----------
        path : Path or str
            Output file path. Format inferred from extension if not specified.
        format : str, optional
            Output format. If None, inferred from path extension (png fallback).
        dpi : int, default 300
            DPI for raster formats. Ignored for vector formats.

        Returns
        -------
        Path
            The path where the figure was saved.
        """
        path = Path(path)

        if format is None:
            format = path.suffix.lstrip(".").lower()
            if format not in ("png", "pdf", "svg"):
                format = "png"

        path.parent.mkdir(parents=True, exist_ok=True)
        self.fig.savefig(
            path,
            format=format,
            dpi=dpi,
            bbox_inches="tight",
            facecolor="white",
            **kwargs
        )
        return path

    def close(self):
        """Close the figure to free memory."""
        plt.close(self.fig)

"""
Quality inspection plots for raw feature matrices.

Before choosing filter thresholds an analyst wants to see how invalid
values are spread: are a few observations mostly broken, or are a few
features failing everywhere? These plots show the distribution of
good-value percentages per axis and where the quality codes sit.
"""

from __future__ import annotations

from typing import Literal, Optional
import numpy as np
import matplotlib.pyplot as plt
from matplotlib.colors import ListedColormap
import seaborn as sns

from featurenorm.core.featurematrix import FeatureMatrix
from featurenorm.core.quality import QualityCode
from featurenorm.quality.masking import QualityMasker, summarize_good_values
from featurenorm.viz.core import Figure


class QualityVisualizer:
    """
    Aggregate visualizations of missing and flagged values.

    Examples
    --------
    >>> viz = QualityVisualizer()
    >>> fig = viz.plot_good_value_distribution(matrix, thresholds=(0.7, 1.0))
    >>> fig.save("figures/quality.pdf")
    """

    def __init__(self, style: Literal["paper", "notebook", "talk"] = "paper"):
        self.style = style
        sns.set_theme(context=style, style="whitegrid")

    def plot_good_value_distribution(
        self,
        matrix: FeatureMatrix,
        thresholds: Optional[tuple[float, float]] = None,
    ) -> Figure:
        """
        Histogram of good-value percentages per observation and per feature.

        Parameters
        ----------
        matrix : FeatureMatrix
            Matrix to inspect; invalid entries are masked first.
        thresholds : (float, float), optional
            Observation/feature thresholds to mark with vertical lines.
        """
        masked = QualityMasker().apply(matrix)
        summary = summarize_good_values(masked)

        fig, axes = plt.subplots(1, 2, figsize=(10, 4))
        panels = [
            (axes[0], summary.observation_percent, "Observations"),
            (axes[1], summary.feature_percent, "Features"),
        ]
        for i, (ax, percent, label) in enumerate(panels):
            sns.histplot(percent.to_numpy(), bins=20, binrange=(0, 100), ax=ax, color="#2563eb")
            ax.set_xlabel("Good values (%)")
            ax.set_ylabel(f"{label} (count)")
            lo, hi = (percent.min(), percent.max()) if not percent.empty else (np.nan, np.nan)
            ax.set_title(f"{label}: {lo:.1f}--{hi:.1f}% good")
            if thresholds is not None:
                ax.axvline(thresholds[i] * 100, color="#ef4444", linestyle="--", label="threshold")
                ax.legend(loc="upper left")
        fig.tight_layout()

        return Figure(
            fig=fig,
            title="Good-value distribution",
            description="Percentage of good (non-missing) values per observation and per feature",
            metadata={"thresholds": thresholds, "shape": list(matrix.shape)},
        )

    def plot_quality_codes(self, matrix: FeatureMatrix) -> Figure:
        """Heatmap of quality codes, observations as rows and features as columns."""
        n_codes = len(QualityCode)
        codes = np.clip(matrix.quality_codes, 0, n_codes - 1)
        cmap = ListedColormap(["#f5f5f5"] + sns.color_palette("tab10", n_codes - 1).as_hex())

        fig, ax = plt.subplots(figsize=(10, 6))
        image = ax.imshow(codes, aspect="auto", interpolation="nearest", cmap=cmap,
                          vmin=-0.5, vmax=n_codes - 0.5)
        colorbar = fig.colorbar(image, ax=ax, ticks=range(n_codes))
        colorbar.ax.set_yticklabels([code.name for code in QualityCode])
        ax.set_xlabel("Features")
        ax.set_ylabel("Observations")
        ax.set_title("Quality codes")
        ax.grid(False)
        fig.tight_layout()

        return Figure(
            fig=fig,
            title="Quality codes",
            description="Quality code of every entry of the feature matrix",
            metadata={"shape": list(matrix.shape)},
        )

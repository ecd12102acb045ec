"""
Visualization of matrix quality before trimming.

Examples
--------
>>> from featurenorm.viz import QualityVisualizer
>>>
>>> fig = QualityVisualizer().plot_good_value_distribution(matrix, thresholds=(0.7, 1.0))
>>> fig.save("figures/good_values.png")
"""

from featurenorm.viz.core import Figure
from featurenorm.viz.qc import QualityVisualizer

__all__ = [
    "Figure",
    "QualityVisualizer",
]

"""
Quality codes attached to individual feature values.

The feature-extraction stage records, next to every computed value, an
integer describing how the computation went. Zero means the value is
good; any strictly positive code marks the entry as invalid regardless of
the number stored in the data matrix (a failed computation may still have
left a finite placeholder behind).

Examples:
    >>> import numpy as np
    >>> from featurenorm.core.quality import QualityCode, bad_quality_mask
    >>>
    >>> codes = np.array([[0, 2], [3, 0]])
    >>> bad_quality_mask(codes)
    array([[False,  True],
           [ True, False]])
    >>> QualityCode(3).name
    'POSITIVE_INF'
"""

from __future__ import annotations

from enum import IntEnum

import numpy as np

__all__ = ['QualityCode', 'bad_quality_mask']


class QualityCode(IntEnum):
    """
    Codes written by the feature-extraction stage for each entry.

    Attributes:
        GOOD: Value computed successfully (0)
        FATAL_ERROR: The operation raised an error (1)
        NAN: The operation returned NaN (2)
        POSITIVE_INF: The operation returned +Inf (3)
        NEGATIVE_INF: The operation returned -Inf (4)
        COMPLEX: The operation returned a complex number (5)
        EMPTY: The operation returned an empty result (6)
        LINK_ERROR: The output could not be linked to its master operation (7)
    """

    GOOD = 0
    FATAL_ERROR = 1
    NAN = 2
    POSITIVE_INF = 3
    NEGATIVE_INF = 4
    COMPLEX = 5
    EMPTY = 6
    LINK_ERROR = 7


def bad_quality_mask(quality_codes: np.ndarray) -> np.ndarray:
    """Boolean mask of entries whose quality code marks them invalid (code > 0)."""
    return np.asarray(quality_codes) > QualityCode.GOOD

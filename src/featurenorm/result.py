"""
Result bundle handed to persistence after a successful run.

The bundle holds the final matrix (values, quality codes, observation and
feature tables, optional timings), the pass-through provenance fields and
master operation table, a record of how the normalization was produced,
and one "not yet clustered" descriptor per axis so that clustering code
downstream always finds the same shape to fill in.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple
import numpy as np
import pandas as pd

from featurenorm.config import NormalizeConfig
from featurenorm.core.featurematrix import FeatureMatrix

__all__ = [
    'NormalizationInfo',
    'ClusteringInfo',
    'Provenance',
    'NormalizedDataset',
    'ResultAssembler',
]


@dataclass(frozen=True)
class NormalizationInfo:
    """
    How the normalized matrix was produced.

    Attributes:
        norm_function: Name of the transform applied
        filter_options: (observation threshold, feature threshold) used
        code_to_run: Call that reproduces the run
    """
    norm_function: str
    filter_options: Tuple[float, float]
    code_to_run: str

    @classmethod
    def from_config(cls, config: NormalizeConfig) -> NormalizationInfo:
        row, col = config.observation_threshold, config.feature_threshold
        code_to_run = (
            f"trim_and_normalize('{config.norm_function}', filter_options=[{row:f}, {col:f}])"
        )
        return cls(
            norm_function=config.norm_function,
            filter_options=(row, col),
            code_to_run=code_to_run,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'norm_function': self.norm_function,
            'filter_options': list(self.filter_options),
            'code_to_run': self.code_to_run,
        }


@dataclass(frozen=True)
class ClusteringInfo:
    """
    Clustering state of one axis; the defaults mean "not clustered yet".

    Attributes:
        distance_metric: Distance used, "none" until clustered
        distances: Distance structure, None (empty) until clustered
        order: Display ordering of the items, identity until clustered
        linkage_method: Linkage used, "none" until clustered
    """
    distance_metric: str
    distances: Optional[np.ndarray]
    order: np.ndarray
    linkage_method: str

    @classmethod
    def unclustered(cls, n_items: int) -> ClusteringInfo:
        return cls(
            distance_metric='none',
            distances=None,
            order=np.arange(n_items),
            linkage_method='none',
        )

    @property
    def is_clustered(self) -> bool:
        return self.distance_metric != 'none'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'distance_metric': self.distance_metric,
            'distances': None if self.distances is None else np.asarray(self.distances).tolist(),
            'order': [int(i) for i in self.order],
            'linkage_method': self.linkage_method,
        }


@dataclass(frozen=True)
class Provenance:
    """
    Provenance fields recorded upstream and passed through unchanged.

    Attributes:
        from_database: Whether the data came from an external database
            (datasets that predate this field are treated as True)
        git_info: Optional version-control descriptor of the extraction code
    """
    from_database: bool = True
    git_info: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, values: Optional[Dict[str, Any]]) -> Provenance:
        values = values or {}
        from_database = values.get('from_database')
        return cls(
            from_database=True if from_database is None else bool(from_database),
            git_info=values.get('git_info'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {'from_database': self.from_database, 'git_info': self.git_info}


@dataclass(frozen=True)
class NormalizedDataset:
    """Final output of a trim-and-normalize run."""
    matrix: FeatureMatrix
    normalization_info: NormalizationInfo
    observation_clustering: ClusteringInfo
    feature_clustering: ClusteringInfo
    provenance: Provenance = field(default_factory=Provenance)
    master_operations: Optional[pd.DataFrame] = None

    @property
    def data(self) -> np.ndarray:
        return self.matrix.data

    @property
    def quality_codes(self) -> np.ndarray:
        return self.matrix.quality_codes

    @property
    def observation_metadata(self) -> pd.DataFrame:
        return self.matrix.observation_metadata

    @property
    def feature_metadata(self) -> pd.DataFrame:
        return self.matrix.feature_metadata

    @property
    def calc_times(self) -> Optional[np.ndarray]:
        return self.matrix.calc_times

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready description of everything except the matrices themselves."""
        n_obs, n_feat = self.matrix.shape
        return {
            'shape': [n_obs, n_feat],
            'n_missing': int(self.matrix.missing_mask.sum()),
            'normalization_info': self.normalization_info.to_dict(),
            'observation_clustering': self.observation_clustering.to_dict(),
            'feature_clustering': self.feature_clustering.to_dict(),
            'provenance': self.provenance.to_dict(),
            'has_calc_times': self.matrix.calc_times is not None,
        }


class ResultAssembler:
    """
    Package the final matrix into a NormalizedDataset.

    Calculation times are dropped unless the config asks to keep them.
    """

    def __init__(self, config: NormalizeConfig):
        self.config = config

    def assemble(
        self,
        matrix: FeatureMatrix,
        provenance: Optional[Provenance] = None,
        master_operations: Optional[pd.DataFrame] = None,
    ) -> NormalizedDataset:
        if not self.config.keep_calc_time and matrix.calc_times is not None:
            matrix = matrix.without_calc_times()

        return NormalizedDataset(
            matrix=matrix,
            normalization_info=NormalizationInfo.from_config(self.config),
            observation_clustering=ClusteringInfo.unclustered(matrix.n_observations),
            feature_clustering=ClusteringInfo.unclustered(matrix.n_features),
            provenance=provenance if provenance is not None else Provenance(),
            master_operations=master_operations,
        )

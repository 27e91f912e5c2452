"""Sequence models consuming per-token feature lists.

The tagger only needs two operations from a model: train on a batch of
(feature lists, outcomes) instances, and classify one sequence of
feature lists. :class:`CRFSequenceModel` provides them with a linear-chain
CRF from ``sklearn-crfsuite``.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sklearn_crfsuite import CRF

from .config import CRF_PARAMS
from .document import Feature


logger = logging.getLogger(__name__)

FeatureLists = Sequence[Sequence[Feature]]
Instance = Tuple[List[List[Feature]], List[str]]


class SequenceModel(ABC):
    """Abstract sequence labeller."""

    @abstractmethod
    def train(self, instances: Sequence[Instance]) -> None:
        """Fit the model on (per-token features, per-token outcomes) pairs."""
        pass

    @abstractmethod
    def classify(self, feature_lists: FeatureLists) -> List[str]:
        """Predict one outcome per token."""
        pass


def to_crfsuite(features: Sequence[Feature]) -> Dict[str, float]:
    """Convert a token's feature list into a crfsuite attribute dict.

    String features become indicator attributes ``name=value``; numeric
    features keep their name and weight (repeated names add up).
    """
    attributes: Dict[str, float] = {}
    for f in features:
        if isinstance(f.value, (int, float)) and not isinstance(f.value, bool):
            attributes[f.name] = attributes.get(f.name, 0.0) + float(f.value)
        else:
            attributes[f"{f.name}={f.value}"] = 1.0
    return attributes


class CRFSequenceModel(SequenceModel):
    """Linear-chain CRF over symbolic token features.

    Parameters
    ----------
    crf_params : Optional[Dict[str, Any]]
        Keyword arguments for ``sklearn_crfsuite.CRF``; defaults to
        :data:`biotagger.config.CRF_PARAMS`
    """

    def __init__(self, crf_params: Optional[Dict[str, Any]] = None):
        self.crf_params = dict(CRF_PARAMS if crf_params is None else crf_params)
        self.crf: Optional[CRF] = None

    def train(self, instances: Sequence[Instance]) -> None:
        if not instances:
            raise ValueError("No training instances")

        X = [[to_crfsuite(fs) for fs in feature_lists] for feature_lists, _ in instances]
        y = [list(outcomes) for _, outcomes in instances]

        logger.info(
            "Training CRF on %d sequences (%d tokens)",
            len(X), sum(len(seq) for seq in X),
        )
        crf = CRF(**self.crf_params)
        crf.fit(X, y)
        self.crf = crf

    def classify(self, feature_lists: FeatureLists) -> List[str]:
        if self.crf is None:
            raise RuntimeError("Must call train() before classify()")
        if not feature_lists:
            return []

        X = [to_crfsuite(fs) for fs in feature_lists]
        return list(self.crf.predict_single(X))

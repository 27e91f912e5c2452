"""Specialization of token features by the question's answer type.

Every feature is crossed with every allowed LAT of the question, so each
feature gets a specific weight for a given class of questions. The base
features are still kept and used by the caller; they give a reasonable
baseline for questions whose LATs were unseen during training.
"""

from typing import AbstractSet, Iterable, List, Sequence, Tuple

from .config import ALLOWED_LATS
from .document import Feature, Question


LAT_SEPARATOR = "|"


def specializing_lats(
    question: Question,
    allow_list: AbstractSet[str] = ALLOWED_LATS,
) -> Tuple[str, ...]:
    """Decide on the LATs used to specialize features for this question.

    Only LATs on the allow-list are kept, regardless of the LAT source;
    duplicates collapse. The result is sorted so that feature order does
    not depend on set iteration order.
    """
    return tuple(sorted({lat for lat in question.lats if lat in allow_list}))


def expand_features_by_lats(
    features: Sequence[Feature],
    lats: Iterable[str],
) -> List[Feature]:
    """Return the ``<lat>|<name>`` cross features only.

    Parameters
    ----------
    features : Sequence[Feature]
        Features of one token
    lats : Iterable[str]
        Specializing LATs, usually from :func:`specializing_lats`

    Returns
    -------
    List[Feature]
        New features, values unchanged; empty when there are no LATs
    """
    lats = list(lats)
    return [
        Feature(lat + LAT_SEPARATOR + f.name, f.value)
        for f in features
        for lat in lats
    ]

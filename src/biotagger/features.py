"""Token-level feature extraction for answer tagging.

All extractors share one capability: produce the features of the token at
``index`` within a bounded token sequence (a passage). They are composed
by :class:`FeaturePipeline`, which runs them in order and unions their
output.

Feature families produced here:
- Token attributes: ``pos``, ``ne_type``, ``dep`` of the focus token
- Context n-grams: eleven windows per attribute, named ``<attr>@<shape>``
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple

from .document import Feature, FeatureValue, Token


# Separator between token values inside an n-gram feature value
NGRAM_JOINER = "_"

# Stand-in for an in-passage token that lacks the attribute
MISSING_VALUE = "-"


class FeatureExtractor(ABC):
    """Produce features for one token in its passage context."""

    @abstractmethod
    def extract(self, tokens: Sequence[Token], index: int) -> List[Feature]:
        """Return the features of ``tokens[index]``.

        Args:
            tokens: All tokens of the passage; windows never leave it
            index: Position of the focus token
        """
        pass


class TokenAttributeExtractor(FeatureExtractor):
    """Expose a single token attribute as a feature.

    Parameters
    ----------
    name : str
        Feature name
    getter : Callable[[Token], Optional[FeatureValue]]
        Reads the attribute; None means the token has no such attribute
    """

    def __init__(self, name: str, getter: Callable[[Token], Optional[FeatureValue]]):
        self.name = name
        self.getter = getter

    def value(self, token: Token) -> Optional[FeatureValue]:
        return self.getter(token)

    def extract(self, tokens: Sequence[Token], index: int) -> List[Feature]:
        value = self.value(tokens[index])
        if value is None:
            return []
        return [Feature(self.name, value)]

    def __repr__(self) -> str:
        return f"TokenAttributeExtractor({self.name!r})"


def pos_extractor() -> TokenAttributeExtractor:
    return TokenAttributeExtractor("pos", lambda t: t.pos)


def ne_type_extractor() -> TokenAttributeExtractor:
    """Type of the named entity covering the token, if any."""
    return TokenAttributeExtractor("ne_type", lambda t: t.ne_type)


def dependency_extractor() -> TokenAttributeExtractor:
    """Relation label of the token to its governor."""
    return TokenAttributeExtractor("dep", lambda t: t.dep)


class CombinedExtractor(FeatureExtractor):
    """Union of several extractors, in the order given."""

    def __init__(self, extractors: Sequence[FeatureExtractor]):
        self.extractors = list(extractors)

    def extract(self, tokens: Sequence[Token], index: int) -> List[Feature]:
        features: List[Feature] = []
        for extractor in self.extractors:
            features.extend(extractor.extract(tokens, index))
        return features


@dataclass(frozen=True)
class NgramWindow:
    """A context window given as offsets relative to the focus token.

    Attributes
    ----------
    shape : str
        Name of the window, used in the feature name
    offsets : Tuple[int, ...]
        Relative positions in sequence order; 0 is the focus token
    """

    shape: str
    offsets: Tuple[int, ...]

    @property
    def has_focus(self) -> bool:
        return 0 in self.offsets


# Context width: up to two tokens on each side of the focus
NGRAM_WINDOWS: Tuple[NgramWindow, ...] = (
    NgramWindow("focus", (0,)),
    # Unigrams (shifted)
    NgramWindow("following_0_1", (1,)),
    NgramWindow("following_1_2", (2,)),
    NgramWindow("preceding_0_1", (-1,)),
    NgramWindow("preceding_1_2", (-2,)),
    # Bigrams
    NgramWindow("focus_following_1", (0, 1)),
    NgramWindow("following_2", (1, 2)),
    NgramWindow("preceding_1_focus", (-1, 0)),
    NgramWindow("preceding_2", (-2, -1)),
    # Trigrams
    NgramWindow("focus_following_2", (0, 1, 2)),
    NgramWindow("preceding_2_focus", (-2, -1, 0)),
)


class NgramExtractor(FeatureExtractor):
    """Combine one attribute over a context window into a single feature.

    Window positions outside the passage are dropped, giving a shorter
    n-gram. A window left without any context position (only the focus,
    or nothing at all) produces no feature, except the plain ``focus``
    window itself.

    Parameters
    ----------
    base : TokenAttributeExtractor
        Attribute combined over the window
    window : NgramWindow
        Window shape
    """

    def __init__(self, base: TokenAttributeExtractor, window: NgramWindow):
        self.base = base
        self.window = window
        self.name = f"{base.name}@{window.shape}"

    def extract(self, tokens: Sequence[Token], index: int) -> List[Feature]:
        positions = [
            index + offset
            for offset in self.window.offsets
            if 0 <= index + offset < len(tokens)
        ]
        if not positions:
            return []
        if positions == [index] and self.window.offsets != (0,):
            return []

        values = []
        for pos in positions:
            value = self.base.value(tokens[pos])
            values.append(MISSING_VALUE if value is None else str(value))

        return [Feature(self.name, NGRAM_JOINER.join(values))]

    def __repr__(self) -> str:
        return f"NgramExtractor({self.name!r})"


def build_ngram_extractors(
    base: TokenAttributeExtractor,
    windows: Sequence[NgramWindow] = NGRAM_WINDOWS,
) -> List[NgramExtractor]:
    """Create one n-gram extractor per window shape for ``base``."""
    return [NgramExtractor(base, window) for window in windows]


class FeaturePipeline:
    """Run a list of extractors over every token of a passage.

    Parameters
    ----------
    extractors : Sequence[FeatureExtractor]
        Extractors applied in order; their features are concatenated
    """

    def __init__(self, extractors: Sequence[FeatureExtractor]):
        self.extractors = list(extractors)

    @classmethod
    def default(cls) -> "FeaturePipeline":
        """Token attributes followed by their n-gram windows."""
        attributes = [pos_extractor(), ne_type_extractor(), dependency_extractor()]
        extractors: List[FeatureExtractor] = [CombinedExtractor(attributes)]
        for attribute in attributes:
            extractors.extend(build_ngram_extractors(attribute))
        return cls(extractors)

    def extract(self, tokens: Sequence[Token], index: int) -> List[Feature]:
        features: List[Feature] = []
        for extractor in self.extractors:
            features.extend(extractor.extract(tokens, index))
        return features

    def extract_all(self, tokens: Sequence[Token]) -> List[List[Feature]]:
        """Return one feature list per token, in token order."""
        return [self.extract(tokens, i) for i in range(len(tokens))]

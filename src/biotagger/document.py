"""Annotated question and passage records.

Tokens, passages and questions are produced upstream (see
:mod:`biotagger.annotation`) and only read here; the one exception is
``Passage.mentions``, where the tagger writes the answer mentions it
predicts.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from .config import ANSWER_LABEL


FeatureValue = Union[str, int, float]


@dataclass(frozen=True)
class Token:
    """A single annotated token.

    Attributes
    ----------
    text : str
        Surface form
    pos : str
        Part-of-speech tag
    lemma : Optional[str]
        Lemma, if the annotator produced one
    ne_type : Optional[str]
        Type of the covering named entity (e.g. "GPE"), None outside entities
    dep : Optional[str]
        Dependency relation to the governing token
    head : Optional[int]
        Index of the governing token within the same passage/question, the
        token's own index for a root, None when no parse is available
    """

    text: str
    pos: str
    lemma: Optional[str] = None
    ne_type: Optional[str] = None
    dep: Optional[str] = None
    head: Optional[int] = None


@dataclass(frozen=True)
class Feature:
    """A named symbolic feature; names may repeat within one list."""

    name: str
    value: FeatureValue

    def __str__(self) -> str:
        return f"{self.name}={self.value}"


@dataclass(frozen=True)
class Mention:
    """A contiguous token span ``[begin, end)`` labelled as an answer.

    Raises
    ------
    ValueError
        If the span is empty or starts before the first token
    """

    begin: int
    end: int
    label: str = ANSWER_LABEL

    def __post_init__(self):
        if self.begin < 0 or self.end <= self.begin:
            raise ValueError(
                f"Mention must cover at least one token, got [{self.begin}, {self.end})"
            )

    def __len__(self) -> int:
        return self.end - self.begin

    def covered_text(self, tokens) -> str:
        """Return the mention text, tokens joined by single spaces."""
        return " ".join(t.text for t in tokens[self.begin:self.end])


@dataclass
class Passage:
    """A candidate passage retrieved for a question.

    Attributes
    ----------
    tokens : Tuple[Token, ...]
        Tokens in reading order
    start : int
        Start offset of the passage in its source document
    end : Optional[int]
        End offset in the source document
    mentions : List[Mention]
        Gold answer mentions (training) or predicted ones (tagging)
    passage_id : Optional[str]
        Identifier used in corpus files and logs
    """

    tokens: Tuple[Token, ...]
    start: int = 0
    end: Optional[int] = None
    mentions: List[Mention] = field(default_factory=list)
    passage_id: Optional[str] = None

    def __post_init__(self):
        self.tokens = tuple(self.tokens)
        for mention in self.mentions:
            self._check_mention(mention)

    def __len__(self) -> int:
        return len(self.tokens)

    @property
    def text(self) -> str:
        return " ".join(t.text for t in self.tokens)

    def add_mention(self, mention: Mention) -> None:
        """Attach a mention lying within this passage."""
        self._check_mention(mention)
        self.mentions.append(mention)

    def _check_mention(self, mention: Mention) -> None:
        if mention.end > len(self.tokens):
            raise ValueError(
                f"Mention [{mention.begin}, {mention.end}) exceeds passage "
                f"of {len(self.tokens)} tokens"
            )


@dataclass
class Question:
    """A question with its lexical answer types (LATs)."""

    tokens: Tuple[Token, ...]
    lats: Tuple[str, ...] = ()
    text: str = ""
    question_id: Optional[str] = None

    def __post_init__(self):
        self.tokens = tuple(self.tokens)
        self.lats = tuple(self.lats)
        if not self.text:
            self.text = " ".join(t.text for t in self.tokens)


@dataclass
class QAItem:
    """A question together with the candidate passages retrieved for it."""

    question: Question
    passages: List[Passage] = field(default_factory=list)

"""Adapters from upstream linguistic annotation to tagger tokens.

Tokenization, tagging, named entity recognition and parsing happen
upstream, either in a spaCy pipeline or in tools producing CoNLL-U. This
module only reads their output into immutable :class:`Token` records.
"""

import logging
import warnings
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

import spacy
from conllu import TokenList
from spacy.tokens import Doc, Span

from .config import SPACY_MODEL
from .document import Mention, Passage, Question, Token


logger = logging.getLogger(__name__)

# MISC key carrying the named entity type in CoNLL-U input
NE_MISC_KEY = "NE"


class AnnotationError(RuntimeError):
    """Upstream annotation could not provide the requested view."""


def tokens_from_doc(doc: Union[Doc, Span]) -> Tuple[Token, ...]:
    """Convert a spaCy Doc or Span into tokens.

    Heads are made relative to the span; a token governed from outside
    the span becomes a root. Without a dependency parse on the document
    heads and relations are left as None.
    """
    parsed = (doc.doc if isinstance(doc, Span) else doc).has_annotation("DEP")
    start = doc.start if isinstance(doc, Span) else 0
    end = start + len(doc)

    tokens = []
    for t in doc:
        head = dep = None
        if parsed:
            dep = t.dep_ or None
            if t.head.i == t.i or not start <= t.head.i < end:
                head = t.i - start
            else:
                head = t.head.i - start
        tokens.append(Token(
            text=t.text,
            pos=t.pos_,
            lemma=t.lemma_ or None,
            ne_type=t.ent_type_ or None,
            dep=dep,
            head=head,
        ))
    return tuple(tokens)


def tokens_from_conllu(sentence: TokenList) -> Tuple[Token, ...]:
    """Convert a parsed CoNLL-U sentence into tokens.

    Multi-word token ranges and empty nodes are skipped. Head 0 marks a
    root; a missing HEAD column leaves the token unparsed.

    Raises
    ------
    AnnotationError
        If a head refers to a word that is not in the sentence
    """
    words = [t for t in sentence if isinstance(t["id"], int)]
    position = {t["id"]: i for i, t in enumerate(words)}

    tokens = []
    for i, t in enumerate(words):
        raw_head = t.get("head")
        if raw_head is None:
            head = None
        elif raw_head == 0:
            head = i
        elif raw_head in position:
            head = position[raw_head]
        else:
            raise AnnotationError(
                f"Word {t['id']} ({t['form']!r}) has head {raw_head} outside the sentence"
            )

        misc = t.get("misc") or {}
        tokens.append(Token(
            text=t["form"],
            pos=t.get("upos") or t.get("xpos") or "",
            lemma=t.get("lemma") if t.get("lemma") not in (None, "_") else None,
            ne_type=misc.get(NE_MISC_KEY),
            dep=t.get("deprel"),
            head=head,
        ))
    return tuple(tokens)


class TextProcessor:
    """Annotate raw questions and passages with a spaCy pipeline.

    Parameters
    ----------
    model_name : str
        Name of the spaCy pipeline to load
    nlp : Optional[spacy.language.Language]
        Already loaded pipeline; takes precedence over ``model_name``
    """

    def __init__(self, model_name: str = SPACY_MODEL, nlp=None):
        if nlp is None:
            try:
                nlp = spacy.load(model_name)
            except OSError as e:
                warnings.warn(f"Model {model_name} not found. Run: python -m spacy download {model_name}")
                raise AnnotationError(f"Cannot load spaCy model {model_name}") from e
        self.nlp = nlp

    def question(
        self,
        text: str,
        lats: Sequence[str] = (),
        question_id: Optional[str] = None,
    ) -> Question:
        doc = self.nlp(text)
        return Question(
            tokens=tokens_from_doc(doc),
            lats=tuple(lats),
            text=text,
            question_id=question_id,
        )

    def passage(
        self,
        text: str,
        answers: Iterable[Tuple[int, int]] = (),
        passage_id: Optional[str] = None,
    ) -> Passage:
        """Annotate a passage and align answer character spans to tokens."""
        return self._passage_from_doc(self.nlp(text), answers, passage_id)

    def passages(
        self,
        records: Sequence[Dict],
        batch_size: int = 32,
    ) -> List[Passage]:
        """Annotate many ``{"text", "answers", "id"}`` records with ``nlp.pipe``."""
        texts = [r["text"] for r in records]
        return [
            self._passage_from_doc(doc, r.get("answers", ()), r.get("id"))
            for doc, r in zip(self.nlp.pipe(texts, batch_size=batch_size), records)
        ]

    def _passage_from_doc(
        self,
        doc: Doc,
        answers: Iterable[Tuple[int, int]],
        passage_id: Optional[str],
    ) -> Passage:
        mentions = []
        for start_char, end_char in answers:
            span = doc.char_span(start_char, end_char, alignment_mode="expand")
            if span is None or len(span) == 0:
                logger.warning(
                    "Answer [%d, %d) does not align with tokens of passage %s",
                    start_char, end_char, passage_id,
                )
                continue
            mentions.append(Mention(span.start, span.end))

        return Passage(
            tokens=tokens_from_doc(doc),
            start=0,
            end=len(doc.text),
            mentions=_drop_overlaps(mentions),
            passage_id=passage_id,
        )


def _drop_overlaps(mentions: List[Mention]) -> List[Mention]:
    """Keep the first of overlapping gold mentions, in reading order."""
    kept: List[Mention] = []
    for mention in sorted(set(mentions), key=lambda m: (m.begin, -m.end)):
        if kept and mention.begin < kept[-1].end:
            logger.debug("Dropping overlapping answer %s", mention)
            continue
        kept.append(mention)
    return kept

"""Reading and writing question/passage corpora.

Two formats are supported:

JSONL, one question per line, annotated with spaCy on load::

    {"id": "q1",
     "question": {"text": "What is the capital of France?", "lats": ["city"]},
     "passages": [{"id": "p1", "text": "The capital of France is Paris.",
                   "answers": [[25, 30]]}]}

CoNLL-U, one block per question or passage, already annotated::

    # item_id = q1
    # role = question
    # lats = city
    1	What	what	PRON	_	_	2	nsubj	_	_
    ...

    # item_id = q1
    # role = passage
    # passage_id = p1
    6	Paris	Paris	PROPN	_	_	5	attr	_	NE=GPE|Answer=B

Passage answers are stored in the MISC column as ``Answer=B|I``.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

import conllu
from conllu import TokenList
from tqdm import tqdm

from .annotation import NE_MISC_KEY, AnnotationError, TextProcessor, tokens_from_conllu
from .chunking import BioChunking
from .config import OUTSIDE_TAG
from .document import Passage, QAItem, Question, Token


logger = logging.getLogger(__name__)

ANSWER_MISC_KEY = "Answer"


def load_jsonl(filepath: str, processor: TextProcessor) -> List[QAItem]:
    """Load a JSONL corpus and annotate it with spaCy.

    Parameters
    ----------
    filepath : str
        Path to the JSONL file
    processor : TextProcessor
        spaCy-based annotator

    Returns
    -------
    List[QAItem]
        Questions with their annotated passages
    """
    items = []
    with open(filepath, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(tqdm(f, desc=f"Loading {filepath}"), 1):
            if not line.strip():
                continue
            record = json.loads(line)
            item_id = str(record.get("id", line_no))

            q = record["question"]
            question = processor.question(q["text"], q.get("lats", ()), question_id=item_id)

            passage_records = [
                {
                    "text": p["text"],
                    "answers": [tuple(a) for a in p.get("answers", [])],
                    "id": str(p.get("id", f"{item_id}-{i}")),
                }
                for i, p in enumerate(record.get("passages", []))
            ]
            items.append(QAItem(question, processor.passages(passage_records)))

    logger.info("Loaded %d questions from %s", len(items), filepath)
    return items


def load_conllu(filepath: str) -> List[QAItem]:
    """Load a pre-annotated CoNLL-U corpus.

    Raises
    ------
    AnnotationError
        If a passage block appears before its question block, or a block
        has no ``role`` metadata
    """
    with open(filepath, "r", encoding="utf-8") as f:
        sentences = conllu.parse(f.read())

    chunking = BioChunking()
    items: List[QAItem] = []
    by_id: Dict[str, QAItem] = {}

    for sent in sentences:
        metadata = sent.metadata
        item_id = metadata.get("item_id")
        role = metadata.get("role")
        tokens = tokens_from_conllu(sent)

        if role == "question":
            lats = tuple(l.strip() for l in metadata.get("lats", "").split(",") if l.strip())
            item = QAItem(Question(tokens, lats, metadata.get("text") or "", item_id))
            by_id[item_id] = item
            items.append(item)
        elif role == "passage":
            if item_id not in by_id:
                raise AnnotationError(f"Passage of unknown question {item_id!r} in {filepath}")
            words = [t for t in sent if isinstance(t["id"], int)]
            outcomes = [_answer_tag(t.get("misc"), chunking) for t in words]
            by_id[item_id].passages.append(Passage(
                tokens=tokens,
                mentions=chunking.decode(outcomes),
                passage_id=metadata.get("passage_id"),
            ))
        else:
            raise AnnotationError(f"Block without question/passage role in {filepath}: {metadata}")

    logger.info("Loaded %d questions from %s", len(items), filepath)
    return items


def _answer_tag(misc: Optional[Dict[str, str]], chunking: BioChunking) -> str:
    tag = (misc or {}).get(ANSWER_MISC_KEY)
    if tag == "B":
        return chunking.begin_tag
    if tag == "I":
        return chunking.inside_tag
    return chunking.outside_tag


def _to_tokenlist(tokens: List[Token], metadata: Dict[str, str], outcomes: Optional[List[str]] = None) -> TokenList:
    """Build a CoNLL-U TokenList; heads become 1-based, roots 0."""
    rows = []
    for i, token in enumerate(tokens):
        misc = []
        if token.ne_type:
            misc.append(f"{NE_MISC_KEY}={token.ne_type}")
        if outcomes and outcomes[i] != OUTSIDE_TAG:
            misc.append(f"{ANSWER_MISC_KEY}={outcomes[i][0]}")

        if token.head is None:
            head = None
        else:
            head = 0 if token.head == i else token.head + 1

        rows.append({
            "id": i + 1,
            "form": token.text,
            "lemma": token.lemma,
            "upos": token.pos or None,
            "xpos": None,
            "feats": None,
            "head": head,
            "deprel": token.dep,
            "deps": None,
            "misc": "|".join(misc) or None,
        })
    return TokenList(rows, metadata)


def write_conllu(items: List[QAItem], output_path: str) -> None:
    """Write questions and passages, with their current mentions, as CoNLL-U."""
    chunking = BioChunking()
    Path(output_path).parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        for item in items:
            q = item.question
            metadata = {"item_id": q.question_id or "", "role": "question", "text": q.text}
            if q.lats:
                metadata["lats"] = ",".join(q.lats)
            f.write(_to_tokenlist(list(q.tokens), metadata).serialize())

            for passage in item.passages:
                metadata = {"item_id": q.question_id or "", "role": "passage"}
                if passage.passage_id is not None:
                    metadata["passage_id"] = passage.passage_id
                outcomes = chunking.encode(len(passage), passage.mentions)
                f.write(_to_tokenlist(list(passage.tokens), metadata, outcomes).serialize())

    logger.info("Wrote %d questions to %s", len(items), output_path)

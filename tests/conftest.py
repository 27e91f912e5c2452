import sys
from pathlib import Path

import pytest

# Add src to sys.path so we can import biotagger
SRC_PATH = Path(__file__).resolve().parent.parent / "src"
if SRC_PATH.as_posix() not in sys.path:
    sys.path.insert(0, SRC_PATH.as_posix())

from biotagger.document import Mention, Passage, Question, Token  # noqa: E402


def make_tokens(rows):
    """Build tokens from (text, pos, ne_type, dep, head) rows."""
    return tuple(
        Token(text=text, pos=pos, ne_type=ne, dep=dep, head=head)
        for text, pos, ne, dep, head in rows
    )


PARIS_ROWS = [
    ("The", "DET", None, "det", 1),
    ("capital", "NOUN", None, "nsubj", 4),
    ("of", "ADP", None, "prep", 1),
    ("France", "PROPN", "GPE", "pobj", 2),
    ("is", "AUX", None, "ROOT", 4),
    ("Paris", "PROPN", "GPE", "attr", 4),
]

QUESTION_ROWS = [
    ("What", "PRON", None, "attr", 1),
    ("is", "AUX", None, "ROOT", 1),
    ("the", "DET", None, "det", 3),
    ("capital", "NOUN", None, "nsubj", 1),
    ("of", "ADP", None, "prep", 3),
    ("France", "PROPN", "GPE", "pobj", 4),
]


@pytest.fixture
def paris_tokens():
    return make_tokens(PARIS_ROWS)


@pytest.fixture
def paris_passage(paris_tokens):
    """'The capital of France is Paris' with the gold answer 'Paris'."""
    return Passage(paris_tokens, mentions=[Mention(5, 6)], passage_id="p1")


@pytest.fixture
def capital_question():
    return Question(make_tokens(QUESTION_ROWS), lats=("city", "capital"), question_id="q1")

"""Scoring predicted answer mentions against gold ones."""

from dataclasses import dataclass
from typing import Dict, List, Sequence

from sklearn_crfsuite.metrics import flat_classification_report

from .chunking import BioChunking
from .document import Mention, Passage


@dataclass
class MentionScores:
    """Exact-match mention scores.

    Attributes
    ----------
    true_positives : int
        Predicted mentions matching a gold mention exactly
    n_gold : int
        Number of gold mentions
    n_predicted : int
        Number of predicted mentions
    """

    true_positives: int = 0
    n_gold: int = 0
    n_predicted: int = 0

    @property
    def precision(self) -> float:
        return self.true_positives / self.n_predicted if self.n_predicted else 0.0

    @property
    def recall(self) -> float:
        return self.true_positives / self.n_gold if self.n_gold else 0.0

    @property
    def f1(self) -> float:
        p, r = self.precision, self.recall
        return 2 * p * r / (p + r) if p + r else 0.0

    def to_dict(self) -> Dict[str, float]:
        return {
            "precision": self.precision,
            "recall": self.recall,
            "f1": self.f1,
            "true_positives": self.true_positives,
            "n_gold": self.n_gold,
            "n_predicted": self.n_predicted,
        }


def evaluate_mentions(
    gold: Sequence[Sequence[Mention]],
    predicted: Sequence[Sequence[Mention]],
) -> MentionScores:
    """Compare gold and predicted mentions passage by passage."""
    if len(gold) != len(predicted):
        raise ValueError(f"Got {len(gold)} gold and {len(predicted)} predicted passages")

    scores = MentionScores()
    for gold_mentions, pred_mentions in zip(gold, predicted):
        gold_spans = {(m.begin, m.end) for m in gold_mentions}
        pred_spans = {(m.begin, m.end) for m in pred_mentions}
        scores.true_positives += len(gold_spans & pred_spans)
        scores.n_gold += len(gold_spans)
        scores.n_predicted += len(pred_spans)
    return scores


def token_report(
    passages: Sequence[Passage],
    gold: Sequence[Sequence[Mention]],
    predicted: Sequence[Sequence[Mention]],
) -> str:
    """Token-level BIO classification report."""
    chunking = BioChunking()
    y_true: List[List[str]] = []
    y_pred: List[List[str]] = []
    for passage, gold_mentions, pred_mentions in zip(passages, gold, predicted):
        y_true.append(chunking.encode(len(passage), gold_mentions))
        y_pred.append(chunking.encode(len(passage), pred_mentions))

    return flat_classification_report(
        y_true, y_pred, labels=[chunking.begin_tag, chunking.inside_tag], digits=4, zero_division=0
    )

"""
Unit Tests for the BIO tagger pipeline driver.
"""

from dataclasses import replace

import pytest

from biotagger.config import TaggerConfig
from biotagger.document import Mention, Passage, QAItem
from biotagger.model import SequenceModel
from biotagger.tagger import BIOTagger, Mode

B, I, O = "B-answer", "I-answer", "O"


class FakeModel(SequenceModel):
    """Records what the tagger hands over; tags the last token as answer."""

    def __init__(self):
        self.trained = []
        self.calls = []

    def train(self, instances):
        self.trained.append(list(instances))

    def classify(self, feature_lists):
        self.calls.append(feature_lists)
        return [O] * (len(feature_lists) - 1) + [B]


@pytest.fixture
def model():
    return FakeModel()


def _names(feature_lists):
    return {f.name for features in feature_lists for f in features}


class TestFit:
    """Tests for training mode."""

    def test_fit_when_passage_without_answer_then_skipped(self, model, capital_question, paris_passage):
        empty = Passage(paris_passage.tokens, passage_id="p2")
        tagger = BIOTagger(model)

        n = tagger.fit([QAItem(capital_question, [paris_passage, empty])])

        assert n == 1
        assert tagger.mode is Mode.TRAIN
        assert len(model.trained) == 1
        feature_lists, outcomes = model.trained[0][0]
        assert outcomes == [O, O, O, O, O, B]
        assert len(feature_lists) == len(paris_passage)
        assert model.calls == []

    def test_fit_when_called_twice_then_instances_reset(self, model, capital_question, paris_passage):
        tagger = BIOTagger(model)
        tagger.fit([QAItem(capital_question, [paris_passage])])
        assert tagger.fit([QAItem(capital_question, [paris_passage])]) == 1


class TestTag:
    """Tests for classification mode."""

    def test_tag_when_model_predicts_then_mentions_added(self, model, capital_question, paris_tokens):
        passage = Passage(paris_tokens, passage_id="p1")
        BIOTagger(model).tag([QAItem(capital_question, [passage])])

        assert passage.mentions == [Mention(5, 6)]
        assert len(model.calls) == 1

    def test_tag_when_passage_has_no_tokens_then_no_model_call(self, model, capital_question):
        passage = Passage((), passage_id="empty")
        BIOTagger(model).tag([QAItem(capital_question, [passage])])

        assert passage.mentions == []
        assert model.calls == []

    def test_tag_when_parallel_then_same_as_sequential(self, capital_question, paris_tokens):
        results = []
        for n_jobs in (1, 2):
            model = FakeModel()
            passages = [Passage(paris_tokens, passage_id=f"p{i}") for i in range(3)]
            BIOTagger(model, n_jobs=n_jobs).tag([QAItem(capital_question, passages)])
            results.append(model.calls)
            assert all(p.mentions == [Mention(5, 6)] for p in passages)

        assert results[0] == results[1]


class TestPassageFeatures:
    """Tests for the per-token feature lists."""

    def test_features_when_repeated_then_identical(self, model, capital_question, paris_passage):
        tagger = BIOTagger(model)
        lats = ("city",)
        q_tree = tagger.question_tree(capital_question)
        first = tagger.passage_features(paris_passage, lats, q_tree)
        second = tagger.passage_features(paris_passage, lats, q_tree)
        assert first == second

    def test_features_when_trees_align_then_edit_features(self, model, capital_question, paris_passage):
        tagger = BIOTagger(model)
        features = tagger.passage_features(paris_passage, (), tagger.question_tree(capital_question))

        assert all(any(f.name == "edit_op" for f in token) for token in features)
        assert any(name.startswith("edit_keep|") for name in _names(features))

    def test_features_when_passage_tree_fails_then_same_as_no_alignment(
        self, model, capital_question, paris_tokens
    ):
        tokens = list(paris_tokens)
        tokens[2] = replace(tokens[2], head=None)
        passage = Passage(tokens)

        aligned = BIOTagger(model)
        degraded = aligned.passage_features(passage, ("city",), aligned.question_tree(capital_question))

        plain = BIOTagger(model, use_alignment=False)
        baseline = plain.passage_features(passage, ("city",), plain.question_tree(capital_question))

        assert degraded == baseline
        assert not any(name.startswith("edit_") for name in _names(degraded))

    def test_question_tree_when_alignment_disabled_then_none(self, model, capital_question):
        assert BIOTagger(model, use_alignment=False).question_tree(capital_question) is None

    def test_features_when_question_has_lats_then_only_allowed_crossed(
        self, model, capital_question, paris_tokens
    ):
        passage = Passage(paris_tokens)
        BIOTagger(model, use_alignment=False).tag([QAItem(capital_question, [passage])])

        names = _names(model.calls[0])
        assert "city|pos" in names
        assert "city|pos@focus" in names
        assert not any(name.startswith("capital|") for name in names)

    def test_features_when_crossed_then_originals_kept(self, model, paris_passage):
        tagger = BIOTagger(model, use_alignment=False)
        plain = tagger.passage_features(paris_passage)
        crossed = tagger.passage_features(paris_passage, ("city",))

        for base, token in zip(plain, crossed):
            assert token[:len(base)] == base
            assert len(token) == 2 * len(base)


class TestFromConfig:
    """Tests for building a tagger from configuration."""

    def test_from_config_when_custom_then_settings_applied(self, model):
        config = TaggerConfig(allowed_lats=frozenset({"rock"}), use_alignment=False, n_jobs=3)
        tagger = BIOTagger.from_config(config, model, mode=Mode.TRAIN)

        assert tagger.allowed_lats == frozenset({"rock"})
        assert tagger.use_alignment is False
        assert tagger.n_jobs == 3
        assert tagger.mode is Mode.TRAIN

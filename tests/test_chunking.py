"""
Unit Tests for BIO encoding and decoding of answer mentions.
"""

import pytest

from biotagger.chunking import BioChunking
from biotagger.document import Mention

B, I, O = "B-answer", "I-answer", "O"


@pytest.fixture
def chunking():
    return BioChunking()


class TestEncode:
    """Tests for mentions -> outcomes."""

    def test_encode_when_single_token_answer_then_begin_only(self, chunking, paris_passage):
        outcomes = chunking.encode(len(paris_passage), paris_passage.mentions)
        assert outcomes == [O, O, O, O, O, B]

    def test_encode_when_multi_token_mentions_then_begin_inside(self, chunking):
        outcomes = chunking.encode(7, [Mention(4, 7), Mention(0, 2)])
        assert outcomes == [B, I, O, O, B, I, I]

    def test_encode_when_adjacent_mentions_then_two_begins(self, chunking):
        assert chunking.encode(3, [Mention(0, 1), Mention(1, 3)]) == [B, B, I]

    def test_encode_when_mention_exceeds_sequence_then_raises(self, chunking):
        with pytest.raises(ValueError, match="exceeds"):
            chunking.encode(2, [Mention(1, 3)])

    def test_encode_when_mentions_overlap_then_raises(self, chunking):
        with pytest.raises(ValueError, match="Overlapping"):
            chunking.encode(5, [Mention(0, 3), Mention(2, 4)])


class TestDecode:
    """Tests for outcomes -> mentions."""

    def test_decode_when_single_begin_then_one_mention(self, chunking, paris_passage):
        mentions = chunking.decode([O, O, O, O, O, B])
        assert mentions == [Mention(5, 6)]
        assert mentions[0].covered_text(paris_passage.tokens) == "Paris"

    def test_decode_when_inside_without_begin_then_recovered(self, chunking):
        assert chunking.decode([O, I, I, O]) == [Mention(1, 3)]

    def test_decode_when_begin_follows_inside_then_new_mention(self, chunking):
        assert chunking.decode([B, I, B, O, B]) == [Mention(0, 2), Mention(2, 3), Mention(4, 5)]

    def test_decode_when_all_outside_then_empty(self, chunking):
        assert chunking.decode([O, O]) == []
        assert chunking.decode([]) == []

    def test_decode_when_unknown_tag_then_raises(self, chunking):
        with pytest.raises(ValueError, match="Unknown BIO outcome"):
            chunking.decode([O, "B-person"])

    def test_decode_when_encoded_then_round_trip(self, chunking):
        mentions = [Mention(0, 1), Mention(1, 3), Mention(5, 8)]
        outcomes = chunking.encode(9, mentions)
        assert chunking.decode(outcomes) == mentions
        assert chunking.encode(9, chunking.decode(outcomes)) == outcomes


class TestMention:
    """Tests for mention validation."""

    def test_init_when_empty_span_then_raises(self):
        with pytest.raises(ValueError, match="at least one token"):
            Mention(3, 3)

    def test_passage_add_mention_when_outside_then_raises(self, paris_passage):
        with pytest.raises(ValueError, match="exceeds passage"):
            paris_passage.add_mention(Mention(5, 7))

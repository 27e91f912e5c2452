"""Conversion between answer mentions and token-level BIO outcomes.

Tokens are combined into mentions labelled "answer"; the outcome tags are
therefore ``B-answer``, ``I-answer`` and ``O`` ("Begin", "Inside",
"Outside"; nothing biological about it).
"""

from typing import List, Optional, Sequence

from .config import ANSWER_LABEL, OUTSIDE_TAG
from .document import Mention


class BioChunking:
    """Encode mentions as BIO outcomes and decode outcomes back into mentions.

    Parameters
    ----------
    label : str
        Mention type; all mentions of this system share one type
    """

    def __init__(self, label: str = ANSWER_LABEL):
        self.label = label
        self.begin_tag = "B-" + label
        self.inside_tag = "I-" + label
        self.outside_tag = OUTSIDE_TAG

    @property
    def tags(self) -> List[str]:
        return [self.begin_tag, self.inside_tag, self.outside_tag]

    def encode(self, n_tokens: int, mentions: Sequence[Mention]) -> List[str]:
        """Convert gold mentions into one outcome per token.

        Parameters
        ----------
        n_tokens : int
            Length of the token sequence
        mentions : Sequence[Mention]
            Non-overlapping mentions within the sequence

        Returns
        -------
        List[str]
            BIO tags aligned with the tokens

        Raises
        ------
        ValueError
            If a mention leaves the sequence or overlaps another one
        """
        outcomes = [self.outside_tag] * n_tokens
        for mention in sorted(mentions, key=lambda m: m.begin):
            if mention.end > n_tokens:
                raise ValueError(
                    f"Mention [{mention.begin}, {mention.end}) exceeds {n_tokens} tokens"
                )
            if any(tag != self.outside_tag for tag in outcomes[mention.begin:mention.end]):
                raise ValueError(f"Overlapping mention [{mention.begin}, {mention.end})")

            outcomes[mention.begin] = self.begin_tag
            for i in range(mention.begin + 1, mention.end):
                outcomes[i] = self.inside_tag
        return outcomes

    def decode(self, outcomes: Sequence[str]) -> List[Mention]:
        """Convert predicted outcomes into mentions.

        An Inside tag with no open mention starts a new one, as if it
        were a Begin tag.

        Raises
        ------
        ValueError
            On a tag that is not one of :attr:`tags`
        """
        mentions: List[Mention] = []
        begin: Optional[int] = None

        for i, tag in enumerate(outcomes):
            if tag == self.outside_tag:
                if begin is not None:
                    mentions.append(Mention(begin, i, self.label))
                begin = None
            elif tag == self.begin_tag:
                if begin is not None:
                    mentions.append(Mention(begin, i, self.label))
                begin = i
            elif tag == self.inside_tag:
                if begin is None:
                    begin = i
            else:
                raise ValueError(f"Unknown BIO outcome {tag!r} at position {i}")

        if begin is not None:
            mentions.append(Mention(begin, len(outcomes), self.label))
        return mentions

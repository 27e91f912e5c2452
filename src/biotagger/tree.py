"""Labelled ordered trees built from dependency parses.

A tree is an arena: node ``i`` has a label, a parent index and an ordered
list of child indices. Nodes map to tokens one to one, except for a
synthetic root added when a passage holds several sentences (several
dependency roots).
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from .document import Token


logger = logging.getLogger(__name__)

ROOT_LABEL = "<root>"


@dataclass(frozen=True)
class LabeledTree:
    """Read-only ordered tree over the tokens of a question or passage.

    Attributes
    ----------
    labels : Tuple[str, ...]
        Node labels
    parents : Tuple[int, ...]
        Parent node index per node, -1 for the root
    children : Tuple[Tuple[int, ...], ...]
        Child node indices per node, in token order
    token_indices : Tuple[Optional[int], ...]
        Token index per node, None for the synthetic root
    root : int
        Index of the root node
    """

    labels: Tuple[str, ...]
    parents: Tuple[int, ...]
    children: Tuple[Tuple[int, ...], ...]
    token_indices: Tuple[Optional[int], ...]
    root: int

    def __len__(self) -> int:
        return len(self.labels)

    def to_string(self, node: Optional[int] = None) -> str:
        """Bracketed rendering, e.g. ``is(capital(the of(france)) paris)``."""
        node = self.root if node is None else node
        kids = self.children[node]
        if not kids:
            return self.labels[node]
        return f"{self.labels[node]}({' '.join(self.to_string(k) for k in kids)})"


def node_label(token: Token) -> str:
    """Label of a token's node: lowercased lemma, or text without one."""
    return (token.lemma or token.text).lower()


def build_tree(tokens: Sequence[Token], max_tokens: Optional[int] = None) -> Optional[LabeledTree]:
    """Build the dependency tree of a token sequence.

    Parameters
    ----------
    tokens : Sequence[Token]
        Tokens whose ``head`` indices are relative to this sequence
    max_tokens : Optional[int]
        Refuse to build trees over more tokens than this

    Returns
    -------
    Optional[LabeledTree]
        The tree, or None when the sequence is empty, too long, or not a
        well-formed parse (missing heads, heads out of range, cycles)
    """
    n = len(tokens)
    if n == 0:
        return None
    if max_tokens is not None and n > max_tokens:
        logger.debug("No tree for %d tokens (limit %d)", n, max_tokens)
        return None

    parents: List[int] = []
    roots: List[int] = []
    for i, token in enumerate(tokens):
        head = token.head
        if head is None:
            logger.debug("Token %d (%r) has no head, no tree built", i, token.text)
            return None
        if head == i:
            roots.append(i)
            parents.append(-1)
        elif 0 <= head < n:
            parents.append(head)
        else:
            logger.debug("Token %d (%r) has head %d out of range", i, token.text, head)
            return None

    if not roots or _has_cycle(parents):
        logger.debug("Malformed dependency parse over %d tokens", n)
        return None

    labels = [node_label(t) for t in tokens]
    token_indices: List[Optional[int]] = list(range(n))

    if len(roots) == 1:
        root = roots[0]
    else:
        root = n
        labels.append(ROOT_LABEL)
        token_indices.append(None)
        for r in roots:
            parents[r] = root
        parents.append(-1)

    children: List[List[int]] = [[] for _ in labels]
    for node, parent in enumerate(parents):
        if parent >= 0:
            children[parent].append(node)

    return LabeledTree(
        labels=tuple(labels),
        parents=tuple(parents),
        children=tuple(tuple(c) for c in children),
        token_indices=tuple(token_indices),
        root=root,
    )


def _has_cycle(parents: Sequence[int]) -> bool:
    """Check whether following parent links from some node never ends."""
    state = [0] * len(parents)  # 0 = unseen, 1 = on current path, 2 = done
    for start in range(len(parents)):
        path = []
        node = start
        while node >= 0 and state[node] == 0:
            state[node] = 1
            path.append(node)
            node = parents[node]
        if node >= 0 and state[node] == 1:
            return True
        for p in path:
            state[p] = 2
    return False

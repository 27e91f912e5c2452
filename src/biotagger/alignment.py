"""Question/passage alignment by tree edit distance.

We look for a way to rewrite the passage dependency tree into the
question dependency tree and take note which passage tokens can be kept
as they are, which need to be deleted and which need to be renamed. The
edit script itself comes from the Zhang-Shasha algorithm of ``zss``.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

from zss import Node, simple_distance
from zss.compare import Operation

from .document import Feature
from .tree import LabeledTree


logger = logging.getLogger(__name__)

KEEP = "keep"
RENAME = "rename"
DELETE = "delete"
INSERT = "insert"

_ZSS_KINDS = {
    Operation.match: KEEP,
    Operation.update: RENAME,
    Operation.remove: DELETE,
    Operation.insert: INSERT,
}


@dataclass(frozen=True)
class EditOperation:
    """One step of the passage-to-question edit script.

    Attributes
    ----------
    kind : str
        keep, rename, delete or insert
    passage_node : Optional[int]
        Node of the passage tree (None for insert)
    question_node : Optional[int]
        Node of the question tree (None for delete)
    passage_token : Optional[int]
        Passage token of ``passage_node``, None for insert or synthetic root
    target_label : Optional[str]
        Question label a renamed or inserted node gets
    """

    kind: str
    passage_node: Optional[int]
    question_node: Optional[int]
    passage_token: Optional[int]
    target_label: Optional[str] = None


@dataclass
class EditScript:
    """Minimal edit script between a passage tree and a question tree.

    Attributes
    ----------
    cost : float
        Raw edit cost (unit costs)
    distance : float
        Cost normalized by the summed size of both trees
    operations : Tuple[EditOperation, ...]
        Operations in the order produced by the edit-distance algorithm
    """

    cost: float
    distance: float
    operations: Tuple[EditOperation, ...]
    _token_ops: Dict[int, EditOperation] = field(default_factory=dict, init=False, repr=False)

    def __post_init__(self):
        for op in self.operations:
            if op.passage_token is not None:
                self._token_ops.setdefault(op.passage_token, op)

    def operation_for_token(self, token_index: int) -> Optional[EditOperation]:
        """The operation touching a passage token, if any."""
        return self._token_ops.get(token_index)

    def counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = defaultdict(int)
        for op in self.operations:
            counts[op.kind] += 1
        return dict(counts)

    def to_string(self, passage_tree: LabeledTree, question_tree: LabeledTree) -> str:
        """Human readable script, one operation per line."""
        lines = []
        for op in self.operations:
            source = passage_tree.labels[op.passage_node] if op.passage_node is not None else ""
            if op.kind == KEEP:
                lines.append(f"keep   {source}")
            elif op.kind == RENAME:
                lines.append(f"rename {source} -> {op.target_label}")
            elif op.kind == DELETE:
                lines.append(f"delete {source}")
            else:
                lines.append(f"insert {op.target_label}")
        return "\n".join(lines)


def _to_zss(tree: LabeledTree) -> Tuple[Node, Dict[int, int]]:
    """Convert an arena tree into zss nodes plus an ``id(node) -> index`` map."""
    nodes = [Node(label) for label in tree.labels]
    for parent, kids in enumerate(tree.children):
        for kid in kids:
            nodes[parent].addkid(nodes[kid])
    return nodes[tree.root], {id(node): i for i, node in enumerate(nodes)}


def align(
    question_tree: Optional[LabeledTree],
    passage_tree: Optional[LabeledTree],
) -> Optional[EditScript]:
    """Compute the edit script rewriting the passage tree into the question tree.

    Parameters
    ----------
    question_tree : Optional[LabeledTree]
        Question dependency tree, None if it could not be built
    passage_tree : Optional[LabeledTree]
        Passage dependency tree, None if it could not be built

    Returns
    -------
    Optional[EditScript]
        None when either tree is missing
    """
    if question_tree is None or passage_tree is None:
        return None

    p_root, p_index = _to_zss(passage_tree)
    q_root, q_index = _to_zss(question_tree)

    cost, zss_ops = simple_distance(p_root, q_root, return_operations=True)

    operations: List[EditOperation] = []
    for zop in zss_ops:
        kind = _ZSS_KINDS[zop.type]
        p_node = p_index[id(zop.arg1)] if zop.arg1 is not None else None
        q_node = q_index[id(zop.arg2)] if zop.arg2 is not None else None
        operations.append(EditOperation(
            kind=kind,
            passage_node=p_node,
            question_node=q_node,
            passage_token=passage_tree.token_indices[p_node] if p_node is not None else None,
            target_label=question_tree.labels[q_node] if kind in (RENAME, INSERT) else None,
        ))

    size = len(passage_tree) + len(question_tree)
    script = EditScript(cost=float(cost), distance=float(cost) / size, operations=tuple(operations))

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Tree edit distance %.3f (%s)\n%s",
            script.distance,
            script.counts(),
            script.to_string(passage_tree, question_tree),
        )
    return script


class EditFeatureGenerator:
    """Turn an edit script into per-token alignment features.

    For the passage token at ``index`` this yields:
    - ``edit_op``: keep, delete or rename
    - ``edit_rename_to``: the question label, for renamed tokens only
    - ``edit_<op>|<name>``: every feature already built for the token,
      specialized by the operation
    """

    OP_FEATURE = "edit_op"
    RENAME_FEATURE = "edit_rename_to"

    def __init__(self, script: EditScript):
        self.script = script

    def extract(self, features: Sequence[Feature], index: int) -> List[Feature]:
        op = self.script.operation_for_token(index)
        if op is None:
            return []

        edit_features = [Feature(self.OP_FEATURE, op.kind)]
        if op.kind == RENAME:
            edit_features.append(Feature(self.RENAME_FEATURE, op.target_label))

        prefix = f"edit_{op.kind}|"
        edit_features.extend(Feature(prefix + f.name, f.value) for f in features)
        return edit_features

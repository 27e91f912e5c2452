"""Answer BIO tagger: the per-question, per-passage pipeline driver.

For every question we decide once on the specializing LATs and build the
question dependency tree. For every candidate passage we then:

1. build the passage dependency tree and align it to the question tree
2. extract token attribute and n-gram features for each token
3. add alignment features when both trees exist
4. cross all features with the question LATs, keeping the originals too
5. train: encode the gold mentions into BIO outcomes and collect the
   instance; classify: ask the model for outcomes and decode them into
   mentions on the passage
"""

import logging
from enum import Enum
from typing import AbstractSet, Iterable, List, Optional, Sequence

from joblib import Parallel, delayed
from tqdm import tqdm

from .alignment import EditFeatureGenerator, align
from .chunking import BioChunking
from .config import ALLOWED_LATS, MAX_TREE_TOKENS, TaggerConfig
from .document import Feature, Mention, Passage, QAItem, Question
from .features import FeaturePipeline
from .lat import expand_features_by_lats, specializing_lats
from .model import Instance, SequenceModel
from .tree import LabeledTree, build_tree


logger = logging.getLogger(__name__)


class Mode(Enum):
    """Which model operation and BIO direction the tagger uses."""

    TRAIN = "train"
    CLASSIFY = "classify"


class BIOTagger:
    """Tag passage tokens with answer B-I-O outcomes.

    Parameters
    ----------
    model : SequenceModel
        Sequence model used for training and classification
    mode : Mode
        TRAIN collects training instances, CLASSIFY writes mentions
    allowed_lats : AbstractSet[str]
        LAT texts allowed to specialize features
    use_alignment : bool
        Add question/passage tree alignment features
    max_tree_tokens : int
        Token limit for building dependency trees
    n_jobs : int
        Worker threads for building passage features
    pipeline : Optional[FeaturePipeline]
        Base feature extractors, :meth:`FeaturePipeline.default` if None
    """

    def __init__(
        self,
        model: SequenceModel,
        mode: Mode = Mode.CLASSIFY,
        allowed_lats: AbstractSet[str] = ALLOWED_LATS,
        use_alignment: bool = True,
        max_tree_tokens: int = MAX_TREE_TOKENS,
        n_jobs: int = 1,
        pipeline: Optional[FeaturePipeline] = None,
    ):
        self.model = model
        self.mode = mode
        self.allowed_lats = frozenset(allowed_lats)
        self.use_alignment = use_alignment
        self.max_tree_tokens = max_tree_tokens
        self.n_jobs = n_jobs
        self.pipeline = pipeline or FeaturePipeline.default()
        self.chunking = BioChunking()

        self.instances: List[Instance] = []

    @classmethod
    def from_config(
        cls,
        config: TaggerConfig,
        model: SequenceModel,
        mode: Mode = Mode.CLASSIFY,
    ) -> "BIOTagger":
        return cls(
            model=model,
            mode=mode,
            allowed_lats=config.allowed_lats,
            use_alignment=config.use_alignment,
            max_tree_tokens=config.max_tree_tokens,
            n_jobs=config.n_jobs,
        )

    def question_tree(self, question: Question) -> Optional[LabeledTree]:
        if not self.use_alignment:
            return None
        return build_tree(question.tokens, self.max_tree_tokens)

    def passage_features(
        self,
        passage: Passage,
        lats: Sequence[str] = (),
        question_tree: Optional[LabeledTree] = None,
    ) -> List[List[Feature]]:
        """Build the final feature list of every token of a passage.

        Parameters
        ----------
        passage : Passage
            Passage to featurize
        lats : Sequence[str]
            Specializing LATs of the question
        question_tree : Optional[LabeledTree]
            Question dependency tree; no alignment features without it

        Returns
        -------
        List[List[Feature]]
            One feature list per passage token
        """
        tokens = passage.tokens

        edit_extractor = None
        if self.use_alignment and question_tree is not None:
            passage_tree = build_tree(tokens, self.max_tree_tokens)
            script = align(question_tree, passage_tree)
            if script is not None:
                edit_extractor = EditFeatureGenerator(script)
            else:
                logger.debug("No dependency tree for passage %s", passage.passage_id)

        feature_lists = []
        for i in range(len(tokens)):
            token_features = self.pipeline.extract(tokens, i)
            if edit_extractor is not None:
                token_features.extend(edit_extractor.extract(token_features, i))
            token_features.extend(expand_features_by_lats(token_features, lats))
            feature_lists.append(token_features)
        return feature_lists

    def process_question(self, question: Question, passages: Sequence[Passage]) -> None:
        """Featurize and train on / classify all passages of one question."""
        lats = specializing_lats(question, self.allowed_lats)
        q_tree = self.question_tree(question)
        if self.use_alignment and q_tree is None:
            logger.debug("No dependency tree for question %s", question.question_id)

        if self.n_jobs == 1 or len(passages) < 2:
            all_features = [self.passage_features(p, lats, q_tree) for p in passages]
        else:
            all_features = Parallel(n_jobs=self.n_jobs, prefer="threads")(
                delayed(self.passage_features)(p, lats, q_tree) for p in passages
            )

        for passage, feature_lists in zip(passages, all_features):
            self.process_passage(passage, feature_lists)

    def process_passage(self, passage: Passage, feature_lists: List[List[Feature]]) -> None:
        if self.mode is Mode.TRAIN:
            # Passages without answer mentions would bias the set too
            # much towards Outside.
            if not passage.mentions:
                logger.debug("Skipping passage %s without answers", passage.passage_id)
                return
            outcomes = self.chunking.encode(len(passage), passage.mentions)
            self.instances.append((feature_lists, outcomes))
        else:
            for mention in self.classify(feature_lists):
                passage.add_mention(mention)

    def classify(self, feature_lists: List[List[Feature]]) -> List[Mention]:
        if not feature_lists:
            return []
        outcomes = self.model.classify(feature_lists)
        return self.chunking.decode(outcomes)

    def process(self, items: Iterable[QAItem]) -> None:
        """Run the current mode over a corpus of questions."""
        for item in tqdm(items, desc=f"BIO tagger ({self.mode.value})"):
            self.process_question(item.question, item.passages)

    def fit(self, items: Iterable[QAItem]) -> int:
        """Collect training instances from a corpus and train the model.

        Returns
        -------
        int
            Number of training instances (passages with answers)
        """
        self.mode = Mode.TRAIN
        self.instances = []
        self.process(items)
        logger.info("Collected %d training instances", len(self.instances))
        self.model.train(self.instances)
        return len(self.instances)

    def tag(self, items: Iterable[QAItem]) -> None:
        """Classify a corpus, adding predicted mentions to its passages."""
        self.mode = Mode.CLASSIFY
        self.process(items)

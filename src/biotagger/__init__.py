"""Answer span tagging for question answering.

This package tags the tokens of passages retrieved for a question with
B-I-O labels ("Begin", "Inside", "Outside" an answer) and reassembles
the labels into answer mentions. It works as a custom "answer named
entity" recognizer that can use question-specific features.

The pipeline:
1. Extract token attribute and context n-gram features
2. Align the passage dependency tree to the question tree and derive
   keep/delete/rename features from the edit script
3. Specialize every feature by the question's lexical answer types
4. Train a CRF on BIO-encoded gold answers, or decode its predictions
"""

__version__ = "1.0.0"

from .alignment import EditFeatureGenerator, EditScript, align
from .chunking import BioChunking
from .config import ALLOWED_LATS, TaggerConfig
from .document import Feature, Mention, Passage, QAItem, Question, Token
from .features import FeaturePipeline, NgramExtractor, TokenAttributeExtractor
from .lat import expand_features_by_lats, specializing_lats
from .model import CRFSequenceModel, SequenceModel
from .tagger import BIOTagger, Mode
from .tree import LabeledTree, build_tree

__all__ = [
    # Data model
    "Token",
    "Passage",
    "Question",
    "QAItem",
    "Mention",
    "Feature",
    # Features
    "FeaturePipeline",
    "TokenAttributeExtractor",
    "NgramExtractor",
    "specializing_lats",
    "expand_features_by_lats",
    "ALLOWED_LATS",
    # Alignment
    "LabeledTree",
    "build_tree",
    "align",
    "EditScript",
    "EditFeatureGenerator",
    # Chunking and models
    "BioChunking",
    "SequenceModel",
    "CRFSequenceModel",
    # Pipeline
    "BIOTagger",
    "Mode",
    "TaggerConfig",
]

"""Configuration for the answer BIO tagger."""

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, FrozenSet

import yaml


# Lexical answer types that may specialize features. Top twelve LATs of
# the training questions; rarer ones would only overfit.
ALLOWED_LATS: FrozenSet[str] = frozenset({
    "color", "number", "state", "year",
    "location", "die", "country", "person", "city",
    "amount", "date", "time",
})

# Mention type carried by every answer mention
ANSWER_LABEL = "answer"

# BIO outcome tags
BEGIN_TAG = "B-" + ANSWER_LABEL
INSIDE_TAG = "I-" + ANSWER_LABEL
OUTSIDE_TAG = "O"

# Dependency trees larger than this are not aligned
MAX_TREE_TOKENS = 150

# spaCy configuration
SPACY_MODEL = "en_core_web_sm"

# CRF defaults (sklearn-crfsuite)
CRF_PARAMS: Dict[str, Any] = {
    "algorithm": "lbfgs",
    "c1": 0.1,
    "c2": 0.1,
    "max_iterations": 100,
    "all_possible_transitions": True,
}


@dataclass
class TaggerConfig:
    """Runtime settings of the tagger.

    Attributes
    ----------
    allowed_lats : FrozenSet[str]
        LAT texts allowed to specialize features
    use_alignment : bool
        Produce question/passage tree alignment features
    max_tree_tokens : int
        Token limit above which no dependency tree is built
    n_jobs : int
        Worker threads used to build passage features
    spacy_model : str
        spaCy pipeline used to annotate raw text corpora
    crf : Dict[str, Any]
        Keyword arguments for ``sklearn_crfsuite.CRF``
    """

    allowed_lats: FrozenSet[str] = ALLOWED_LATS
    use_alignment: bool = True
    max_tree_tokens: int = MAX_TREE_TOKENS
    n_jobs: int = 1
    spacy_model: str = SPACY_MODEL
    crf: Dict[str, Any] = field(default_factory=lambda: dict(CRF_PARAMS))

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "TaggerConfig":
        """Build a config from a plain mapping, ignoring unknown keys."""
        known = {k: v for k, v in config.items() if k in cls.__dataclass_fields__}
        if "allowed_lats" in known:
            known["allowed_lats"] = frozenset(known["allowed_lats"])
        if "crf" in known:
            known["crf"] = {**CRF_PARAMS, **(known["crf"] or {})}
        return cls(**known)

    @classmethod
    def from_yaml(cls, yaml_path: str) -> "TaggerConfig":
        """Load the config from a YAML file.

        Parameters
        ----------
        yaml_path : str
            Path to YAML config file

        Returns
        -------
        TaggerConfig
            Loaded configuration
        """
        with open(yaml_path, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}

        return cls.from_dict(config)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        config = asdict(self)
        config["allowed_lats"] = sorted(self.allowed_lats)
        return config

    def to_yaml(self, output_path: str) -> None:
        """Write the config to a YAML file."""
        Path(output_path).parent.mkdir(parents=True, exist_ok=True)

        with open(output_path, "w", encoding="utf-8") as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

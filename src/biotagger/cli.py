#!/usr/bin/env python3
"""
Answer BIO tagger - command line

Trains a CRF answer tagger on one corpus and tags another one in the same
process, printing mention-level and token-level scores.

Usage:
    biotagger run --train train.conllu --test test.conllu
    biotagger run --train train.jsonl --test test.jsonl --output tagged.conllu
    biotagger run --train train.conllu --test test.conllu --config tagger.yaml --no-alignment
"""

import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from .annotation import TextProcessor
from .config import TaggerConfig
from .corpus import load_conllu, load_jsonl, write_conllu
from .document import QAItem
from .evaluation import evaluate_mentions, token_report
from .model import CRFSequenceModel
from .tagger import BIOTagger, Mode


logger = logging.getLogger(__name__)


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="biotagger",
        description="Answer span tagging of retrieved passages with a BIO CRF.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Train on one corpus, tag and score another")
    run.add_argument("--train", required=True, help="Training corpus (.conllu or .jsonl)")
    run.add_argument("--test", required=True, help="Test corpus (.conllu or .jsonl)")
    run.add_argument("--output", default=None, help="Write tagged test corpus as CoNLL-U")
    run.add_argument("--config", default=None, help="YAML tagger configuration")
    run.add_argument(
        "--no-alignment",
        action="store_true",
        help="Disable question/passage tree alignment features",
    )
    run.add_argument("--n-jobs", type=int, default=None, help="Feature worker threads")
    run.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def load_corpus(path: str, config: TaggerConfig, processor: Optional[TextProcessor] = None) -> List[QAItem]:
    """Load a corpus by extension; JSONL needs spaCy annotation."""
    if Path(path).suffix == ".jsonl":
        processor = processor or TextProcessor(model_name=config.spacy_model)
        return load_jsonl(path, processor)
    return load_conllu(path)


def run(args: argparse.Namespace) -> dict:
    config = TaggerConfig.from_yaml(args.config) if args.config else TaggerConfig()
    if args.no_alignment:
        config.use_alignment = False
    if args.n_jobs is not None:
        config.n_jobs = args.n_jobs

    processor = None
    if Path(args.train).suffix == ".jsonl" or Path(args.test).suffix == ".jsonl":
        processor = TextProcessor(model_name=config.spacy_model)

    train_items = load_corpus(args.train, config, processor)
    test_items = load_corpus(args.test, config, processor)
    logger.info("Training on %d questions, testing on %d", len(train_items), len(test_items))

    tagger = BIOTagger.from_config(config, CRFSequenceModel(config.crf), mode=Mode.TRAIN)
    tagger.fit(train_items)

    passages = [p for item in test_items for p in item.passages]
    gold = [list(p.mentions) for p in passages]
    for passage in passages:
        passage.mentions.clear()

    tagger.tag(test_items)
    predicted = [list(p.mentions) for p in passages]

    scores = evaluate_mentions(gold, predicted)
    print("=" * 60)
    print("ANSWER MENTIONS (exact match)")
    print("=" * 60)
    print(json.dumps(scores.to_dict(), indent=2))
    print("\nToken-level BIO report:")
    print(token_report(passages, gold, predicted))

    if args.output:
        write_conllu(test_items, args.output)
        print(f"Tagged corpus saved to: {args.output}")

    return scores.to_dict()


def main(argv: Optional[Sequence[str]] = None) -> None:
    """Main entry point."""
    args = parse_arguments(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    if args.command == "run":
        run(args)


if __name__ == "__main__":
    main()

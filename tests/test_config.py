"""
Unit Tests for tagger configuration.
"""

from biotagger.config import ALLOWED_LATS, CRF_PARAMS, TaggerConfig


class TestTaggerConfig:
    """Tests for TaggerConfig."""

    def test_defaults(self):
        config = TaggerConfig()
        assert config.allowed_lats == ALLOWED_LATS
        assert config.use_alignment is True
        assert config.n_jobs == 1
        assert config.crf == CRF_PARAMS

    def test_from_dict_when_unknown_keys_then_ignored(self):
        config = TaggerConfig.from_dict({"n_jobs": 4, "unknown": 1})
        assert config.n_jobs == 4
        assert not hasattr(config, "unknown")

    def test_from_dict_when_partial_crf_then_merged_with_defaults(self):
        config = TaggerConfig.from_dict({"crf": {"c1": 0.5}, "allowed_lats": ["date"]})
        assert config.crf["c1"] == 0.5
        assert config.crf["algorithm"] == CRF_PARAMS["algorithm"]
        assert config.allowed_lats == frozenset({"date"})

    def test_yaml_round_trip(self, tmp_path):
        config = TaggerConfig(use_alignment=False, max_tree_tokens=40, allowed_lats=frozenset({"date", "year"}))
        path = tmp_path / "nested" / "tagger.yaml"
        config.to_yaml(str(path))

        assert TaggerConfig.from_yaml(str(path)) == config

    def test_from_yaml_when_empty_then_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert TaggerConfig.from_yaml(str(path)) == TaggerConfig()

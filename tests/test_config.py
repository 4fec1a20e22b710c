from __future__ import annotations

import pytest

from cardpng.config import COMPAT_MODE_ENV, CompatibilityMode, EmbedConfig


def test_default_keywords():
    config = EmbedConfig()
    assert config.keywords_for({"spec": "chara_card_v3"}) == ("ccv3",)
    assert config.keywords_for({"spec": "chara_card_v2"}) == ("ccv3", "chara")
    assert config.keywords_for({"name": "no spec"}) == ("ccv3",)
    assert config.keywords_for(["chara_card_v2"]) == ("ccv3",)
    assert config.keywords_for(None) == ("ccv3",)


def test_modes():
    assert EmbedConfig(CompatibilityMode.ALWAYS).keywords_for({}) == ("ccv3", "chara")
    assert EmbedConfig(CompatibilityMode.NEVER).keywords_for({"spec": "chara_card_v2"}) == ("ccv3",)


def test_strip_keywords_lower_cased():
    config = EmbedConfig(strip_keywords=["CCV3", "Chara", "Extra"])
    assert config.strip_keywords == {"ccv3", "chara", "extra"}
    assert EmbedConfig().strip_keywords == {"ccv3", "chara"}


def test_from_env():
    assert EmbedConfig.from_env({}).mode == CompatibilityMode.AUTO
    assert EmbedConfig.from_env({COMPAT_MODE_ENV: " Always "}).mode == CompatibilityMode.ALWAYS
    assert EmbedConfig.from_env({COMPAT_MODE_ENV: "never"}).mode == CompatibilityMode.NEVER
    with pytest.raises(ValueError):
        EmbedConfig.from_env({COMPAT_MODE_ENV: "sometimes"})


def test_from_env_reads_os_environ(monkeypatch):
    monkeypatch.setenv(COMPAT_MODE_ENV, "always")
    assert EmbedConfig.from_env().mode == CompatibilityMode.ALWAYS

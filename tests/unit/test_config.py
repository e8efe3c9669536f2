from typing import List, Optional

import pytest
from pydantic import ValidationError

from valuepath import DecodeError, Decoder
from valuepath.config import DecoderSettings, load_settings


def test_missing_file_gives_defaults(tmp_path):
    settings = load_settings(tmp_path / "absent.yml")
    assert settings == DecoderSettings()
    d = Decoder.from_settings(settings)
    assert d.decode_type(bool, "si") is True
    assert d.decode_type(List[int], "[1 2]") == [1, 2]


def test_settings_from_yaml(tmp_path):
    cfg = tmp_path / "decoder.yml"
    cfg.write_text(
        'trues: ["on", "yes"]\n'
        'falses: ["off", "no"]\n'
        'sequence:\n'
        '  start: "<"\n'
        '  end: ">"\n'
        "  value_separator: '\\s*;\\s*'\n"
        '  strict: true\n',
        encoding="utf-8",
    )
    d = Decoder.from_settings(load_settings(cfg))
    assert d.decode_type(bool, "ON") is True
    assert d.decode_type(bool, "off") is False
    with pytest.raises(DecodeError):
        d.decode_type(bool, "y")
    assert d.decode_type(List[int], "<1; 2>") == [1, 2]
    with pytest.raises(DecodeError):
        d.decode_type(List[int], "1; 2")


def test_unquoted_yaml_keywords_become_text(tmp_path):
    cfg = tmp_path / "decoder.yml"
    cfg.write_text("trues: [true, 1]\nfalses: [false, 0]\n", encoding="utf-8")
    settings = load_settings(cfg)
    assert settings.trues == ["true", "1"]
    assert settings.falses == ["false", "0"]


def test_invalid_separator_rejected():
    with pytest.raises(ValidationError):
        DecoderSettings(record={"start": "{", "end": "}", "value_separator": "[unclosed"})


def test_nil_token_from_yaml(tmp_path):
    cfg = tmp_path / "decoder.yml"
    cfg.write_text('log_level: debug\nnil: "-"\n', encoding="utf-8")
    d = Decoder.from_settings(load_settings(cfg))
    assert d.decode_type(List[Optional[int]], "[1 - 3]") == [1, None, 3]
    with pytest.raises(DecodeError):
        d.decode_type(Optional[int], "<nil>")

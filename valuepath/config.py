r"""Decoder policy read from YAML.

Keywords are best quoted, since YAML reads bare yes/no as booleans.
Example ``decoder.yml``::

    trues: ["true", "yes", "on"]
    falses: ["false", "no", "off", ""]
    sequence:
      start: "["
      end: "]"
      value_separator: '\s*[\s,|]+\s*'
      strict: true
"""
from __future__ import annotations
import logging
import re
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .decoder import DEFAULT_FALSES, DEFAULT_KEY_SEPARATOR, DEFAULT_TRUES, DEFAULT_VALUE_SEPARATOR
from .encoder import NIL

logger = logging.getLogger(__name__)


class MultiSettings(BaseModel):
    start: str
    end: str
    value_separator: str = DEFAULT_VALUE_SEPARATOR
    key_separator: Optional[str] = None
    strict: bool = False

    @field_validator("value_separator", "key_separator")
    @classmethod
    def _valid_pattern(cls, v: Optional[str]) -> Optional[str]:
        if v is not None:
            try:
                re.compile(v)
            except re.error as err:
                raise ValueError(f"invalid separator pattern {v!r}: {err}") from err
        return v


class DecoderSettings(BaseModel):
    sequence: MultiSettings = Field(default_factory=lambda: MultiSettings(start="[", end="]"))
    array: MultiSettings = Field(default_factory=lambda: MultiSettings(start="[", end="]"))
    mapping: MultiSettings = Field(
        default_factory=lambda: MultiSettings(start="map[", end="]", key_separator=DEFAULT_KEY_SEPARATOR)
    )
    record: MultiSettings = Field(
        default_factory=lambda: MultiSettings(start="{", end="}", key_separator=DEFAULT_KEY_SEPARATOR)
    )
    trues: List[str] = Field(default_factory=lambda: sorted(DEFAULT_TRUES))
    falses: List[str] = Field(default_factory=lambda: sorted(DEFAULT_FALSES))
    nil: str = NIL

    @field_validator("trues", "falses", mode="before")
    @classmethod
    def _keywords_as_text(cls, v):
        # YAML reads bare true/false/yes/no as booleans and 1/0 as ints
        if isinstance(v, list):
            return ["" if item is None else str(item).lower() for item in v]
        return v


def load_yaml_file(path: Path) -> dict:
    if not path.exists():
        return {}
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_settings(path: Path) -> DecoderSettings:
    """Read decoder settings from a YAML file; a missing file gives the defaults."""
    data = load_yaml_file(Path(path))
    settings = DecoderSettings(**data)
    logger.debug("Loaded decoder settings from %s (present=%s)", path, bool(data))
    return settings

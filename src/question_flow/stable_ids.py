# question_flow/stable_ids.py
from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping, Sequence
from typing import Any

from question_flow.contracts import QuestionConfig


def _sha256_hex(s: str) -> str:
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def _canon(obj: Any) -> str:
    """
    Canonical JSON string (stable across runs) for hashing.
    """
    return json.dumps(obj, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


def derive_rule_set_id(codes: Sequence[str], configs: Mapping[str, QuestionConfig]) -> str:
    """
    Fingerprint a rule set from its declarations.

    Codes keep their order (it drives skip/recover arithmetic); configs are
    keyed by code so definition order of the questions does not matter.
    Decision functions contribute their qualified name only.
    """
    key_obj = {
        "codes": list(codes),
        "configs": {code: config.declaration() for code, config in configs.items()},
    }
    return "rules_" + _sha256_hex(_canon(key_obj))

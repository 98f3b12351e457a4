from __future__ import annotations

from .file_store import FilePolicySource
from .policy_loader import decode_policy, load_model, load_policy, parse_policy_text
from .reloader import HotReloader, ModelHolder

__all__ = [
    "FilePolicySource",
    "decode_policy",
    "load_model",
    "load_policy",
    "parse_policy_text",
    "HotReloader",
    "ModelHolder",
]

# reinvent/core/cache_keys.py
"""
Deterministic cache keys, one family per cache namespace.

Subject strings are normalized (trimmed, lower-cased) so "Smartphone " and
"smartphone" share an entry. Free-form inputs (image prompts, audio bytes)
are hashed in full; nothing is truncated, so two long prompts that share a
prefix never collide.
"""

import hashlib
from typing import Optional


def _norm(value: str) -> str:
    return (value or "").strip().lower()


def deconstruction_key(invention: str) -> str:
    return f"deconstruct_{_norm(invention)}"


def simulation_key(invention: str, era: str, creativity: float, depth: int) -> str:
    return f"simulate_{_norm(invention)}_{_norm(era)}_{creativity:g}_{depth}"


def image_key(
    prompt: str,
    style: str,
    size: str,
    era: Optional[str] = None,
    pathway_title: Optional[str] = None,
) -> str:
    material = "|".join([prompt, style, size, era or "", pathway_title or ""])
    return "image_" + hashlib.sha256(material.encode("utf-8")).hexdigest()


def transcription_key(audio: bytes) -> str:
    return "audio_" + hashlib.sha256(audio).hexdigest()

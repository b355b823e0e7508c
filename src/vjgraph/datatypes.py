"""Closed set of data kinds that may flow along a connection."""

from __future__ import annotations

from enum import Enum


class DataType(str, Enum):
    FLOAT = "float"
    VECTOR2 = "vector2"
    VECTOR3 = "vector3"
    VECTOR4 = "vector4"
    COLOR = "color"
    AUDIO_BUFFER = "audio_buffer"
    IMAGE = "image"
    STRING = "string"
    BOOLEAN = "boolean"
    # Machine-learning and scene kinds
    MODEL = "model"
    CONDITIONING = "conditioning"
    LATENT = "latent"
    CLIP = "clip"
    VAE = "vae"
    MASK = "mask"
    AUDIO = "audio"
    ARRAY = "array"
    INTEGER = "integer"
    MESH = "mesh"
    SCENE = "scene"
    TRANSFORM = "transform"

    @classmethod
    def parse(cls, value: "DataType | str") -> "DataType":
        """Return the member named or valued ``value`` (case-insensitive)."""

        if isinstance(value, cls):
            return value
        text = str(value).strip()
        lowered = text.lower()
        for member in cls:
            if member.value == lowered or member.name.lower() == lowered:
                return member
        # Accept CamelCase spellings such as ``AudioBuffer``.
        compact = lowered.replace("_", "")
        for member in cls:
            if member.value.replace("_", "") == compact:
                return member
        raise ValueError(f"Unknown data type '{value}'")

    def __str__(self) -> str:
        return self.value


__all__ = ["DataType"]

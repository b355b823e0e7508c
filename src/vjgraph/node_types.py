"""Node-type catalogue describing the ports each kind of node exposes.

The graph engine never consults this module: it only sees opaque node ids.
The scene layer and editors use it to learn which ports a freshly created
node offers and to reject connections between incompatible ports.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Tuple

from .datatypes import DataType
from .errors import InvalidPortIndex, PortTypeMismatch


class PortDirection(str, Enum):
    INPUT = "input"
    OUTPUT = "output"


class NodeCategory(str, Enum):
    AUDIO_GENERATOR = "audio_generator"
    AUDIO_EFFECT = "audio_effect"
    VISUAL_GENERATOR = "visual_generator"
    VISUAL_EFFECT = "visual_effect"
    OUTPUT = "output"
    UTILITY = "utility"
    ML = "ml"


@dataclass(frozen=True)
class NodePort:
    name: str
    direction: PortDirection
    data_type: DataType
    required: bool = True


def input_port(name: str, data_type: DataType, *, required: bool = True) -> NodePort:
    return NodePort(name, PortDirection.INPUT, data_type, required)


def output_port(name: str, data_type: DataType) -> NodePort:
    return NodePort(name, PortDirection.OUTPUT, data_type, True)


@dataclass(frozen=True)
class NodeTypeDefinition:
    """Static description of a node type: its ports and editor footprint."""

    name: str
    category: NodeCategory
    description: str = ""
    input_ports: Tuple[NodePort, ...] = ()
    output_ports: Tuple[NodePort, ...] = ()
    default_size: Tuple[float, float] = (160.0, 80.0)

    def input(self, index: int) -> NodePort:
        if not 0 <= index < len(self.input_ports):
            raise InvalidPortIndex(index, len(self.input_ports), direction="input")
        return self.input_ports[index]

    def output(self, index: int) -> NodePort:
        if not 0 <= index < len(self.output_ports):
            raise InvalidPortIndex(index, len(self.output_ports), direction="output")
        return self.output_ports[index]


# Implicit conversions accepted when an output feeds an input of another type.
_COERCIONS = frozenset(
    {
        (DataType.INTEGER, DataType.FLOAT),
        (DataType.FLOAT, DataType.INTEGER),
        (DataType.BOOLEAN, DataType.FLOAT),
        (DataType.AUDIO, DataType.AUDIO_BUFFER),
        (DataType.AUDIO_BUFFER, DataType.AUDIO),
        (DataType.MASK, DataType.IMAGE),
    }
)


def types_compatible(source: DataType, target: DataType) -> bool:
    return source == target or (source, target) in _COERCIONS


def check_port_compatibility(
    source: NodeTypeDefinition,
    from_port: int,
    target: NodeTypeDefinition,
    to_port: int,
) -> DataType:
    """Validate a prospective connection; return the data type it carries."""

    produced = source.output(from_port).data_type
    expected = target.input(to_port).data_type
    if not types_compatible(produced, expected):
        raise PortTypeMismatch(expected, produced)
    return produced


class NodeTypeRegistry:
    """Registry of node type definitions keyed by type name."""

    def __init__(self, definitions: Iterable[NodeTypeDefinition] = ()) -> None:
        self._definitions: Dict[str, NodeTypeDefinition] = {}
        for definition in definitions:
            self.register(definition)

    def register(self, definition: NodeTypeDefinition) -> None:
        if definition.name in self._definitions:
            raise ValueError(f"Duplicate node type registration for {definition.name}")
        self._definitions[definition.name] = definition

    def get(self, name: str) -> NodeTypeDefinition | None:
        return self._definitions.get(name)

    def require(self, name: str) -> NodeTypeDefinition:
        try:
            return self._definitions[name]
        except KeyError as exc:
            raise KeyError(f"Unknown node type '{name}'") from exc

    def names(self) -> Tuple[str, ...]:
        return tuple(self._definitions)

    def definitions(self) -> Tuple[NodeTypeDefinition, ...]:
        return tuple(self._definitions.values())

    def by_category(self, category: NodeCategory | str) -> Tuple[NodeTypeDefinition, ...]:
        wanted = NodeCategory(category)
        return tuple(d for d in self._definitions.values() if d.category == wanted)

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


def _builtin_definitions() -> Tuple[NodeTypeDefinition, ...]:
    F = DataType
    return (
        NodeTypeDefinition(
            name="oscillator",
            category=NodeCategory.AUDIO_GENERATOR,
            description="Band-limited oscillator",
            input_ports=(
                input_port("frequency", F.FLOAT, required=False),
                input_port("amplitude", F.FLOAT, required=False),
            ),
            output_ports=(output_port("audio", F.AUDIO_BUFFER),),
        ),
        NodeTypeDefinition(
            name="audio_input",
            category=NodeCategory.AUDIO_GENERATOR,
            description="Live audio from the selected input device",
            output_ports=(output_port("audio", F.AUDIO_BUFFER),),
        ),
        NodeTypeDefinition(
            name="gain",
            category=NodeCategory.AUDIO_EFFECT,
            input_ports=(input_port("audio", F.AUDIO_BUFFER), input_port("gain", F.FLOAT, required=False)),
            output_ports=(output_port("audio", F.AUDIO_BUFFER),),
        ),
        NodeTypeDefinition(
            name="filter",
            category=NodeCategory.AUDIO_EFFECT,
            description="Resonant state-variable filter",
            input_ports=(
                input_port("audio", F.AUDIO_BUFFER),
                input_port("cutoff", F.FLOAT, required=False),
                input_port("resonance", F.FLOAT, required=False),
            ),
            output_ports=(output_port("audio", F.AUDIO_BUFFER),),
        ),
        NodeTypeDefinition(
            name="audio_analyzer",
            category=NodeCategory.AUDIO_EFFECT,
            description="Spectrum, RMS and onset features",
            input_ports=(input_port("audio", F.AUDIO_BUFFER),),
            output_ports=(
                output_port("spectrum", F.ARRAY),
                output_port("rms", F.FLOAT),
                output_port("onset", F.BOOLEAN),
            ),
        ),
        NodeTypeDefinition(
            name="beat_detector",
            category=NodeCategory.ML,
            input_ports=(
                input_port("audio_samples", F.ARRAY),
                input_port("sample_rate", F.INTEGER, required=False),
                input_port("threshold", F.FLOAT, required=False),
            ),
            output_ports=(
                output_port("beat_detected", F.BOOLEAN),
                output_port("energy", F.FLOAT),
                output_port("bpm", F.FLOAT),
            ),
        ),
        NodeTypeDefinition(
            name="solid_color",
            category=NodeCategory.VISUAL_GENERATOR,
            input_ports=(input_port("color", F.COLOR, required=False),),
            output_ports=(output_port("image", F.IMAGE),),
        ),
        NodeTypeDefinition(
            name="noise",
            category=NodeCategory.VISUAL_GENERATOR,
            description="Animated fractal noise",
            input_ports=(
                input_port("scale", F.FLOAT, required=False),
                input_port("speed", F.FLOAT, required=False),
            ),
            output_ports=(output_port("image", F.IMAGE),),
        ),
        NodeTypeDefinition(
            name="shader",
            category=NodeCategory.VISUAL_GENERATOR,
            description="Fullscreen WGSL fragment shader",
            input_ports=(
                input_port("time", F.FLOAT, required=False),
                input_port("resolution", F.VECTOR2, required=False),
                input_port("audio_level", F.FLOAT, required=False),
            ),
            output_ports=(output_port("image", F.IMAGE),),
            default_size=(200.0, 120.0),
        ),
        NodeTypeDefinition(
            name="blur",
            category=NodeCategory.VISUAL_EFFECT,
            input_ports=(input_port("image", F.IMAGE), input_port("radius", F.FLOAT, required=False)),
            output_ports=(output_port("image", F.IMAGE),),
        ),
        NodeTypeDefinition(
            name="color_grade",
            category=NodeCategory.VISUAL_EFFECT,
            input_ports=(
                input_port("image", F.IMAGE),
                input_port("tint", F.COLOR, required=False),
                input_port("saturation", F.FLOAT, required=False),
            ),
            output_ports=(output_port("image", F.IMAGE),),
        ),
        NodeTypeDefinition(
            name="blend",
            category=NodeCategory.VISUAL_EFFECT,
            input_ports=(
                input_port("base", F.IMAGE),
                input_port("layer", F.IMAGE),
                input_port("opacity", F.FLOAT, required=False),
            ),
            output_ports=(output_port("image", F.IMAGE),),
        ),
        NodeTypeDefinition(
            name="mix",
            category=NodeCategory.AUDIO_EFFECT,
            description="Sums two audio streams",
            input_ports=(input_port("a", F.AUDIO_BUFFER), input_port("b", F.AUDIO_BUFFER, required=False)),
            output_ports=(output_port("audio", F.AUDIO_BUFFER),),
        ),
        NodeTypeDefinition(
            name="style_transfer",
            category=NodeCategory.ML,
            input_ports=(
                input_port("content_image", F.IMAGE),
                input_port("style_image", F.IMAGE),
                input_port("style_strength", F.FLOAT, required=False),
            ),
            output_ports=(output_port("stylized_image", F.IMAGE),),
            default_size=(220.0, 120.0),
        ),
        NodeTypeDefinition(
            name="audio_output",
            category=NodeCategory.OUTPUT,
            input_ports=(input_port("audio", F.AUDIO_BUFFER),),
        ),
        NodeTypeDefinition(
            name="screen_output",
            category=NodeCategory.OUTPUT,
            input_ports=(input_port("image", F.IMAGE),),
        ),
        NodeTypeDefinition(
            name="constant",
            category=NodeCategory.UTILITY,
            output_ports=(output_port("value", F.FLOAT),),
            default_size=(120.0, 60.0),
        ),
        NodeTypeDefinition(
            name="lfo",
            category=NodeCategory.UTILITY,
            description="Low-frequency control oscillator",
            input_ports=(input_port("rate", F.FLOAT, required=False),),
            output_ports=(output_port("value", F.FLOAT),),
            default_size=(120.0, 60.0),
        ),
        NodeTypeDefinition(
            name="math",
            category=NodeCategory.UTILITY,
            input_ports=(input_port("a", F.FLOAT), input_port("b", F.FLOAT, required=False)),
            output_ports=(output_port("result", F.FLOAT),),
            default_size=(120.0, 60.0),
        ),
    )


_DEFAULT_REGISTRY = NodeTypeRegistry(_builtin_definitions())


def default_registry() -> NodeTypeRegistry:
    """Return the registry pre-populated with the built-in node types."""

    return _DEFAULT_REGISTRY


__all__ = [
    "NodeCategory",
    "NodePort",
    "NodeTypeDefinition",
    "NodeTypeRegistry",
    "PortDirection",
    "check_port_compatibility",
    "default_registry",
    "input_port",
    "output_port",
    "types_compatible",
]

import pytest

from vjgraph.datatypes import DataType
from vjgraph.errors import InvalidPortIndex, PortTypeMismatch
from vjgraph.node_types import (
    NodeCategory,
    NodeTypeDefinition,
    NodeTypeRegistry,
    check_port_compatibility,
    default_registry,
    input_port,
    output_port,
    types_compatible,
)


def test_default_registry_has_builtin_types() -> None:
    registry = default_registry()
    for name in ("oscillator", "shader", "blur", "screen_output", "audio_output", "lfo"):
        assert name in registry
    outputs = registry.by_category(NodeCategory.OUTPUT)
    assert {d.name for d in outputs} >= {"screen_output", "audio_output"}
    assert all(not d.output_ports for d in outputs)


def test_require_unknown_type_raises_key_error() -> None:
    with pytest.raises(KeyError):
        default_registry().require("teleporter")
    assert default_registry().get("teleporter") is None


def test_duplicate_registration_is_rejected() -> None:
    definition = NodeTypeDefinition(name="scope", category=NodeCategory.UTILITY)
    registry = NodeTypeRegistry([definition])
    with pytest.raises(ValueError):
        registry.register(definition)
    assert registry.names() == ("scope",)
    assert len(registry) == 1


def test_port_compatibility() -> None:
    registry = default_registry()
    osc = registry.require("oscillator")
    gain = registry.require("gain")
    blur = registry.require("blur")
    lfo = registry.require("lfo")

    assert check_port_compatibility(osc, 0, gain, 0) is DataType.AUDIO_BUFFER
    assert check_port_compatibility(lfo, 0, blur, 1) is DataType.FLOAT
    with pytest.raises(PortTypeMismatch) as excinfo:
        check_port_compatibility(osc, 0, blur, 0)
    assert excinfo.value.expected is DataType.IMAGE
    assert excinfo.value.actual is DataType.AUDIO_BUFFER


def test_port_index_bounds() -> None:
    registry = default_registry()
    osc = registry.require("oscillator")
    gain = registry.require("gain")
    with pytest.raises(InvalidPortIndex):
        check_port_compatibility(osc, 1, gain, 0)
    with pytest.raises(InvalidPortIndex):
        check_port_compatibility(osc, 0, gain, 5)
    with pytest.raises(InvalidPortIndex):
        check_port_compatibility(osc, -1, gain, 0)


def test_coercions() -> None:
    assert types_compatible(DataType.INTEGER, DataType.FLOAT)
    assert types_compatible(DataType.MASK, DataType.IMAGE)
    assert not types_compatible(DataType.IMAGE, DataType.MASK)
    assert not types_compatible(DataType.STRING, DataType.FLOAT)


def test_custom_definition_ports() -> None:
    definition = NodeTypeDefinition(
        name="depth_estimator",
        category=NodeCategory.ML,
        input_ports=(input_port("image", DataType.IMAGE),),
        output_ports=(output_port("depth", DataType.MASK),),
        default_size=(240.0, 100.0),
    )
    assert definition.input(0).name == "image"
    assert definition.output(0).data_type is DataType.MASK
    assert definition.default_size == (240.0, 100.0)

import json

from vjgraph.cli import main as cli_main
from vjgraph.config import DEFAULT_CONFIG_PATH


def test_cli_prints_summary(capsys) -> None:
    exit_code = cli_main(["--config", str(DEFAULT_CONFIG_PATH)])
    assert exit_code == 0
    out = capsys.readouterr().out
    assert "Evaluation order:" in out
    assert "mic (audio_input)" in out


def test_cli_order_respects_connections(capsys) -> None:
    exit_code = cli_main(["--config", str(DEFAULT_CONFIG_PATH), "--order"])
    assert exit_code == 0
    order = capsys.readouterr().out.split()
    assert order.index("mic") < order.index("analyzer") < order.index("shader")
    assert order.index("blend") < order.index("grade") < order.index("screen")


def test_cli_save_then_load_scene(tmp_path, capsys) -> None:
    scene_path = tmp_path / "scene.json"
    assert cli_main(["--config", str(DEFAULT_CONFIG_PATH), "--save", str(scene_path)]) == 0
    saved = json.loads(scene_path.read_text())
    assert len(saved["nodes"]) == 9
    capsys.readouterr()

    assert cli_main(["--config", str(DEFAULT_CONFIG_PATH), "--scene", str(scene_path), "--order"]) == 0
    assert len(capsys.readouterr().out.split()) == 9


def test_cli_reports_bad_config(tmp_path, capsys) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text('{"engine": {"tie_break": "random"}}')
    assert cli_main(["--config", str(bad)]) == 1
    assert "error:" in capsys.readouterr().out


def test_cli_log_option_writes_events(tmp_path, capsys) -> None:
    from vjgraph import diagnostics

    log_path = tmp_path / "graph.log"
    try:
        assert cli_main(["--config", str(DEFAULT_CONFIG_PATH), "--log", str(log_path)]) == 0
    finally:
        diagnostics.enable_graph_logging(False, diagnostics.DEFAULT_LOG_PATH)
    text = log_path.read_text()
    assert "add_node" in text
    assert "add_connection" in text


def test_cli_reports_non_integer_port(tmp_path, capsys) -> None:
    bad = tmp_path / "ports.json"
    bad.write_text(
        json.dumps(
            {
                "graph": {
                    "nodes": [{"name": "a", "type": "lfo"}, {"name": "b", "type": "noise"}],
                    "connections": [{"source": "a", "target": "b", "source_port": "0"}],
                }
            }
        )
    )
    assert cli_main(["--config", str(bad)]) == 1
    assert "integer" in capsys.readouterr().out


def test_cli_reports_malformed_scene(tmp_path, capsys) -> None:
    scene_path = tmp_path / "scene.json"
    scene_path.write_text(json.dumps({"version": 1, "nodes": [["lfo"]], "connections": []}))
    assert cli_main(["--config", str(DEFAULT_CONFIG_PATH), "--scene", str(scene_path)]) == 1
    assert "error:" in capsys.readouterr().out

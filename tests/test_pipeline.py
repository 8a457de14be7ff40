import json
from pathlib import Path

import numpy as np
import pytest
import yaml

from nnet.core.network import FeedForwardNetwork
from nnet.reporting import CsvSink, JsonlSink, PlotAdapter, load_checkpoint, save_checkpoint
from nnet.training import pipelines


def _config(tmp_path, **train):
    config = pipelines.load_preset("xor-logistic")
    config["train"].update({"run_dir": str(tmp_path / "run"), "epochs": 4})
    config["train"].update(train)
    return config


def test_pipeline_produces_artifacts(tmp_path):
    result = pipelines.run_pipeline(_config(tmp_path))
    assert result.epochs == 4
    assert result.error is not None and np.isfinite(result.error)

    records = [
        json.loads(line)
        for line in Path(result.metrics_path).read_text().splitlines()
        if line
    ]
    assert [r["epoch"] for r in records] == [0, 1, 2, 3]
    assert all("error" in r for r in records)
    assert records[0]["trainer"] == "seq_error"
    assert (tmp_path / "run" / "metrics.csv").exists()

    restored = pipelines.build_network(_config(tmp_path)["model"])
    load_checkpoint(result.checkpoint_path, restored)
    manifest = json.loads((tmp_path / "run" / "manifest.json").read_text())
    assert manifest["epochs"] == 4
    assert manifest["error"] == pytest.approx(result.error)


def test_pipeline_determinism(tmp_path):
    first = pipelines.run_pipeline(_config(tmp_path / "a"))
    second = pipelines.run_pipeline(_config(tmp_path / "b"))
    assert Path(first.metrics_path).read_text() == Path(second.metrics_path).read_text()


@pytest.mark.parametrize("trainer", sorted(pipelines.TRAINERS))
def test_every_trainer_runs_from_config(tmp_path, trainer):
    result = pipelines.run_pipeline(_config(tmp_path, trainer=trainer, threads=2))
    assert result.epochs == 4


def test_pipeline_accepts_inline_arrays(tmp_path):
    config = _config(tmp_path, trainer="batch")
    config["data"] = {"inputs": [[0, 0], [1, 1]], "targets": [0, 1]}
    assert pipelines.run_pipeline(config).epochs == 4


def test_unknown_names_are_rejected(tmp_path):
    with pytest.raises(KeyError):
        pipelines.load_preset("does-not-exist")
    with pytest.raises(KeyError):
        pipelines.run_pipeline(_config(tmp_path, trainer="adam"))
    config = _config(tmp_path)
    config["data"] = {"name": "parity"}
    with pytest.raises(KeyError):
        pipelines.run_pipeline(config)


def test_presets_are_copies():
    preset = pipelines.load_preset("xor-tanh")
    preset["train"]["epochs"] = 1
    assert pipelines.load_preset("xor-tanh")["train"]["epochs"] != 1


def test_load_config_json_and_yaml(tmp_path):
    json_path = tmp_path / "cfg.json"
    json_path.write_text(json.dumps({"train": {"epochs": 3}}))
    assert pipelines.load_config(json_path) == {"train": {"epochs": 3}}

    yaml_path = tmp_path / "cfg.yaml"
    yaml_path.write_text(yaml.safe_dump({"train": {"epochs": 7}}))
    assert pipelines.load_config(yaml_path)["train"]["epochs"] == 7

    with pytest.raises(ValueError):
        pipelines.load_config(tmp_path / "cfg.toml")


def test_load_config_checks_suffix_before_reading(tmp_path):
    toml_path = tmp_path / "cfg.toml"
    toml_path.write_text("[train]\nepochs = 3\n")
    with pytest.raises(ValueError):
        pipelines.load_config(toml_path)
    with pytest.raises(ValueError):
        pipelines.load_config(tmp_path / "missing.ini")
    with pytest.raises(FileNotFoundError):
        pipelines.load_config(tmp_path / "missing.json")


def test_checkpoint_rejects_mismatched_network(tmp_path):
    path = save_checkpoint(tmp_path / "net.ckpt", FeedForwardNetwork(2, 3, 1, seed=0))
    with pytest.raises(ValueError):
        load_checkpoint(path, FeedForwardNetwork(2, 4, 1))


def test_sinks_write_one_row_per_epoch(tmp_path):
    jsonl = JsonlSink(tmp_path / "m.jsonl", trainer="seq_error", seed=1)
    csv_sink = CsvSink(tmp_path / "m.csv")
    for epoch in range(3):
        jsonl.on_epoch(epoch, {"error": 0.5 / (epoch + 1)})
        csv_sink(epoch, {"error": 0.5 / (epoch + 1)})
    assert len((tmp_path / "m.jsonl").read_text().splitlines()) == 3
    assert len((tmp_path / "m.csv").read_text().splitlines()) == 4


def test_plot_adapter_records_errors_and_writes_curve(tmp_path):
    adapter = PlotAdapter(tmp_path / "plots", enable_plots=True, target_error=0.1)
    adapter.on_epoch(0, {"error": 1.0})
    adapter.on_epoch(1, {})
    adapter(2, {"error": 0.5})
    assert adapter.history == [(0, 1.0), (2, 0.5)]
    assert adapter.close() == tmp_path / "plots" / "error.png"
    assert (tmp_path / "plots" / "error.png").exists()


def test_plot_adapter_disabled_or_empty_writes_nothing(tmp_path):
    disabled = PlotAdapter(tmp_path, enable_plots=False)
    disabled.on_epoch(0, {"error": 1.0})
    assert disabled.history == []
    assert disabled.close() is None

    empty = PlotAdapter(tmp_path, enable_plots=True)
    empty.on_epoch(0, {})
    assert empty.close() is None
    assert not (tmp_path / "error.png").exists()


def test_pipeline_writes_error_plot_when_enabled(tmp_path):
    result = pipelines.run_pipeline(_config(tmp_path, enable_plots=True))
    assert (Path(result.metrics_path).parent / "error.png").exists()

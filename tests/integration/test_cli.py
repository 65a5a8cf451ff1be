import json
from pathlib import Path

import pytest

from cli.main import main


def test_cli_smoke_preset(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(["--preset", "color-smoke", "--steps", "5", "--color", "0,0,255"])
    run_dir = Path("runs/color-smoke")
    assert (run_dir / "metrics.jsonl").exists()
    assert (run_dir / "manifest.json").exists()

    out = capsys.readouterr().out.strip().splitlines()
    assert "step 5 cost" in "\n".join(out)
    payload = json.loads(out[-1])
    assert payload["steps"] == 5
    assert payload["final_cost"] is not None

    swatches = json.loads((run_dir / "swatches.json").read_text())
    assert [row["original"] for row in swatches["rows"]] == ["rgb(0,0,255)"]
    assert swatches["rows"][0]["complement"] == "rgb(255,255,0)"


def test_cli_overrides_and_dump(tmp_path):
    dump = tmp_path / "resolved.json"
    run_dir = tmp_path / "run"
    main(
        [
            "--preset", "color-smoke",
            "--steps", "2",
            "--samples", "100",
            "--seed", "4",
            "--lr", "0.05",
            "--run-dir", str(run_dir),
            "--dump-config", str(dump),
        ]
    )
    config = json.loads(dump.read_text())
    assert config["train"]["steps"] == 2
    assert config["train"]["seed"] == 4
    assert config["data"]["options"] == {"count": 100, "seed": 4}
    assert (run_dir / "summary.json").exists()


def test_cli_list_presets(capsys):
    with pytest.raises(SystemExit) as excinfo:
        main(["--list-presets"])
    assert excinfo.value.code == 0
    assert "color-demo" in capsys.readouterr().out.split()


def test_cli_rejects_bad_color(tmp_path):
    with pytest.raises(ValueError):
        main(["--preset", "color-smoke", "--run-dir", str(tmp_path), "--color", "1,2"])

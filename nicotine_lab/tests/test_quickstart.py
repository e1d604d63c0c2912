from __future__ import annotations

import json

import pytest

from nicotine_lab import quickstart


def test_run_quickstart_returns_payload():
    payload = quickstart.run_quickstart("repeated", minutes=30, seed=5)

    assert payload["preset"] == "repeated"
    assert payload["sim_min"] == pytest.approx(30.0)
    assert payload["trace"]["points"] == 30
    assert set(payload["dominant_states"]) == {"da", "gaba"}
    assert payload["sampled_puffs"] == len(payload["trace"]["puff_times"])
    summary = quickstart.summarise_quickstart(payload)
    assert "Preset repeated" in summary
    assert "Dopamine" in summary
    assert "α4β2 pools" in summary


def test_run_quickstart_is_reproducible_for_a_seed():
    first = quickstart.run_quickstart("repeated", minutes=45, seed=3)
    second = quickstart.run_quickstart("repeated", minutes=45, seed=3)

    assert first == second


def test_run_quickstart_manual_puffs_and_fast_forward():
    payload = quickstart.run_quickstart(minutes=0, puffs=2, advance=2)

    assert payload["sim_min"] == 120.0
    assert payload["trace"]["points"] == 120
    assert payload["sampled_puffs"] == 0
    assert payload["state"]["nicotine"] < 0.5


def test_run_quickstart_abstinence_reports_recovery_clock():
    payload = quickstart.run_quickstart("abstinence", minutes=2)

    clock = payload["recovery"]["da"]
    assert clock is not None
    assert clock["elapsed_min"] == pytest.approx(2.0)
    assert "recovery window" in quickstart.summarise_quickstart(payload)


def test_run_quickstart_handles_partial_frames():
    payload = quickstart.run_quickstart(minutes=2.5, dt_min=1.0)

    assert payload["trace"]["points"] == 3
    assert payload["sim_min"] == pytest.approx(2.5)


@pytest.mark.parametrize(
    "kwargs",
    [
        {"preset": "weekly"},
        {"minutes": -1},
        {"dt_min": 0},
        {"puffs": -2},
        {"params": {"desensWindowMin": 0}},
        {"params": {"unknown": 1.0}},
    ],
)
def test_run_quickstart_invalid_inputs(kwargs):
    with pytest.raises(quickstart.QuickstartError):
        quickstart.run_quickstart(**kwargs)


def test_param_override_parsing():
    assert quickstart._parse_param_override(["desensWindowMin=30", " actThreshold = 0.2"]) == {
        "desensWindowMin": 30.0,
        "actThreshold": 0.2,
    }
    with pytest.raises(quickstart.QuickstartError):
        quickstart._parse_param_override(["desensWindowMin"])


def test_main_prints_json(capsys):
    exit_code = quickstart.main(["--preset", "single-puff", "--puff", "1", "--minutes", "5", "--json"])

    assert exit_code == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["preset"] == "single-puff"
    assert payload["trace"]["points"] == 5


def test_main_lists_presets(capsys):
    assert quickstart.main(["--list-presets"]) == 0
    output = capsys.readouterr().out
    assert "single-puff" in output
    assert "abstinence" in output

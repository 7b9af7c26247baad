"""Tests for the dpcheck command line."""

import pytest

from dpcheck import runner
from dpcheck.core.exceptions import ConfigException


def test_list_prints_bundled_scenarios(capsys):
    assert runner.main(["--list"]) == 0

    out = capsys.readouterr().out.split()
    assert "identify_webhook" in out
    assert "send_only" in out


def test_no_scenarios_is_an_error(capsys):
    assert runner.main([]) == 1
    assert "No scenarios specified" in capsys.readouterr().out


def test_unknown_scenario_is_an_error(capsys, tmp_path):
    assert runner.main(["does_not_exist", "--env-file", str(tmp_path / ".env")]) == 1
    assert "Scenario not found: does_not_exist" in capsys.readouterr().out


def test_resolve_scenario(tmp_path):
    custom = tmp_path / "smoke.yaml"
    custom.write_text("steps: [login]\n")

    assert runner.resolve_scenario(str(custom)) == custom
    assert runner.resolve_scenario("send_only") == runner.CONFIG_DIR / "send_only.yaml"
    with pytest.raises(ConfigException):
        runner.resolve_scenario("missing")


def test_parser_defaults():
    args = runner.build_parser().parse_args(["identify_webhook"])

    assert args.scenarios == ["identify_webhook"]
    assert args.env is None
    assert args.headed is False
    assert args.run_id_prefix == "dpcheck-"

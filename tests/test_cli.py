"""Tests for the econloss command line interface."""

import json

import pytest
from click.testing import CliRunner

from econloss.cli import cli
from econloss.importers import case_inputs_to_record


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path, runner):
    path = tmp_path / "case.json"
    result = runner.invoke(cli, [
        "create", "-n", "Jane Doe", "--dob", "1985-01-15", "--injury", "2020-03-10",
        "--trial", "2024-06-15", "-o", str(path),
    ])
    assert result.exit_code == 0, result.output
    return path


def test_create_writes_valid_config(config_file):
    data = json.loads(config_file.read_text())
    assert data["case_info"]["plaintiff"] == "Jane Doe"
    assert len(data["lcp_items"]) == 4


def test_create_rejects_bad_date(runner, tmp_path):
    result = runner.invoke(cli, [
        "create", "-n", "Jane Doe", "--dob", "someday", "--injury", "2020-03-10",
        "--trial", "2024-06-15", "-o", str(tmp_path / "case.json"),
    ])
    assert result.exit_code == 1
    assert "Invalid date of birth" in result.output


def test_validate(runner, config_file):
    result = runner.invoke(cli, ["validate", str(config_file)])
    assert result.exit_code == 0
    assert "Configuration is valid" in result.output
    assert "Life care items: 4" in result.output


def test_validate_rejects_negative_cost(runner, tmp_path):
    path = tmp_path / "bad.json"
    path.write_text(json.dumps({"lcp_items": [{"id": 1, "base_cost": -5}]}))
    result = runner.invoke(cli, ["validate", str(path)])
    assert result.exit_code == 1
    assert "validation failed" in result.output


def test_calculate(runner, config_file):
    result = runner.invoke(cli, ["calculate", str(config_file), "--show-summary", "--schedules",
                                 "--scenarios", "--retirement-scenarios", "--as-of", "2024-06-15"])
    assert result.exit_code == 0, result.output
    assert "Grand Total:" in result.output
    assert "Future Loss Schedule" in result.output
    assert "Conservative" in result.output
    assert "Age 70" in result.output
    assert "Reconciliation failed" not in result.output


def test_calculate_union_mode(runner, tmp_path, sample_inputs):
    path = tmp_path / "union.json"
    record = case_inputs_to_record(sample_inputs)
    path.write_text(json.dumps(record))

    plain = runner.invoke(cli, ["calculate", str(path), "--as-of", "2024-01-01"])
    union = runner.invoke(cli, ["calculate", str(path), "--union", "--as-of", "2024-01-01"])
    assert plain.exit_code == 0, plain.output
    assert union.exit_code == 0, union.output
    assert plain.output != union.output


def test_import_list_export_delete(runner, tmp_path, sample_inputs):
    db_path = str(tmp_path / "cases.db")
    source = tmp_path / "intake.json"
    source.write_text(json.dumps(case_inputs_to_record(sample_inputs)))

    result = runner.invoke(cli, ["import", str(source), "--name", "Smith", "--db", db_path])
    assert result.exit_code == 0, result.output

    result = runner.invoke(cli, ["list", "--db", db_path])
    assert "Smith (John Smith)" in result.output

    exported = tmp_path / "smith.json"
    result = runner.invoke(cli, ["export", "Smith", "-o", str(exported), "--db", db_path])
    assert result.exit_code == 0, result.output
    assert json.loads(exported.read_text())["name"] == "Smith"
    assert runner.invoke(cli, ["validate", str(exported)]).exit_code == 0

    result = runner.invoke(cli, ["delete", "Smith", "--db", db_path])
    assert result.exit_code == 0
    assert runner.invoke(cli, ["delete", "Smith", "--db", db_path]).exit_code == 1


def test_db_path_from_environment(runner, tmp_path, sample_inputs):
    db_path = str(tmp_path / "env.db")
    source = tmp_path / "intake.json"
    source.write_text(json.dumps(case_inputs_to_record(sample_inputs)))

    runner.invoke(cli, ["import", str(source)], env={"ECONLOSS_DB": db_path})
    result = runner.invoke(cli, ["list"], env={"ECONLOSS_DB": db_path})
    assert "John Smith" in result.output


def test_export_missing_case(runner, tmp_path):
    result = runner.invoke(cli, ["export", "nobody", "--db", str(tmp_path / "cases.db")])
    assert result.exit_code == 1
    assert "Case not found" in result.output


def test_examples(runner):
    result = runner.invoke(cli, ["examples"])
    assert result.exit_code == 0
    assert "econloss calculate" in result.output

"""Tests for CLI commands."""

import json
from datetime import date, timedelta

import pytest
import yaml
from click.testing import CliRunner

from beanreminder.cli import main


@pytest.fixture
def cli_runner():
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def reminders_yaml_file(tmp_path):
    """Create a temporary reminders.yaml file."""
    reminders_data = {
        "version": "1.0",
        "config": {"default_currency": "USD", "default_flag": "!"},
        "reminders": [
            {
                "id": "rent",
                "description": "Monthly rent",
                "rule": {"kind": "MONTHLY", "start_date": "2024-01-01"},
                "transaction": {
                    "payee": "Landlord",
                    "narration": "Rent",
                    "postings": [
                        {"account": "Expenses:Housing:Rent", "amount": "1500.00"},
                        {"account": "Assets:Bank:Checking"},
                    ],
                },
            },
            {
                "id": "paycheck",
                "description": "Biweekly paycheck",
                "rule": {"kind": "WEEKLY", "start_date": "2024-01-05", "increment": 2},
            },
            {
                "id": "insurance",
                "description": "Car insurance",
                "rule": {"kind": "YEARLY", "start_date": "2024-03-10", "enabled": False},
            },
        ],
    }

    path = tmp_path / "reminders.yaml"
    with open(path, "w") as f:
        yaml.dump(reminders_data, f)
    return path


@pytest.fixture
def reminders_directory(tmp_path):
    """Create a temporary reminders directory with YAML files."""
    reminders_dir = tmp_path / "reminders"
    reminders_dir.mkdir()

    with open(reminders_dir / "_config.yaml", "w") as f:
        yaml.dump({"default_currency": "EUR"}, f)

    water = {
        "id": "water",
        "description": "Water bill",
        "rule": {"kind": "MONTHLY_LAST_DAY", "start_date": "2024-01-31"},
        "transaction": {
            "payee": "City Water",
            "postings": [
                {"account": "Expenses:Utilities:Water", "amount": "45.00"},
                {"account": "Assets:Bank:Checking"},
            ],
        },
    }
    with open(reminders_dir / "water.yaml", "w") as f:
        yaml.dump(water, f)

    return reminders_dir


class TestValidateCommand:
    """Tests for the validate command."""

    def test_validate_file(self, cli_runner, reminders_yaml_file):
        result = cli_runner.invoke(main, ["validate", str(reminders_yaml_file)])
        assert result.exit_code == 0
        assert "Validation successful" in result.output
        assert "Total reminders: 3" in result.output
        assert "Enabled: 2" in result.output
        assert "Disabled: 1" in result.output

    def test_validate_directory(self, cli_runner, reminders_directory):
        result = cli_runner.invoke(main, ["validate", str(reminders_directory)])
        assert result.exit_code == 0
        assert "Total reminders: 1" in result.output

    def test_validate_invalid_file(self, cli_runner, tmp_path):
        path = tmp_path / "bad.yaml"
        with open(path, "w") as f:
            yaml.dump(
                {"reminders": [{"id": "x", "rule": {"kind": "DAILY", "start_date": "2024-01-01", "increment": 0}}]},
                f,
            )
        result = cli_runner.invoke(main, ["validate", str(path)])
        assert result.exit_code == 1
        assert "Validation failed" in result.output

    def test_validate_missing_path(self, cli_runner, tmp_path):
        result = cli_runner.invoke(main, ["validate", str(tmp_path / "nope.yaml")])
        assert result.exit_code != 0


class TestListCommand:
    """Tests for the list command."""

    def test_list_table(self, cli_runner, reminders_yaml_file):
        result = cli_runner.invoke(main, ["list", str(reminders_yaml_file)])
        assert result.exit_code == 0
        assert "rent" in result.output
        assert "paycheck" in result.output
        assert "Total: 3 reminders" in result.output

    def test_list_enabled_only(self, cli_runner, reminders_yaml_file):
        result = cli_runner.invoke(main, ["list", str(reminders_yaml_file), "--enabled-only"])
        assert result.exit_code == 0
        assert "insurance" not in result.output
        assert "Total: 2 reminders" in result.output

    def test_list_json(self, cli_runner, reminders_yaml_file):
        result = cli_runner.invoke(main, ["list", str(reminders_yaml_file), "--format", "json"])
        assert result.exit_code == 0
        payload = json.loads(result.output[result.output.index("["):])
        by_id = {item["id"]: item for item in payload}
        assert by_id["rent"]["next_occurrence"] == "2024-01-01"
        assert by_id["insurance"]["next_occurrence"] is None

    def test_list_csv(self, cli_runner, reminders_yaml_file):
        result = cli_runner.invoke(main, ["list", str(reminders_yaml_file), "--format", "csv"])
        assert result.exit_code == 0
        lines = [
            line for line in result.output.strip().splitlines() if not line.startswith("INFO:")
        ]
        assert lines[0].startswith("ID,Enabled,Kind")
        assert len(lines) == 4


class TestNextCommand:
    """Tests for the next command."""

    def test_next_occurrences(self, cli_runner, reminders_yaml_file):
        result = cli_runner.invoke(
            main,
            ["next", "paycheck", "--count", "3", "--reminders-path", str(reminders_yaml_file)],
        )
        assert result.exit_code == 0
        assert "Next occurrences (3)" in result.output
        assert "2024-01-05" in result.output
        assert "2024-01-19" in result.output
        assert "2024-02-02" in result.output

    def test_next_disabled(self, cli_runner, reminders_yaml_file):
        result = cli_runner.invoke(
            main, ["next", "insurance", "--reminders-path", str(reminders_yaml_file)]
        )
        assert result.exit_code == 0
        assert "No upcoming occurrences" in result.output

    def test_next_unknown_reminder(self, cli_runner, reminders_yaml_file):
        result = cli_runner.invoke(
            main, ["next", "missing", "--reminders-path", str(reminders_yaml_file)]
        )
        assert result.exit_code == 1
        assert "not found" in result.output


class TestGenerateCommand:
    """Tests for the generate command."""

    def test_generate_until_horizon(self, cli_runner, reminders_directory):
        result = cli_runner.invoke(
            main,
            ["generate", "water", "2024-05-31", "--reminders-path", str(reminders_directory)],
        )
        assert result.exit_code == 0
        assert "Occurrences (4)" in result.output
        assert "2024-02-29" in result.output
        assert "2024-04-30" in result.output
        assert "2024-05-31" not in result.output.split("Occurrences")[1]

    def test_generate_defaults_to_configured_horizon(self, cli_runner, reminders_directory):
        with open(reminders_directory / "_config.yaml", "w") as f:
            yaml.dump({"default_currency": "EUR", "horizon_days": 30}, f)

        result = cli_runner.invoke(
            main, ["generate", "water", "--reminders-path", str(reminders_directory)]
        )

        assert result.exit_code == 0
        assert f"Until: {date.today() + timedelta(days=30)}" in result.output


class TestDueCommand:
    """Tests for the due command."""

    def test_due(self, cli_runner, reminders_yaml_file):
        result = cli_runner.invoke(
            main, ["due", str(reminders_yaml_file), "--as-of", "2024-01-05"]
        )
        assert result.exit_code == 0
        assert "rent" in result.output
        assert "OVERDUE" in result.output
        assert "paycheck" in result.output
        assert "insurance" not in result.output

    def test_nothing_due(self, cli_runner, reminders_yaml_file):
        result = cli_runner.invoke(
            main, ["due", str(reminders_yaml_file), "--as-of", "2023-12-01"]
        )
        assert result.exit_code == 0
        assert "Nothing due as of 2023-12-01" in result.output


class TestRunCommand:
    """Tests for the run command."""

    def test_dry_run_prints_transactions(self, cli_runner, reminders_yaml_file):
        result = cli_runner.invoke(
            main, ["run", str(reminders_yaml_file), "--as-of", "2024-02-10", "--dry-run"]
        )
        assert result.exit_code == 0
        assert '2024-01-01 ! "Landlord" "Rent"' in result.output
        assert '2024-02-01 ! "Landlord" "Rent"' in result.output
        assert "Expenses:Housing:Rent" in result.output

        saved = yaml.safe_load(reminders_yaml_file.read_text())
        assert "last_date" not in saved["reminders"][0]["rule"]

    def test_run_records_last_date(self, cli_runner, reminders_yaml_file):
        result = cli_runner.invoke(
            main, ["run", str(reminders_yaml_file), "--as-of", "2024-02-10"]
        )
        assert result.exit_code == 0

        saved = yaml.safe_load(reminders_yaml_file.read_text())
        by_id = {r["id"]: r for r in saved["reminders"]}
        assert by_id["rent"]["rule"]["last_date"] == "2024-02-01"
        assert "last_date" not in by_id["paycheck"]["rule"]

        again = cli_runner.invoke(
            main, ["run", str(reminders_yaml_file), "--as-of", "2024-02-10"]
        )
        assert again.exit_code == 0
        assert "Nothing to create" in again.output

    def test_run_appends_to_output_file(self, cli_runner, reminders_directory, tmp_path):
        ledger = tmp_path / "upcoming.beancount"
        ledger.write_text(";; generated\n")

        result = cli_runner.invoke(
            main,
            ["run", str(reminders_directory), "--as-of", "2024-02-29", "-o", str(ledger)],
        )

        assert result.exit_code == 0
        text = ledger.read_text()
        assert text.startswith(";; generated\n")
        assert "2024-01-31" in text
        assert "2024-02-29" in text
        assert "EUR" in text

        saved = yaml.safe_load((reminders_directory / "water.yaml").read_text())
        assert saved["rule"]["last_date"] == "2024-02-29"

    def test_failed_save_leaves_ledger_untouched(
        self, cli_runner, reminders_directory, tmp_path, monkeypatch
    ):
        ledger = tmp_path / "upcoming.beancount"
        ledger.write_text(";; generated\n")

        def fail_save(*_args, **_kwargs):
            raise OSError("disk full")

        monkeypatch.setattr("beanreminder.cli.save_reminders_to_path", fail_save)

        result = cli_runner.invoke(
            main,
            ["run", str(reminders_directory), "--as-of", "2024-02-29", "-o", str(ledger)],
        )

        assert result.exit_code == 1
        assert "Could not record last dates" in result.output
        assert "No transactions were written" in result.output
        assert ledger.read_text() == ";; generated\n"
        saved = yaml.safe_load((reminders_directory / "water.yaml").read_text())
        assert "last_date" not in saved["rule"]

    def test_dry_run_to_output_file_records_nothing(self, cli_runner, reminders_directory, tmp_path):
        ledger = tmp_path / "upcoming.beancount"

        result = cli_runner.invoke(
            main,
            [
                "run",
                str(reminders_directory),
                "--as-of",
                "2024-02-29",
                "-o",
                str(ledger),
                "--dry-run",
            ],
        )

        assert result.exit_code == 0
        assert "2024-02-29" in ledger.read_text()
        saved = yaml.safe_load((reminders_directory / "water.yaml").read_text())
        assert "last_date" not in saved["rule"]


class TestInitCommand:
    """Tests for the init command."""

    def test_init_creates_directory(self, cli_runner, tmp_path):
        target = tmp_path / "my-reminders"
        result = cli_runner.invoke(main, ["init", str(target)])
        assert result.exit_code == 0
        assert (target / "_config.yaml").is_file()
        assert (target / "example-rent.yaml").is_file()

        validate = cli_runner.invoke(main, ["validate", str(target)])
        assert validate.exit_code == 0
        assert "Total reminders: 1" in validate.output

    def test_init_refuses_existing(self, cli_runner, tmp_path):
        result = cli_runner.invoke(main, ["init", str(tmp_path)])
        assert result.exit_code == 1

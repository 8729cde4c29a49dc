"""Tests for input schemas and the command line."""

import json
from decimal import Decimal
from pathlib import Path

import pytest

from piece_payroll.calculators.types import EmployeeType, EntryStatus
from piece_payroll.cli import PayrollCli
from piece_payroll.exceptions import PayrollInputError
from piece_payroll.schemas import PayrollInput, load_payroll_input

PERIOD_ARGS = ["--period-start", "2026-01-26", "--period-end", "2026-02-01"]

SAMPLE_WEEK = Path(__file__).resolve().parent.parent / "examples" / "sample_week.json"

DOCUMENT = {
    "workers": [
        {
            "id": "worker-1",
            "full_name": "John Silva",
            "employee_type": "W2",
            "base_hourly_rate": 18.0,
            "ot_multiplier": 1.5,
            "min_hourly_guarantee": True,
            "piece_rate_enabled": True,
            "crew": "Crew A",
            "hire_date": "2024-01-01",
        },
        {
            "id": "worker-2",
            "full_name": "Carlos Mendes",
            "employee_type": "1099",
            "base_hourly_rate": 18,
            "active": False,
        },
    ],
    "time_entries": [
        {
            "id": "t1",
            "worker_id": "worker-1",
            "entry_date": "2026-01-27",
            "total_hours": 48,
            "status": "approved",
        },
        {
            "id": "t2",
            "worker_id": "worker-1",
            "entry_date": "2026-01-28",
            "total_hours": 8,
            "status": "pending",
        },
    ],
    "production_entries": [
        {
            "id": "p1",
            "worker_id": "worker-1",
            "entry_date": "2026-01-27",
            "pay_item_id": "pay-item-1",
            "quantity": 1000,
            "status": "locked",
        }
    ],
    "pay_items": [
        {"id": "pay-item-1", "item_code": "HDD_FT", "description": "HDD", "unit": "FT"}
    ],
    "rates": [
        {
            "id": "rate-1",
            "pay_item_id": "pay-item-1",
            "rate_amount": 0.85,
            "effective_from": "2026-01-01",
            "effective_to": None,
        }
    ],
}


@pytest.fixture
def input_file(tmp_path):
    path = tmp_path / "payroll.json"
    path.write_text(json.dumps(DOCUMENT))
    return path


class TestSchemas:
    def test_load_payroll_input(self, input_file):
        document = load_payroll_input(input_file)

        workers = document.workers_domain()
        assert workers[0].employee_type == EmployeeType.W2
        assert workers[0].base_hourly_rate == Decimal("18.0")
        assert workers[1].employee_type == EmployeeType.CONTRACTOR_1099
        assert workers[1].ot_multiplier == Decimal("1.0")

        rates = document.rates_domain()
        assert rates[0].rate_amount == Decimal("0.85")
        assert document.time_entries_domain()[1].status == EntryStatus.PENDING

    def test_rejects_bad_date(self):
        bad = {"time_entries": [{**DOCUMENT["time_entries"][0], "entry_date": "01/27/2026"}]}

        with pytest.raises(ValueError):
            PayrollInput.model_validate(bad)

    def test_rejects_multiplier_below_one(self, tmp_path):
        bad = {"workers": [{**DOCUMENT["workers"][0], "ot_multiplier": 0.5}]}
        path = tmp_path / "bad.json"
        path.write_text(json.dumps(bad))

        with pytest.raises(PayrollInputError, match="failed validation"):
            load_payroll_input(path)

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{not json")

        with pytest.raises(PayrollInputError, match="not valid JSON"):
            load_payroll_input(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(PayrollInputError, match="Cannot read input file"):
            load_payroll_input(tmp_path / "missing.json")


class TestPayrollCli:
    def test_no_command_prints_help(self):
        assert PayrollCli().run([]) == 1

    def test_calculate(self, input_file, capsys):
        exit_code = PayrollCli().run(["calculate", str(input_file), *PERIOD_ARGS])

        assert exit_code == 0
        results = json.loads(capsys.readouterr().out)
        assert len(results) == 1
        assert results[0]["worker_id"] == "worker-1"
        assert results[0]["total_hours"] == "48.00"
        assert results[0]["total_pay"] == "922.00"
        assert results[0]["payment_method"] == "Piece Rate + OT"

    def test_calculate_strict_reports_skips(self, tmp_path, capsys):
        document = {**DOCUMENT, "rates": []}
        path = tmp_path / "no_rates.json"
        path.write_text(json.dumps(document))

        exit_code = PayrollCli().run(["calculate", str(path), *PERIOD_ARGS, "--strict"])

        assert exit_code == 0
        results = json.loads(capsys.readouterr().out)
        assert len(results[0]["diagnostics"]) == 1

    def test_summary(self, input_file, capsys):
        assert PayrollCli().run(["summary", str(input_file), *PERIOD_ARGS]) == 0

        summary = json.loads(capsys.readouterr().out)
        assert summary["total_workers"] == 1
        assert summary["total_payroll"] == "922.00"

    def test_validate_mismatch(self, input_file, capsys):
        exit_code = PayrollCli().run(
            ["validate", str(input_file), *PERIOD_ARGS, "--expected-total", "900"]
        )

        assert exit_code == 1
        report = json.loads(capsys.readouterr().out)
        assert report["valid"] is False
        assert report["errors"][0].startswith("Total mismatch")

    def test_validate_ok(self, input_file, capsys):
        exit_code = PayrollCli().run(
            ["validate", str(input_file), *PERIOD_ARGS, "--expected-total", "922.00"]
        )

        assert exit_code == 0

    def test_bad_input_file(self, tmp_path, capsys):
        exit_code = PayrollCli().run(["calculate", str(tmp_path / "nope.json"), *PERIOD_ARGS])

        assert exit_code == 1
        assert "ERROR" in capsys.readouterr().err

    def test_bad_period_date(self, input_file):
        with pytest.raises(SystemExit):
            PayrollCli().run(
                ["calculate", str(input_file), "--period-start", "2026/01/26", "--period-end", "x"]
            )

    def test_actions(self, capsys):
        assert PayrollCli().run(["actions", "--status", "pending", "--role", "manager"]) == 0

        actions = json.loads(capsys.readouterr().out)
        assert [a["action"] for a in actions] == ["approved", "rejected"]
        assert actions[1]["requires_comments"] is True

    def test_transition_refused(self, capsys):
        exit_code = PayrollCli().run(
            ["transition", "--from", "pending", "--to", "rejected", "--role", "owner"]
        )

        assert exit_code == 1
        verdict = json.loads(capsys.readouterr().out)
        assert verdict["error_kind"] == "comment_required"

    def test_transition_lock(self, capsys):
        exit_code = PayrollCli().run(
            [
                "transition",
                "--from",
                "approved",
                "--to",
                "locked",
                "--role",
                "owner",
                "--entry-count",
                "4",
            ]
        )

        assert exit_code == 0
        verdict = json.loads(capsys.readouterr().out)
        assert verdict["warnings"] == ["Locking 4 entries. These entries will become read-only."]


class TestSampleWeek:
    """The shipped sample document reproduces the spreadsheet week for John Silva."""

    def test_spreadsheet_totals(self, capsys):
        exit_code = PayrollCli().run(["calculate", str(SAMPLE_WEEK), *PERIOD_ARGS])

        assert exit_code == 0
        results = json.loads(capsys.readouterr().out)
        assert len(results) == 1
        result = results[0]
        assert result["worker_name"] == "John Silva"
        assert result["total_hours"] == "48.00"
        assert result["regular_hours"] == "40.00"
        assert result["ot_hours"] == "8.00"
        assert result["piece_earnings"] == "2195.00"
        assert result["ot_premium"] == "72.00"
        assert result["min_guarantee_applied"] == "0.00"
        assert result["total_pay"] == "2267.00"
        assert result["payment_method"] == "Piece Rate + OT"

    def test_validates_against_spreadsheet_total(self, capsys):
        exit_code = PayrollCli().run(
            ["validate", str(SAMPLE_WEEK), *PERIOD_ARGS, "--expected-total", "2267.00"]
        )

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == {"valid": True, "errors": []}

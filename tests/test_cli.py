"""
CLI integration tests

Runs every SupplierIQ command against a throwaway SQLite database using
Typer's CliRunner.
"""

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from supplieriq.cli.main import app


@pytest.fixture
def runner():
    """Typer CLI test runner"""
    return CliRunner()


@pytest.fixture
def seeded_db(runner, tmp_path) -> Path:
    """Initialized database holding the demo data set"""
    db_path = tmp_path / "cli.db"
    assert runner.invoke(app, ["init", "--db", str(db_path)]).exit_code == 0
    assert runner.invoke(app, ["seed", "--db", str(db_path)]).exit_code == 0
    return db_path


def create_request(runner, db_path: Path, **overrides: str):
    options = {
        "--category": "metals",
        "--description": "Aluminum casings",
        "--quantity": "5000",
        "--budget": "15000",
        "--region": "DE",
    }
    options.update(overrides)
    args = ["request", "create", "--db", str(db_path)]
    for flag, value in options.items():
        args.extend([flag, value])
    return runner.invoke(app, args)


def created_request_id(output: str) -> str:
    for line in output.splitlines():
        if line.startswith("✓ Created request:"):
            return line.split(":", 1)[1].strip()
    raise AssertionError(f"No request ID in output:\n{output}")


# =============================================================================
# Initialization Tests
# =============================================================================


def test_init_creates_database(runner, tmp_path):
    """Test init command creates database"""
    db_path = tmp_path / "test.db"

    result = runner.invoke(app, ["init", "--db", str(db_path)])

    assert result.exit_code == 0
    assert db_path.exists()
    assert "initialized" in result.stdout.lower()


def test_init_with_existing_database(runner, tmp_path):
    """Test init command refuses to overwrite a database"""
    db_path = tmp_path / "test.db"
    runner.invoke(app, ["init", "--db", str(db_path)])

    result = runner.invoke(app, ["init", "--db", str(db_path)])

    assert result.exit_code == 1


def test_commands_require_existing_database(runner, tmp_path):
    """Test commands fail cleanly without a database"""
    missing = tmp_path / "missing.db"

    result = runner.invoke(app, ["suppliers", "list", "--db", str(missing)])

    assert result.exit_code == 1
    assert not missing.exists()


def test_seed_reports_counts(runner, tmp_path):
    db_path = tmp_path / "seed.db"
    runner.invoke(app, ["init", "--db", str(db_path)])

    result = runner.invoke(app, ["seed", "--db", str(db_path)])

    assert result.exit_code == 0
    assert "Suppliers: 8" in result.stdout
    assert "Orders: 14" in result.stdout


# =============================================================================
# Request and Suggestion Tests
# =============================================================================


def test_request_create_generates_suggestions(runner, seeded_db):
    result = create_request(runner, seeded_db)

    assert result.exit_code == 0
    assert "Status: completed" in result.stdout
    assert "Suggestions: 4" in result.stdout


def test_suggestions_list_text(runner, seeded_db):
    request_id = created_request_id(create_request(runner, seeded_db).stdout)

    result = runner.invoke(
        app, ["suggestions", "list", "--request-id", request_id, "--db", str(seeded_db)]
    )

    assert result.exit_code == 0
    lines = [line.strip() for line in result.stdout.splitlines() if line.strip().startswith("#")]
    assert lines[0].startswith("#1 SteelPro Industries (match 0.85")
    assert lines[1].startswith("#2 MetalWorks GmbH")
    assert len(lines) == 4


def test_suggestions_list_json(runner, seeded_db):
    request_id = created_request_id(create_request(runner, seeded_db).stdout)

    result = runner.invoke(
        app,
        ["suggestions", "list", "--request-id", request_id, "--json", "--db", str(seeded_db)],
    )

    assert result.exit_code == 0
    suggestions = json.loads(result.stdout)
    assert [s["rank"] for s in suggestions] == [1, 2, 3, 4]
    assert all(s["request_id"] == request_id for s in suggestions)
    assert suggestions[0]["supplier"]["name"] == "SteelPro Industries"
    assert suggestions[0]["supplier"]["region"] == "DE"


def test_suggestions_list_for_unmatched_category(runner, seeded_db):
    request_id = created_request_id(
        create_request(runner, seeded_db, **{"--category": "textiles"}).stdout
    )

    result = runner.invoke(
        app, ["suggestions", "list", "--request-id", request_id, "--db", str(seeded_db)]
    )

    assert result.exit_code == 0
    assert f"No suggestions for request {request_id}" in result.stdout


@pytest.mark.parametrize(
    "overrides",
    [{"--quantity": "0"}, {"--budget": "lots"}, {"--category": " "}],
)
def test_request_create_rejects_invalid_input(runner, seeded_db, overrides):
    result = create_request(runner, seeded_db, **overrides)

    assert result.exit_code == 1


def test_request_show(runner, seeded_db):
    request_id = created_request_id(create_request(runner, seeded_db).stdout)

    result = runner.invoke(
        app, ["request", "show", "--request-id", request_id, "--db", str(seeded_db)]
    )

    assert result.exit_code == 0
    shown = json.loads(result.stdout)
    assert shown["status"] == "completed"
    assert shown["category"] == "metals"


def test_request_show_unknown(runner, seeded_db):
    result = runner.invoke(
        app, ["request", "show", "--request-id", "nope", "--db", str(seeded_db)]
    )

    assert result.exit_code == 1


# =============================================================================
# Supplier Tests
# =============================================================================


def test_suppliers_list(runner, seeded_db):
    result = runner.invoke(app, ["suppliers", "list", "--db", str(seeded_db)])

    assert result.exit_code == 0
    assert "Suppliers (8):" in result.stdout
    assert "SteelPro Industries (metals, DE)" in result.stdout


def test_suppliers_list_empty(runner, tmp_path):
    db_path = tmp_path / "empty.db"
    runner.invoke(app, ["init", "--db", str(db_path)])

    result = runner.invoke(app, ["suppliers", "list", "--db", str(db_path)])

    assert result.exit_code == 0
    assert "No suppliers registered" in result.stdout

import os

import pytest

from scripts.utils.migration_runner import MigrationError, MigrationRunner


MIGRATION_TEMPLATE = '''
def migrate(migration):
    migration.log.info("ran {name}")
'''

FAILING_MIGRATION = '''
def migrate(migration):
    raise RuntimeError("boom")
'''


@pytest.fixture
def migrations_dir(tmp_path):
    directory = tmp_path / "migrations"
    directory.mkdir()
    for name in ["0000-Vault", "0010-Initialize", "0002-Strategy"]:
        (directory / f"{name}.py").write_text(MIGRATION_TEMPLATE.format(name=name))
    # not migrations
    (directory / "README.md").write_text("steps")
    (directory / "helpers.py").write_text("")
    return str(directory)


@pytest.fixture
def runner(migrations_dir, history_dir, artifacts):
    return MigrationRunner(migrations_dir, history_dir, artifacts)


def _ran(output):
    return [line[len("ran "):] for line in output.splitlines() if line.startswith("ran ")]


def test_runs_in_timestamp_order(runner, deployArgs, capsys):
    runner.run(deployArgs())

    assert _ran(capsys.readouterr().out) == ["0000-Vault", "0002-Strategy", "0010-Initialize"]


def test_every_migration_leaves_a_manifest(runner, deployArgs, history_dir):
    runner.run(deployArgs())

    assert sorted(os.listdir(history_dir)) == [
        "0000-manifest.json",
        "0002-manifest.json",
        "0010-manifest.json",
    ]


def test_resumes_after_latest_manifest(runner, deployArgs, capsys):
    runner.run(deployArgs(), None, "0002")
    assert _ran(capsys.readouterr().out) == ["0000-Vault", "0002-Strategy"]

    runner.run(deployArgs())
    assert _ran(capsys.readouterr().out) == ["0010-Initialize"]

    runner.run(deployArgs())
    out = capsys.readouterr().out
    assert _ran(out) == []
    assert "No migrations to run." in out


def test_start_timestamp_is_inclusive(runner, deployArgs, capsys):
    runner.run(deployArgs(), "0002")

    assert _ran(capsys.readouterr().out) == ["0002-Strategy", "0010-Initialize"]


def test_single_migration(runner, deployArgs, capsys):
    runner.run(deployArgs(), "0000", None, False)

    assert _ran(capsys.readouterr().out) == ["0000-Vault"]


def test_end_timestamp(runner, deployArgs, capsys):
    runner.run(deployArgs(), "0", "0002")

    assert _ran(capsys.readouterr().out) == ["0000-Vault", "0002-Strategy"]


def test_failure_names_the_migration(runner, migrations_dir, deployArgs, history_dir, capsys):
    with open(os.path.join(migrations_dir, "0005-Broken.py"), "w") as f:
        f.write(FAILING_MIGRATION)

    with pytest.raises(MigrationError) as e:
        runner.run(deployArgs())

    assert e.value.failure_timestamp == "0005"
    assert "Timestamp of failed migration script: 0005" in str(e.value)
    assert isinstance(e.value.__cause__, RuntimeError)
    assert str(e.value.__cause__) == "boom"

    # nothing after the failure ran, the failed step has no manifest
    assert _ran(capsys.readouterr().out) == ["0000-Vault", "0002-Strategy"]
    assert "0005-manifest.json" not in os.listdir(history_dir)


def test_missing_migrations_dir(history_dir, artifacts, deployArgs, tmp_path):
    runner = MigrationRunner(str(tmp_path / "nope"), history_dir, artifacts)

    with pytest.raises(FileNotFoundError):
        runner.run(deployArgs())


def test_broken_migration_script_names_the_migration(runner, migrations_dir, deployArgs, capsys):
    with open(os.path.join(migrations_dir, "0001-Typo.py"), "w") as f:
        f.write("def migrate(migration)\n    pass\n")

    with pytest.raises(MigrationError) as e:
        runner.run(deployArgs())

    assert e.value.failure_timestamp == "0001"
    assert isinstance(e.value.__cause__, SyntaxError)
    assert _ran(capsys.readouterr().out) == ["0000-Vault"]

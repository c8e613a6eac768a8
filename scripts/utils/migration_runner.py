import importlib.util
import os
import re

from scripts.utils import log
from scripts.utils.migration import Migration
from scripts.utils.deploy_args import DeployArgs


class MigrationError(Exception):
    """
    Error representing an exception that occurs while executing a migration.
    Provides a `failure_timestamp` to identify the migration in which the
    failure occurred, which can be used to resume execution later on.
    """

    def __init__(
        self, failure_timestamp, message="An error occurred while executing migration"
    ):
        self.failure_timestamp = failure_timestamp
        self.message = message
        super().__init__(self.message)

    def __str__(self):
        return f"{self.message}. Timestamp of failed migration script: {self.failure_timestamp}"


def load_migration_module(filename):
    spec = importlib.util.spec_from_file_location('migration', filename)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


class MigrationRunner:
    """
    Facilitates the execution of migration scripts.
    """

    def __init__(self, migrations_dir, history_dir, artifacts):
        self.migrations_dir = migrations_dir
        self.history_dir = history_dir
        self.artifacts = artifacts
        self.gas = 0

    def run(self, deploy_args: DeployArgs, start_timestamp=None, end_timestamp=None, continue_running=True):
        """
        Run migrations starting at `start_timestamp`. If no start timestamp is provided,
        the history directory is checked for existing timestamps, and migrations will
        start after the latest recorded manifest timestamp.

        Each migration receives a `Migration` bound to the manifest of the
        environment, so addresses deployed by earlier migrations can be looked up.
        A manifest named `current-manifest.json` accumulates every contract
        deployed in the environment.

        Returns the gas spent.
        """
        if not os.path.isdir(self.migrations_dir):
            raise FileNotFoundError(f"No migrations found at {self.migrations_dir}")

        for filename, timestamp in self._migrations(start_timestamp, end_timestamp):
            log.h1(f"Running migration with timestamp {timestamp}...")
            try:
                module = load_migration_module(filename)
                migration = Migration(
                    deploy_args, self.artifacts, timestamp, self.history_dir
                )
                module.migrate(migration)
                self.gas += migration.end()
            except Exception as exception:
                raise MigrationError(timestamp) from exception

            if not continue_running:
                break
        return self.gas

    def _migrations(self, start_timestamp=None, end_timestamp=None):
        # Returns a list of `(filename, timestamp)` tuples, one for
        # each migration script, starting ON OR AFTER `start_timestamp`.
        #
        # If no start timestamp is provided, the history directory is checked for existing
        # timestamps, and migrations will start after the latest recorded manifest timestamp.

        if start_timestamp is None:
            start_timestamp = self._latest_manifest_timestamp()
            migrations = self._filtered_migration_filenames(
                start_timestamp, end_timestamp, inclusive=False
            )
        else:
            migrations = self._filtered_migration_filenames(
                start_timestamp, end_timestamp)

        if not migrations:
            log.info("No migrations to run.")

        return migrations

    def _filtered_migration_filenames(self, start_timestamp, end_timestamp, inclusive=True):
        # Get a list of migration scripts having timestamps greater than or equal
        # to the value of `start_timestamp`.
        #
        # If `inclusive` == False, only timestamps AFTER the start timestamp will be
        # included.
        #
        # Returns a list of `(filename, timestamp)` tuples.

        timestamped_migrations = []
        for file in os.listdir(self.migrations_dir):
            # timestamp of the filename is the initial string of numbers,
            # up to the first non-digit character
            match = re.fullmatch(r"(\d+).*\.py$", file)
            if match:
                timestamp = match.group(1)
                filename = os.path.join(self.migrations_dir, file)
                timestamped_migrations.append((filename, timestamp))

        # sort order of `os.listdir` is not guaranteed
        timestamped_migrations = sorted(
            timestamped_migrations, key=lambda x: int(x[1]))

        end_timestamp_int = int(end_timestamp) if end_timestamp and end_timestamp != '0' else None
        start_timestamp_int = int(start_timestamp) if start_timestamp else None

        migrations = []
        for filename, timestamp in timestamped_migrations:
            timestamp_int = int(timestamp)

            if end_timestamp_int is not None and timestamp_int > end_timestamp_int:
                break
            if start_timestamp_int is None or timestamp_int > start_timestamp_int or (
                    inclusive and timestamp_int == start_timestamp_int):
                migrations.append((filename, timestamp))

        return migrations

    def _latest_manifest_timestamp(self):
        # get the timestamp of the most recently executed migration
        # (returns None if no migrations have been run)

        latest_timestamp = None

        os.makedirs(self.history_dir, exist_ok=True)

        for file in os.listdir(self.history_dir):
            match = re.fullmatch(r"(\d+)\-manifest\.json$", file)
            if match:
                timestamp = match.group(1)
                if latest_timestamp is None or int(timestamp) > int(latest_timestamp):
                    latest_timestamp = timestamp

        return latest_timestamp

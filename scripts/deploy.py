import os
import sys
import traceback

import click

from scripts.utils import log
from scripts.utils.migration_helpers import ARTIFACTS_DIR, connect, get_account, load_artifacts
from scripts.utils.migration_runner import MigrationRunner
from scripts.utils.deploy_args import DeployArgs


MIGRATION_SCRIPTS_DIR = "./migrations"
MIGRATION_HISTORY_DIR = "./migration_history"


RPC_URLS = {
    "fantom-mainnet": os.environ.get("FTM_RPC_URL", "https://rpc.ftm.tools"),
    "fantom-testnet": os.environ.get("FTM_TESTNET_RPC_URL", "https://rpc.testnet.fantom.network"),
}


CLICK_PROMPTS = {
    "rpc": {
        "prompt": "What is the desired rpc?",
        "default": "",
        "help": "RPC url for the chain to deploy to. Defaults to the public rpc of `--chain`.",
    },
    "environment": {
        "prompt": "Inform the environment name",
        "default": "crv3crypto",
        "help": "Deployment environment: selects the migration scripts and the manifests they write. Defaults to `crv3crypto`.",
    },
    "blueprint": {
        "prompt": "Blueprint",
        "default": "",
        "help": "Blueprint (parameter set) to use for the deployment. Defaults to the environment name.",
    },
    "start_timestamp": {
        "prompt": "Start timestamp",
        "default": "",
        "help": "Timestamp at which to start running migrations. If none is provided, migrations resume after the latest manifest.",
    },
    "single": {
        "prompt": "Is single migration?",
        "default": False,
        "help": "Runs only the specified migration. If false, runs all the migrations starting from the specified timestamp."
    },
    "end_timestamp": {
        "prompt": "End timestamp",
        "default": "",
        "help": "Last timestamp migration that will run. If none is provided, runs up to the most recent migration.",
        "depends": {
            "single": False
        }
    },
    "chain": {
        "prompt": "Chain name",
        "default": "fantom-mainnet",
        "help": "Chain to deploy to. Defaults to `fantom-mainnet`.",
        "type": click.Choice(list(RPC_URLS.keys()), case_sensitive=False),
    },
    "account": {
        "prompt": "Deployer account name",
        "default": "DEPLOYER",
        "help": "Account name for deployment, the key is read from `<ACCOUNT>_PRIVATE_KEY`. Defaults to `DEPLOYER`"
    },
}


def param_prompt(ctx, param, value):
    param_config = CLICK_PROMPTS.get(param.name)

    if param_config is None:
        return value

    default_val = param_config.get("default")
    prompt = param_config.get("prompt")
    optional = param_config.get("optional", default_val is not None)

    if value != default_val:
        return value

    if prompt is None or (ctx.params.get("silent") and optional):
        return value

    depends = param_config.get("depends")
    if depends is not None:
        if not any(ctx.params.get(key) == val for key, val in depends.items()):
            return value

    return click.prompt(
        f"{prompt} --{param.name.replace('_', '-')}",
        default=default_val,
        type=param_config.get("type"),
        show_default=True,
    )


@click.command()
@click.option("--silent", is_flag=True, is_eager=True, default=False, help="Run command without prompts.")
@click.option(
    "--rpc",
    default=CLICK_PROMPTS["rpc"]["default"],
    help=CLICK_PROMPTS["rpc"]["help"],
    callback=param_prompt,
)
@click.option(
    "--chain", "-c",
    default=CLICK_PROMPTS["chain"]["default"],
    help=CLICK_PROMPTS["chain"]["help"],
    type=CLICK_PROMPTS["chain"]["type"],
    callback=param_prompt,
)
@click.option(
    "--environment",
    default=CLICK_PROMPTS["environment"]["default"],
    help=CLICK_PROMPTS["environment"]["help"],
    callback=param_prompt,
)
@click.option(
    "--blueprint", "-b",
    default=CLICK_PROMPTS["blueprint"]["default"],
    help=CLICK_PROMPTS["blueprint"]["help"],
    callback=param_prompt,
)
@click.option(
    "--account", "-a",
    default=CLICK_PROMPTS["account"]["default"],
    help=CLICK_PROMPTS["account"]["help"],
    callback=param_prompt,
)
@click.option(
    "--start-timestamp", "-t",
    default=CLICK_PROMPTS["start_timestamp"]["default"],
    help=CLICK_PROMPTS["start_timestamp"]["help"],
    callback=param_prompt,
)
@click.option(
    "--single", "-s",
    is_flag=True,
    default=CLICK_PROMPTS["single"]["default"],
    help=CLICK_PROMPTS["single"]["help"],
    callback=param_prompt,
)
@click.option(
    "--end-timestamp", "-e",
    default=CLICK_PROMPTS["end_timestamp"]["default"],
    help=CLICK_PROMPTS["end_timestamp"]["help"],
    callback=param_prompt,
)
@click.option("--migrations-dir", default=MIGRATION_SCRIPTS_DIR, show_default=True, help="Root of the migration scripts.")
@click.option("--history-dir", default=MIGRATION_HISTORY_DIR, show_default=True, help="Root of the manifests.")
@click.option("--artifacts-dir", default=ARTIFACTS_DIR, show_default=True, help="Hardhat artifacts directory.")
def cli(
    silent,
    rpc,
    chain,
    environment,
    blueprint,
    account,
    start_timestamp,
    single,
    end_timestamp,
    migrations_dir,
    history_dir,
    artifacts_dir,
):
    """
    Deploys vaults and strategies by running migration scripts.

    Migration scripts live in `<migrations-dir>/<chain>/<environment>`.
    Their filenames are prefixed with a numeric timestamp that sets the
    order in which they run. Each one deploys or wires up a single
    contract with the parameters of its blueprint (`config/BluePrint.py`).

    Deployed addresses are recorded in JSON manifests under
    `<history-dir>/<chain>/<environment>`, so later scripts (strategy,
    vault initialization) can pick up the addresses of earlier ones
    when the blueprint does not pin them. Without `--start-timestamp`
    the run resumes after the most recent manifest.

    Exits with status 1 on the first failure; nothing is retried.
    """
    final_rpc = rpc if rpc else RPC_URLS[chain]

    try:
        sender = get_account(account)
        w3 = connect(final_rpc)
        deploy_args = DeployArgs(
            sender, chain, blueprint or environment, final_rpc, w3)

        log.h1("Contract Deployment")
        log.info(f"Connected to rpc `{final_rpc}`.")
        log.info(f"Deployer account `{sender.address}`.")
        log.info(f"Manifests are stored in `{history_dir}/{chain}/{environment}`.")
        log.info(f"Deployment arguments: {deploy_args}")
        if start_timestamp:
            log.info(f"Running migrations starting with timestamp {start_timestamp}.")
        log.info("")
        artifacts = load_artifacts(artifacts_dir)
        log.info(f"Loaded {len(artifacts)} contract artifacts.")
        log.h2("Running migrations...")

        migrations = MigrationRunner(
            f"{migrations_dir}/{chain}/{environment}",
            f"{history_dir}/{chain}/{environment}",
            artifacts,
        )
        total_gas = migrations.run(
            deploy_args, start_timestamp or None, end_timestamp or None, not single)

    except Exception as exception:
        log.error(f"Deployment failed: {exception}")
        if exception.__cause__ is not None:
            log.error(f"Cause: {exception.__cause__!r}")
        log.error("".join(traceback.format_exception(
            type(exception), exception, exception.__traceback__)))
        sys.exit(1)

    log.info(f'Total gas used: {total_gas}')

    log.info("Done.")
    log.info("")


if __name__ == "__main__":
    cli()

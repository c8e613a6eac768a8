from scripts.utils.migration import Migration


def migrate(migration: Migration):
    params = migration.blueprint.PARAMS

    vault = migration.deploy(
        params["VAULT_CONTRACT"],
        migration.blueprint.ADDRESSES["WANT"],
        params["VAULT_TOKEN_NAME"],
        params["VAULT_TOKEN_SYMBOL"],
        params["VAULT_DEPOSIT_FEE"],
        params["VAULT_TVL_CAP"],
        label="Vault",
        options=migration.blueprint.TX_OPTIONS["vault"],
    )

    migration.log.info(f"Vault deployed to: {vault.address}")

from scripts.utils.migration import Migration


def migrate(migration: Migration):
    addys = migration.blueprint.ADDRESSES

    strategy = migration.deploy_proxy(
        migration.blueprint.PARAMS["STRATEGY_CONTRACT"],
        migration.resolve_address("VAULT", "Vault"),
        [addys["TREASURY"], addys["PAYMENT_SPLITTER"]],  # fee remitters
        addys["STRATEGISTS"],
        migration.require_address("GRANARY_WANT"),
        label="Strategy",
        options=migration.blueprint.TX_OPTIONS["strategy"],
    )

    migration.log.info(f"Strategy deployed to: {strategy.address}")

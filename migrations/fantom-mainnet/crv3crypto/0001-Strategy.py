from scripts.utils.migration import Migration


def migrate(migration: Migration):
    addys = migration.blueprint.ADDRESSES

    strategy = migration.deploy_proxy(
        migration.blueprint.PARAMS["STRATEGY_CONTRACT"],
        migration.resolve_address("VAULT", "Vault"),
        [addys["TREASURY"], addys["PAYMENT_SPLITTER"]],  # fee remitters
        addys["STRATEGISTS"],
        migration.blueprint.PARAMS["STRATEGY_DEPOSIT_INDEX"],  # index of weth in the curve pool
        addys["WFTM_TO_DEPOSIT_PATH"],
        label="Strategy",
        options=migration.blueprint.TX_OPTIONS["strategy"],
    )

    migration.log.info(f"Strategy deployed to: {strategy.address}")

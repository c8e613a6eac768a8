from scripts.utils.migration import Migration


def migrate(migration: Migration):
    vault_address = migration.resolve_address("VAULT", "Vault")
    strategy_address = migration.resolve_address("STRATEGY", "Strategy")

    vault = migration.attach(migration.blueprint.PARAMS["VAULT_CONTRACT"], vault_address)
    migration.execute(
        vault,
        "initialize",
        strategy_address,
        options=migration.blueprint.TX_OPTIONS["initialize"],
    )

    migration.log.info("Vault initialized")

# units
GWEI = 10 ** 9
EIGHTEEN_DECIMALS = 10 ** 18
SIX_DECIMALS = 10 ** 6

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


PARAMS = {
    "crv3crypto": {
        # vault
        "VAULT_CONTRACT": "ReaperVaultv1_4",
        "VAULT_TOKEN_NAME": "Tricrypto Curve Crypt",
        "VAULT_TOKEN_SYMBOL": "rf-crv3crypto",
        "VAULT_DEPOSIT_FEE": 0,
        "VAULT_TVL_CAP": 2_000 * EIGHTEEN_DECIMALS,
        # strategy
        "STRATEGY_CONTRACT": "ReaperStrategyCurve",
        "STRATEGY_DEPOSIT_INDEX": 2,
    },
    "granary-usdc": {
        # vault
        "VAULT_CONTRACT": "ReaperVaultv1_4",
        "VAULT_TOKEN_NAME": "USDC Granary Crypt",
        "VAULT_TOKEN_SYMBOL": "rf-gUSDC",
        "VAULT_DEPOSIT_FEE": 0,
        "VAULT_TVL_CAP": 1_000_000 * SIX_DECIMALS,
        # strategy
        "STRATEGY_CONTRACT": "ReaperStrategyGranary",
    },
}


ADDRESSES = {
    "crv3crypto": {
        "WANT": "0x58e57cA18B7A47112b877E31929798Cd3D703b0f",  # crv3crypto lp
        "TREASURY": "0x0e7c5313E9BB80b654734d9b7aB1FB01468deE3b",
        "PAYMENT_SPLITTER": "0x63cbd4134c2253041F370472c130e92daE4Ff174",
        "STRATEGISTS": [
            "0x1E71AEE6081f62053123140aacC7a06021D77348",
            "0x81876677843D00a7D792E1617459aC2E93202576",
            "0x1A20D7A31e5B3Bc5f02c8A146EF6f394502a10c4",
        ],
        # wftm -> weth
        "WFTM_TO_DEPOSIT_PATH": [
            "0x21be370D5312f44cB42ce377BC9b8a0cEF1A4C83",
            "0x74b23882a30290451A17c44f4F05243b6b58C76d",
        ],
        # empty -> taken from the manifest of this environment
        "VAULT": "",
        "STRATEGY": "",
    },
    "granary-usdc": {
        "WANT": "0x04068da6c83afcfa0e13ba15a6696662335d5b75",  # usdc
        # gUSDC, must be set before the strategy step runs
        "GRANARY_WANT": "",
        "TREASURY": "0x0e7c5313E9BB80b654734d9b7aB1FB01468deE3b",
        "PAYMENT_SPLITTER": "0x63cbd4134c2253041F370472c130e92daE4Ff174",
        "STRATEGISTS": [
            "0x1E71AEE6081f62053123140aacC7a06021D77348",
            "0x81876677843D00a7D792E1617459aC2E93202576",
        ],
        # empty -> taken from the manifest of this environment
        "VAULT": "",
        "STRATEGY": "",
    },
}

# live crv3crypto deployment, only for re-running `0002` against it:
# deploy --environment crv3crypto --blueprint crv3crypto-live -t 0002 --single
PARAMS["crv3crypto-live"] = PARAMS["crv3crypto"]
ADDRESSES["crv3crypto-live"] = {
    **ADDRESSES["crv3crypto"],
    "VAULT": "0x66f9207360067a537eA1a4a8f4474E4d8359a038",
    "STRATEGY": "0xBE320C7C61F2131880df4eD41D6Adc65050c8A19",
}


TX_OPTIONS = {
    "crv3crypto": {
        "vault": {"gas_price": 200 * GWEI, "gas_limit": 9_000_000},
        "strategy": {"kind": "uups", "timeout": 0, "gas_price": 300 * GWEI, "gas_limit": 9_000_000},
        "initialize": {"gas_price": 300 * GWEI, "gas_limit": 9_000_000},
    },
    "granary-usdc": {
        "vault": {"gas_price": 200 * GWEI, "gas_limit": 9_000_000},
        "strategy": {"kind": "uups", "timeout": 0, "gas_price": 300 * GWEI, "gas_limit": 9_000_000},
        "initialize": {"gas_price": 300 * GWEI, "gas_limit": 9_000_000},
    },
}

TX_OPTIONS["crv3crypto-live"] = TX_OPTIONS["crv3crypto"]

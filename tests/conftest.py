import os

import pytest
from eth_account import Account
from web3 import Web3

from config.BluePrint import ADDRESSES
from constants import ARTIFACTS, DEPLOYED_ADDRESSES, GAS_USED, GRANARY_WANT, MIGRATIONS_DIR, TEST_RPC
from scripts.utils import json_file
from scripts.utils.deploy_args import DeployArgs
from scripts.utils.migration import Migration
from scripts.utils.migration_helpers import TEST_PRIVATE_KEY, load_artifacts
from scripts.utils.migration_runner import MigrationRunner


CHAIN = "fantom-mainnet"


class FakeChain:
    """
    Stands in for the web3 layer: records every transaction the migrations
    send and hands out deterministic addresses.
    """

    def __init__(self):
        self.calls = []
        self.error = None
        self._addresses = iter(DEPLOYED_ADDRESSES)

    def _record(self, kind, **call):
        if self.error is not None:
            raise self.error
        call["kind"] = kind
        self.calls.append(call)

    def deploy_contract(self, w3, sender, abi, bytecode, args, options):
        self._record("deploy", sender=sender.address, bytecode=bytecode, args=args, options=options)
        return next(self._addresses), {"status": 1, "gasUsed": GAS_USED}

    def deploy_proxy(self, w3, sender, artifact, proxy_artifact, init_args, options):
        self._record(
            "deploy_proxy",
            sender=sender.address,
            name=artifact["contractName"],
            proxy=proxy_artifact["contractName"],
            args=init_args,
            options=options,
        )
        implementation = next(self._addresses)
        address = next(self._addresses)
        return address, implementation, [{"status": 1, "gasUsed": GAS_USED}, {"status": 1, "gasUsed": GAS_USED}]

    def send_transaction(self, w3, sender, contract, fn_name, args, options):
        self._record(
            "send",
            sender=sender.address,
            address=contract.address,
            fn_name=fn_name,
            args=args,
            options=options,
        )
        return {"status": 1, "gasUsed": GAS_USED // 10}


@pytest.fixture
def chain(monkeypatch):
    fake = FakeChain()
    monkeypatch.setattr("scripts.utils.migration.deploy_contract", fake.deploy_contract)
    monkeypatch.setattr("scripts.utils.migration.deploy_proxy", fake.deploy_proxy)
    monkeypatch.setattr("scripts.utils.migration.send_transaction", fake.send_transaction)
    return fake


@pytest.fixture(scope="session")
def w3():
    # never connected, only used to build contract objects
    return Web3(Web3.HTTPProvider(TEST_RPC))


@pytest.fixture(scope="session")
def sender():
    return Account.from_key(TEST_PRIVATE_KEY)


@pytest.fixture
def artifacts_dir(tmp_path):
    directory = tmp_path / "artifacts"
    for source, name, abi, bytecode in ARTIFACTS:
        artifact = {
            "_format": "hh-sol-artifact-1",
            "contractName": name,
            "sourceName": source,
            "abi": abi,
            "bytecode": bytecode,
            "deployedBytecode": bytecode,
            "linkReferences": {},
            "deployedLinkReferences": {},
        }
        json_file.save(str(directory / source / f"{name}.json"), artifact)
        json_file.save(str(directory / source / f"{name}.dbg.json"), {"buildInfo": "../build-info/abc.json"})
    json_file.save(str(directory / "build-info" / "abc.json"), {"output": {}})
    return str(directory)


@pytest.fixture
def artifacts(artifacts_dir):
    return load_artifacts(artifacts_dir)


@pytest.fixture
def history_dir(tmp_path):
    return str(tmp_path / "migration_history")


@pytest.fixture
def deployArgs(sender, w3):
    def deployArgs(_blueprint="crv3crypto"):
        return DeployArgs(sender, CHAIN, _blueprint, TEST_RPC, w3)

    yield deployArgs


@pytest.fixture
def createMigration(deployArgs, artifacts, history_dir):
    def createMigration(_blueprint="crv3crypto", _timestamp="0000"):
        return Migration(deployArgs(_blueprint), artifacts, _timestamp, history_dir)

    yield createMigration


@pytest.fixture
def runMigrations(deployArgs, artifacts, history_dir):
    def runMigrations(_environment, _start=None, _end=None, _continue=True, _blueprint=None):
        runner = MigrationRunner(
            os.path.join(MIGRATIONS_DIR, CHAIN, _environment),
            history_dir,
            artifacts,
        )
        return runner.run(deployArgs(_blueprint or _environment), _start, _end, _continue)

    yield runMigrations


@pytest.fixture
def granaryWant(monkeypatch):
    monkeypatch.setitem(ADDRESSES["granary-usdc"], "GRANARY_WANT", GRANARY_WANT)
    return GRANARY_WANT

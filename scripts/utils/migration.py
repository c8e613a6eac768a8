import os

from web3 import Web3

from scripts.utils import log
from scripts.utils import json_file
from scripts.utils.deploy_args import DeployArgs
from scripts.utils.migration_helpers import (PROXY_CONTRACT, deploy_contract,
                                             deploy_proxy, load_artifact,
                                             manifest_entry, send_transaction)


DEFAULT_PROXY_OPTIONS = {"kind": "uups", "timeout": 0}


class Migration:
    def __init__(self, deploy_args: DeployArgs, artifacts, timestamp, history_path):
        self._artifacts = artifacts
        self._timestamp = timestamp
        self._history_path = history_path
        self._deploy_args = deploy_args
        self._count = 0
        self.gas = 0

        filename = self._manifest_filename('current')
        if json_file.exists(filename):
            log.h3(f"Loading previous manifest {filename}")
            self._manifest = json_file.load(filename)
        else:
            log.h3(f"No previous manifest: {filename}")
            self._manifest = {"contracts": {}}

    @property
    def w3(self):
        return self._deploy_args.w3

    @property
    def account(self):
        return self._deploy_args.sender

    @property
    def blueprint(self):
        return self._deploy_args.blueprint

    @property
    def log(self):
        return log

    def deploy(self, name, *args, label=None, options=None):
        """
        Deploys contract with given name and constructor args.
        Returns the deployed contract.
        """
        label = label or name
        artifact = self._load_artifact(name)
        if artifact["bytecode"] in ("", "0x"):
            raise ValueError(f"{name} has no bytecode (abstract contract or interface?)")

        self._header(f"Deploying {label}")
        address, receipt = deploy_contract(
            self.w3, self.account, artifact["abi"], artifact["bytecode"], list(args), options or {})
        self._spend(receipt)
        log.h3(f"Contract {label} deployed at {address}")

        self._register_contract(label, manifest_entry(address, name, artifact, args))
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=artifact["abi"])

    def deploy_proxy(self, name, *args, label=None, options=None):
        """
        Deploys contract with given name behind an ERC-1967 proxy and calls
        `initialize` with args through the proxy constructor.
        Returns the implementation abi attached at the proxy address.
        """
        label = label or name
        options = dict(DEFAULT_PROXY_OPTIONS, **(options or {}))
        artifact = self._load_artifact(name)
        proxy_artifact = self._load_artifact(PROXY_CONTRACT)

        self._header(f"Deploying {label} behind {options['kind']} proxy")
        address, implementation, receipts = deploy_proxy(
            self.w3, self.account, artifact, proxy_artifact, list(args), options)
        for receipt in receipts:
            self._spend(receipt)
        log.h3(f"Contract {label} deployed at {address} (implementation {implementation})")

        self._register_contract(
            label,
            manifest_entry(address, name, artifact, [], implementation=implementation, proxy_kind=options["kind"]),
        )
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=artifact["abi"])

    def attach(self, name, address):
        """
        Returns contract `name` at an already deployed address.
        """
        artifact = self._load_artifact(name)
        log.h3(f"Attached {name} at {address}")
        return self.w3.eth.contract(address=Web3.to_checksum_address(address), abi=artifact["abi"])

    def execute(self, contract, fn_name, *args, options=None):
        """
        Executes a state changing call and waits for it to be confirmed.
        Returns the transaction receipt.
        """
        self._header(f"{fn_name}{tuple(args)} on {contract.address}")
        receipt = send_transaction(
            self.w3, self.account, contract, fn_name, list(args), options or {})
        self._spend(receipt)
        log.h3("Transaction confirmed")

        return receipt

    def get_address(self, label):
        try:
            return self._manifest["contracts"][label]["address"]
        except KeyError:
            raise KeyError(
                f"`{label}` not found in manifest {self._manifest_filename('current')}") from None

    def get_contract(self, label):
        entry = self._manifest["contracts"][label]
        return self.w3.eth.contract(address=Web3.to_checksum_address(entry["address"]), abi=entry["abi"])

    def resolve_address(self, key, label):
        """
        Address pinned in the blueprint under `key`, or the address recorded
        in the manifest under `label` when the blueprint leaves it empty.
        """
        address = self.blueprint.ADDRESSES.get(key, "")
        if address:
            return address
        return self.get_address(label)

    def require_address(self, key):
        address = self.blueprint.ADDRESSES.get(key, "")
        if not address:
            raise ValueError(
                f"Address `{key}` is not set in blueprint `{self.blueprint.blueprint}` (config/BluePrint.py)")
        return address

    def end(self):
        """
        Ends the migration. Its manifest is written even when nothing was
        deployed so the next run resumes after it.
        """
        filename = self._manifest_filename(self._timestamp)
        if not json_file.exists(filename):
            json_file.save(filename, {"contracts": {}})

        log.info(f"Gas spent for migration: {self.gas}")

        return self.gas

    def _header(self, message):
        self._count += 1
        log.h2(
            f"Transaction {self._count} for migration with timestamp {self._timestamp} - {message}"
        )

    def _spend(self, receipt):
        self.gas += receipt.get("gasUsed", 0)

    def _load_artifact(self, name):
        if name not in self._artifacts:
            raise KeyError(f"No artifact found for contract `{name}` (did you compile?)")
        return load_artifact(self._artifacts[name])

    def _register_contract(self, label, entry):
        self._manifest["contracts"][label] = entry

        filename = self._manifest_filename(self._timestamp)
        current_manifest = json_file.load(filename) if json_file.exists(filename) else {"contracts": {}}
        current_manifest["contracts"][label] = entry

        json_file.save(filename, current_manifest)
        json_file.save(self._manifest_filename("current"), self._manifest)

        log.h3(f"{label} added to manifest")

    def _manifest_filename(self, name):
        return os.path.join(self._history_path, f"{name}-manifest.json")

import os

import dotenv
from eth_abi.abi import encode
from eth_account import Account
from eth_utils import collapse_if_tuple, function_abi_to_4byte_selector
from web3 import Web3

from scripts.utils import json_file
from scripts.utils import log

dotenv.load_dotenv()

# Define constants for directories
ARTIFACTS_DIR = "./artifacts"
PROXY_CONTRACT = "ERC1967Proxy"


TEST_PRIVATE_KEY = '0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80'

TX_OPTION_KEYS = ("gas_price", "gas_limit", "kind", "timeout", "value")

# seconds, same as web3
DEFAULT_RECEIPT_TIMEOUT = 120


class TransactionFailed(Exception):
    """
    Raised when a transaction is mined but reverted (receipt status 0).
    """

    def __init__(self, tx_hash, receipt=None):
        self.tx_hash = tx_hash
        self.receipt = receipt
        super().__init__(f"Transaction {tx_hash} reverted")


def load_artifacts(directory=ARTIFACTS_DIR):
    """
    Load all Hardhat artifact files from the specified directory and its subdirectories.
    Returns a dict mapping contract name to the artifact path.
    """
    artifacts = {}

    if not os.path.exists(directory):
        return artifacts

    for root, dirs, files in os.walk(directory):
        # build-info holds the full compiler output, not artifacts
        dirs[:] = [d for d in dirs if d != "build-info"]
        for file in files:
            if not file.endswith('.json') or file.endswith('.dbg.json'):
                continue
            key = file[:-5]
            artifacts[key] = os.path.relpath(os.path.join(root, file))

    return artifacts


def load_artifact(path):
    artifact = json_file.load(path)
    if "abi" not in artifact or "bytecode" not in artifact:
        raise ValueError(f"{path} is not a contract artifact (missing abi or bytecode)")
    return artifact


def get_account(accountName):
    log.h1(f'Connecting to deployer account {accountName}')

    accountKey = os.environ.get(f'{accountName}_PRIVATE_KEY')
    if not accountKey:
        log.error(
            f'{accountName}_PRIVATE_KEY is not set, falling back to the public test account')
        accountKey = TEST_PRIVATE_KEY
    account = Account.from_key(accountKey)
    log.h2(f'Deployer account {accountName} connected')

    return account


def connect(rpc):
    w3 = Web3(Web3.HTTPProvider(rpc))
    if not w3.is_connected():
        raise ConnectionError(f"Cannot connect to rpc `{rpc}`")
    return w3


def process_args(args):
    """
    Prepare python values for the abi encoder: contracts become their
    address and address strings are checksummed, recursively through lists.
    """
    processed = []
    for arg in args:
        if hasattr(arg, 'address'):
            processed.append(Web3.to_checksum_address(arg.address))
        elif isinstance(arg, str) and Web3.is_address(arg):
            processed.append(Web3.to_checksum_address(arg))
        elif isinstance(arg, (list, tuple)):
            processed.append(process_args(arg))
        else:
            processed.append(arg)
    return processed


def _find_abi(abi, abi_type, name=None):
    for item in abi:
        if item.get('type') != abi_type:
            continue
        if name is None or item.get('name') == name:
            return item
    return None


def has_function(abi, name):
    return _find_abi(abi, 'function', name) is not None


def encode_constructor_args(abi: list, args: list) -> str:
    """
    Encode constructor arguments based on the contract's ABI
    Returns hex string without '0x' prefix
    """
    constructor = _find_abi(abi, 'constructor')
    if not constructor or not args:
        return ""

    input_types = [collapse_if_tuple(input_) for input_ in constructor['inputs']]
    return encode(input_types, process_args(args)).hex()


def encode_function_call(abi: list, fn_name: str, args: list) -> bytes:
    """
    Encode a call to `fn_name` (selector followed by the abi-encoded arguments).
    """
    fn_abi = _find_abi(abi, 'function', fn_name)
    if fn_abi is None:
        raise ValueError(f"Function `{fn_name}` not found in abi")
    if len(fn_abi['inputs']) != len(args):
        raise ValueError(
            f"`{fn_name}` expects {len(fn_abi['inputs'])} arguments, got {len(args)}")

    input_types = [collapse_if_tuple(input_) for input_ in fn_abi['inputs']]
    return function_abi_to_4byte_selector(fn_abi) + encode(input_types, process_args(args))


def receipt_timeout(options):
    # a timeout of 0 waits for confirmation forever
    timeout = options.get("timeout", DEFAULT_RECEIPT_TIMEOUT)
    return None if timeout == 0 else timeout


def tx_params(w3, sender, options):
    unknown = set(options.keys()) - set(TX_OPTION_KEYS)
    if unknown:
        raise ValueError(f"Unknown transaction options: {', '.join(sorted(unknown))}")

    params = {
        "from": sender.address,
        "nonce": w3.eth.get_transaction_count(sender.address, "pending"),
    }
    if options.get("gas_limit"):
        params["gas"] = options["gas_limit"]
    if options.get("gas_price"):
        params["gasPrice"] = options["gas_price"]
    if options.get("value"):
        params["value"] = options["value"]

    return params


def _sign_and_wait(w3, sender, tx, options):
    signed = sender.sign_transaction(tx)
    tx_hash = w3.eth.send_raw_transaction(signed.raw_transaction)
    log.h3(f"Transaction sent {Web3.to_hex(tx_hash)}, waiting for confirmation")

    receipt = w3.eth.wait_for_transaction_receipt(
        tx_hash, timeout=receipt_timeout(options))
    if receipt["status"] != 1:
        raise TransactionFailed(Web3.to_hex(tx_hash), receipt)

    return receipt


def deploy_contract(w3, sender, abi, bytecode, args, options):
    """
    Deploys `bytecode` with constructor `args` and waits for the receipt.
    Returns `(address, receipt)`.
    """
    factory = w3.eth.contract(abi=abi, bytecode=bytecode)
    tx = factory.constructor(*process_args(args)).build_transaction(
        tx_params(w3, sender, options))
    receipt = _sign_and_wait(w3, sender, tx, options)

    return receipt["contractAddress"], receipt


def deploy_proxy(w3, sender, artifact, proxy_artifact, init_args, options):
    """
    Deploys the implementation in `artifact`, then an ERC-1967 proxy pointing
    at it whose constructor runs `initialize(*init_args)`.
    Returns `(proxy_address, implementation_address, receipts)`.
    """
    kind = options.get("kind", "uups")
    if kind != "uups":
        raise ValueError(f"Unsupported proxy kind `{kind}`, only `uups` is supported")
    if not has_function(artifact["abi"], "proxiableUUID"):
        raise ValueError("Implementation is not UUPS upgradeable (missing proxiableUUID)")

    # encode first so bad initializer args fail before anything is sent
    data = encode_function_call(artifact["abi"], "initialize", init_args)

    implementation, implementation_receipt = deploy_contract(
        w3, sender, artifact["abi"], artifact["bytecode"], [], options)
    log.h3(f"Implementation deployed at {implementation}")

    address, proxy_receipt = deploy_contract(
        w3, sender, proxy_artifact["abi"], proxy_artifact["bytecode"], [implementation, data], options)

    return address, implementation, [implementation_receipt, proxy_receipt]


def send_transaction(w3, sender, contract, fn_name, args, options):
    """
    Calls state-changing `fn_name` on `contract` and waits for the receipt.
    """
    function = getattr(contract.functions, fn_name)
    tx = function(*process_args(args)).build_transaction(
        tx_params(w3, sender, options))

    return _sign_and_wait(w3, sender, tx, options)


def manifest_entry(address, artifact_name, artifact, args, **extra):
    """
    Manifest record of a deployed contract. `extra` holds proxy details
    (implementation address and proxy kind).
    """
    entry = {
        "address": address,
        "artifact": artifact_name,
        "abi": artifact["abi"],
        "args": encode_constructor_args(artifact["abi"], args),
    }
    entry.update(extra)
    return entry

# freezer/config.py

from pycardano import Network

ENVIRONMENTS = ("mainnet", "preprod", "preview")
DEFAULT_ENV = "preview"

DEFAULT_BLUEPRINT = "../contracts/freezer/plutus.json"

BLOCKFROST_API_KEY_VAR = "BLOCKFROST_API_KEY"
ENV_VAR = "FREEZER_ENV"
BLUEPRINT_VAR = "FREEZER_BLUEPRINT"

PUBLISH_LOVELACE = 2_000_000

# Seconds between confirmation checks
AWAIT_INTERVAL = 3

# CIP-1852 account 0, first address
PAYMENT_PATH = "m/1852'/1815'/0'/0/0"
STAKE_PATH = "m/1852'/1815'/0'/2/0"


def blockfrost_url(env: str) -> str:
    return f"https://cardano-{env}.blockfrost.io/api"


def network_for(env: str) -> Network:
    if env == "mainnet":
        return Network.MAINNET
    return Network.TESTNET

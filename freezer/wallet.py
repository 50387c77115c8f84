# freezer/wallet.py
"""
Wallet loading from a signing key file, a mnemonic, or a file holding a mnemonic.
"""

import json
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

from pycardano import (
    Address,
    ChainContext,
    ExtendedSigningKey,
    HDWallet,
    Network,
    PaymentExtendedSigningKey,
    PaymentSigningKey,
    PaymentVerificationKey,
    UTxO,
)
from pycardano.crypto import bech32
from pycardano.crypto.bip32 import BIP32ED25519PrivateKey
from pycardano.hash import VerificationKeyHash

from freezer.config import PAYMENT_PATH, STAKE_PATH
from freezer.errors import WalletSourceError

logger = logging.getLogger(__name__)

SigningKey = Union[PaymentSigningKey, PaymentExtendedSigningKey, ExtendedSigningKey]


@dataclass
class Wallet:
    signing_key: SigningKey
    key_hash: VerificationKeyHash
    address: Address

    def utxos(self, context: ChainContext) -> List[UTxO]:
        return context.utxos(self.address)


BECH32_SIGNING_KEYS = ("ed25519_sk", "ed25519e_sk")


def _bech32_payload(text: str) -> Optional[bytes]:
    # Extended keys are longer than bech32.decode accepts, so check the
    # checksum and regroup the bits directly.
    hrp, _, rest = text.lower().rpartition("1")
    data = [bech32.CHARSET.find(c) for c in rest]
    if -1 in data or bech32.bech32_verify_checksum(hrp, data) is None:
        return None
    decoded = bech32.convertbits(data[:-6], 5, 8, False)
    return bytes(decoded) if decoded is not None else None


def signing_key_from_bech32(text: str) -> Tuple[SigningKey, VerificationKeyHash]:
    """
    Decode an ``ed25519_sk1...`` or ``ed25519e_sk1...`` secret key.

    An extended key carries no chain code, which signing does not need, so a
    zero chain code is stored after the derived public key.
    """
    hrp = text.lower().rpartition("1")[0]
    payload = _bech32_payload(text)
    if hrp == "ed25519_sk" and payload is not None and len(payload) == 32:
        signing_key = PaymentSigningKey(payload)
        return signing_key, PaymentVerificationKey.from_signing_key(signing_key).hash()
    if hrp == "ed25519e_sk" and payload is not None and len(payload) == 64:
        public_key = BIP32ED25519PrivateKey(payload, bytes(32)).public_key
        signing_key = PaymentExtendedSigningKey(payload + public_key + bytes(32))
        return signing_key, signing_key.to_verification_key().hash()
    raise WalletSourceError(f"not a valid bech32 signing key: {text[:12]}...")


def wallet_from_skey_file(path: str, network: Network) -> Wallet:
    """
    Load a payment signing key file: either a cardano-cli text envelope
    (normal or extended) or a bech32 ``ed25519_sk``/``ed25519e_sk`` string.
    """
    try:
        with open(path, "r") as f:
            text = f.read().strip()
    except OSError as e:
        raise WalletSourceError(f"cannot read signing key file {path}: {e}") from e

    if text.lower().startswith(BECH32_SIGNING_KEYS):
        signing_key, key_hash = signing_key_from_bech32(text)
    else:
        try:
            envelope = json.loads(text)
        except ValueError as e:
            raise WalletSourceError(f"{path} is not a signing key text envelope") from e

        if "Extended" in envelope.get("type", ""):
            signing_key = PaymentExtendedSigningKey.load(path)
            key_hash = signing_key.to_verification_key().hash()
        else:
            signing_key = PaymentSigningKey.load(path)
            key_hash = PaymentVerificationKey.from_signing_key(signing_key).hash()

    address = Address(payment_part=key_hash, network=network)
    return Wallet(signing_key=signing_key, key_hash=key_hash, address=address)


def wallet_from_mnemonic(mnemonic: str, network: Network) -> Wallet:
    try:
        hdwallet = HDWallet.from_mnemonic(mnemonic.strip())
    except ValueError as e:
        raise WalletSourceError(f"invalid mnemonic: {e}") from e

    # Payment key
    hdwallet_spend = hdwallet.derive_from_path(PAYMENT_PATH)
    spend_sk = ExtendedSigningKey.from_hdwallet(hdwallet_spend)
    spend_vk = PaymentVerificationKey.from_primitive(hdwallet_spend.public_key)

    # Stake key
    hdwallet_stake = hdwallet.derive_from_path(STAKE_PATH)
    stake_vk = PaymentVerificationKey.from_primitive(hdwallet_stake.public_key)

    address = Address(spend_vk.hash(), stake_vk.hash(), network=network)
    return Wallet(signing_key=spend_sk, key_hash=spend_vk.hash(), address=address)


def select_wallet(
    network: Network,
    skey_file: Optional[str] = None,
    mnemonic: Optional[str] = None,
    mnemonic_file: Optional[str] = None,
) -> Wallet:
    """
    Pick the wallet source the same way for every command: a signing key file
    wins over a mnemonic file, which wins over an inline mnemonic.
    """
    if skey_file:
        wallet = wallet_from_skey_file(skey_file, network)
    elif mnemonic_file:
        try:
            with open(mnemonic_file, "r") as f:
                words = f.read()
        except OSError as e:
            raise WalletSourceError(
                f"cannot read mnemonic file {mnemonic_file}: {e}"
            ) from e
        wallet = wallet_from_mnemonic(words, network)
    elif mnemonic:
        wallet = wallet_from_mnemonic(mnemonic, network)
    else:
        raise WalletSourceError(
            "must specify a wallet source: skeyFile, mnemonic, or mnemonicFile"
        )

    logger.info(f"Wallet address: {wallet.address}")
    return wallet

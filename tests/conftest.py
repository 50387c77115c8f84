"""
Shared fixtures: throwaway keys, a small blueprint and a mocked chain context.
"""

import json
from fractions import Fraction
from unittest.mock import MagicMock, Mock

import pytest
from pycardano import (
    Address,
    ChainContext,
    Network,
    PaymentSigningKey,
    PaymentVerificationKey,
    PlutusV2Script,
    ProtocolParameters,
    TransactionInput,
    TransactionOutput,
    UTxO,
    plutus_script_hash,
)

from freezer.wallet import Wallet

COMPILED_CODE = "4e4d01000033222220051200120011"
TX_HASH = "732bfd67e66be8e8288349fcaaa2294973ef6271cc189a239bb431275401b8e5"
OTHER_TX_HASH = "a6cbe6cadecd3f89b60e08e68e5e6c7d72d730aaa1ad21431590f7e6643438ef"


def make_utxo(address, amount, tx_hash=TX_HASH, index=0, datum=None, script=None):
    return UTxO(
        TransactionInput.from_primitive([tx_hash, index]),
        TransactionOutput(address, amount, datum=datum, script=script),
    )


class FixedChainContext(ChainContext):
    """Offline chain context with preview-like protocol parameters."""

    def __init__(self, utxos_by_address=None):
        self.utxos_by_address = utxos_by_address or {}

    @property
    def protocol_param(self):
        return ProtocolParameters(
            min_fee_constant=155381,
            min_fee_coefficient=44,
            max_block_size=90112,
            max_tx_size=16384,
            max_block_header_size=1100,
            key_deposit=2000000,
            pool_deposit=500000000,
            pool_influence=Fraction(3, 10),
            monetary_expansion=Fraction(3, 1000),
            treasury_expansion=Fraction(1, 5),
            decentralization_param=Fraction(0),
            extra_entropy="",
            protocol_major_version=8,
            protocol_minor_version=0,
            min_utxo=1000000,
            min_pool_cost=340000000,
            price_mem=Fraction(577, 10000),
            price_step=Fraction(721, 10000000),
            max_tx_ex_mem=14000000,
            max_tx_ex_steps=10000000000,
            max_block_ex_mem=62000000,
            max_block_ex_steps=20000000000,
            max_val_size=5000,
            collateral_percent=150,
            max_collateral_inputs=3,
            coins_per_utxo_word=34482,
            coins_per_utxo_byte=4310,
            cost_models={},
        )

    @property
    def network(self):
        return Network.TESTNET

    @property
    def epoch(self):
        return 300

    @property
    def last_block_slot(self):
        return 40000000

    def utxos(self, address):
        return self.utxos_by_address.get(str(address), [])


@pytest.fixture
def signing_key():
    return PaymentSigningKey.generate()


@pytest.fixture
def wallet(signing_key):
    key_hash = PaymentVerificationKey.from_signing_key(signing_key).hash()
    return Wallet(
        signing_key=signing_key,
        key_hash=key_hash,
        address=Address(payment_part=key_hash, network=Network.TESTNET),
    )


@pytest.fixture
def skey_file(tmp_path, signing_key):
    path = tmp_path / "me.sk"
    signing_key.save(str(path))
    return str(path)


@pytest.fixture
def script_hash():
    return plutus_script_hash(PlutusV2Script(bytes.fromhex(COMPILED_CODE)))


@pytest.fixture
def blueprint(tmp_path, script_hash):
    path = tmp_path / "plutus.json"
    path.write_text(
        json.dumps(
            {
                "preamble": {"title": "freezer", "plutusVersion": "v2"},
                "validators": [
                    {
                        "title": "freezer.spend",
                        "compiledCode": COMPILED_CODE,
                        "hash": script_hash.payload.hex(),
                    }
                ],
            }
        )
    )
    return str(path)


@pytest.fixture
def script_address(script_hash):
    return Address(payment_part=script_hash, network=Network.TESTNET)


@pytest.fixture
def chain_context():
    """Mock chain context; ``utxos_by_address`` maps bech32 address to UTxOs."""
    context = Mock()
    context.protocol_param.coins_per_utxo_byte = 4310
    context.utxos_by_address = {}
    context.utxos.side_effect = lambda address: context.utxos_by_address.get(str(address), [])
    return context


@pytest.fixture
def signed_tx():
    tx = Mock()
    tx.id = "b" * 64
    tx.to_cbor_hex.return_value = "84a400"
    return tx


@pytest.fixture
def tx_builder(monkeypatch, signed_tx):
    """Replace TransactionBuilder in the command modules with a recording mock."""
    builder_cls = MagicMock()
    builder = builder_cls.return_value
    builder.build_and_sign.return_value = signed_tx
    for module in ("freezer.lock", "freezer.unlock", "freezer.publish"):
        monkeypatch.setattr(f"{module}.TransactionBuilder", builder_cls)
    return builder


@pytest.fixture
def cli_env(monkeypatch, chain_context):
    """Route the commands at the mocked chain context and skip confirmation polling."""
    awaited = []
    monkeypatch.setattr("freezer.cli.get_chain_context", lambda env, project_id: chain_context)
    monkeypatch.setattr("freezer.cli.await_tx", lambda context, tx_id: awaited.append(tx_id))
    return awaited

"""
Lock funds into the freezer validator.
It includes the transaction builder used for locking and the ``lock`` command.
"""

import logging
from copy import deepcopy
from typing import Optional

import click
from pycardano import (
    ChainContext,
    Datum,
    PlutusData,
    RawCBOR,
    RawPlutusData,
    Transaction,
    TransactionBuilder,
    TransactionOutput,
    Value,
)
from pycardano.exception import DeserializeException
from pycardano.utils import min_lovelace_post_alonzo

from freezer.cli import common_options, finish, with_session
from freezer.datum import build_lock_datum
from freezer.errors import AssetError, DatumError
from freezer.utxo import format_utxo, parse_assets
from freezer.validator import Validator
from freezer.wallet import Wallet

logger = logging.getLogger(__name__)


def locked_min_lovelace(output: TransactionOutput, context: ChainContext) -> int:
    # A zero coin is sized as 1 ADA, as wide as the minimum that replaces it
    sized = TransactionOutput(
        address=output.address,
        amount=Value(0, output.amount.multi_asset),
        datum=output.datum,
    )
    return min_lovelace_post_alonzo(sized, context)


def lock(
    assets: Value,
    into: Validator,
    datum: PlutusData,
    wallet: Wallet,
    context: ChainContext,
) -> Transaction:
    """
    Build and sign a transaction paying ``assets`` to the validator with an inline datum.

    Args:
        assets: Value to lock
        into: Validator whose address receives the funds
        datum: Plutus datum to attach to the output
        wallet: Wallet that funds, signs and receives change
        context: Blockchain context for transaction building

    Returns:
        Transaction: The signed transaction
    """
    contract_address = into.address(wallet.address.network)
    logger.info(f"Locking {assets} into {contract_address}")

    output = TransactionOutput(
        address=contract_address,
        amount=deepcopy(assets),
        datum=datum,
    )
    # Token-only or small locks still need the ledger minimum
    min_lovelace = locked_min_lovelace(output, context)
    if output.amount.coin < min_lovelace:
        logger.info(f"Raising locked lovelace to the minimum of {min_lovelace}")
        output.amount.coin = min_lovelace

    builder = TransactionBuilder(context=context)
    builder.add_input_address(wallet.address)
    builder.add_output(output)
    return builder.build_and_sign(
        signing_keys=[wallet.signing_key],
        change_address=wallet.address,
    )


def parse_arbitrary(cbor_hex: Optional[str]) -> Optional[Datum]:
    if not cbor_hex:
        return None
    try:
        raw = bytes.fromhex(cbor_hex)
        RawPlutusData.from_cbor(raw)
    except (ValueError, DeserializeException) as e:
        raise DatumError(f"--arbitrary is not valid CBOR plutus data: {e}") from e
    # Embedded as given; re-encoding could change definite/indefinite lengths
    return RawCBOR(raw)


@click.command()
@common_options
@click.option("--list-utxos", is_flag=True, help="Print the wallet's UTxOs and exit.")
@click.option("--lock", "locks", multiple=True, metavar="UNIT:AMOUNT", help="Asset to lock, repeatable.")
@click.option("--arbitrary", metavar="CBOR_HEX", help="Arbitrary datum stored next to the owner.")
@with_session
def main(session, dry, list_utxos, locks, arbitrary):
    """Lock assets into the freezer contract."""
    if list_utxos:
        for utxo in session.wallet.utxos(session.context):
            print(format_utxo(utxo))
        return

    if not locks:
        raise AssetError("nothing to lock: pass --lock unit:amount")
    assets = parse_assets(locks)
    datum = build_lock_datum(session.wallet.address, parse_arbitrary(arbitrary))
    logger.info(f"Datum: {datum.to_cbor_hex()}")

    signed_tx = lock(
        assets=assets,
        into=session.validator,
        datum=datum,
        wallet=session.wallet,
        context=session.context,
    )
    finish(session, signed_tx, dry)


if __name__ == "__main__":
    main()

"""
Unlock UTxOs held by the freezer validator.
It includes the collect-from-script transaction builder and the ``unlock`` command.
"""

import logging
from typing import List, Union

import click
from pycardano import (
    ChainContext,
    PlutusData,
    Redeemer,
    Transaction,
    TransactionBuilder,
    UTxO,
)

from freezer.cli import common_options, finish, with_session
from freezer.datum import Void
from freezer.errors import NothingToUnlock, ReferenceScriptError
from freezer.utxo import format_utxo, parse_utxo_ref, select_utxos, utxo_ref
from freezer.validator import PlutusScript
from freezer.wallet import Wallet

logger = logging.getLogger(__name__)


def unlock(
    utxos: List[UTxO],
    from_script: Union[PlutusScript, UTxO],
    redeemer_data: PlutusData,
    wallet: Wallet,
    context: ChainContext,
) -> Transaction:
    """
    Collect UTxOs from the validator in a single transaction.

    Args:
        utxos: UTxOs to unlock from the contract
        from_script: The validator itself, or a UTxO carrying it as a reference script
        redeemer_data: Redeemer payload used for every input
        wallet: Wallet that signs, provides collateral and receives the funds
        context: Blockchain context for transaction building

    Returns:
        Transaction: The signed transaction
    """
    builder = TransactionBuilder(context=context)
    for utxo in utxos:
        logger.info(f"Collecting {utxo_ref(utxo)}")
        builder.add_script_input(
            utxo=utxo,
            script=from_script,
            redeemer=Redeemer(data=redeemer_data),
        )
    # fees and collateral come from the wallet
    builder.add_input_address(wallet.address)
    builder.required_signers = [wallet.key_hash]
    return builder.build_and_sign(
        signing_keys=[wallet.signing_key],
        change_address=wallet.address,
    )


def find_reference_script(context: ChainContext, wallet: Wallet, ref: str) -> UTxO:
    wanted = parse_utxo_ref(ref)
    for utxo in wallet.utxos(context):
        if parse_utxo_ref(utxo_ref(utxo)) != wanted:
            continue
        if utxo.output.script is None:
            raise ReferenceScriptError(f"{ref} does not carry a reference script")
        return utxo
    raise ReferenceScriptError(f"reference script UTxO {ref} not found at {wallet.address}")


@click.command()
@common_options
@click.option("--list-utxos", is_flag=True, help="Print the UTxOs at the script address and exit.")
@click.option("--all", "take_all", is_flag=True, help="Unlock every UTxO at the script address.")
@click.option("--unlock", "refs", multiple=True, metavar="TXHASH#INDEX", help="UTxO to unlock, repeatable.")
@click.option("--mine", is_flag=True, help="Only unlock UTxOs whose datum names this wallet as owner.")
@click.option("--reference", metavar="TXHASH#INDEX", help="Spend through a published reference script.")
@with_session
def main(session, dry, list_utxos, take_all, refs, mine, reference):
    """Unlock assets from the freezer contract."""
    validator = session.validator
    script_address = validator.address(session.network)
    available = session.context.utxos(script_address)
    logger.info(f"Found {len(available)} UTxOs at {script_address}")

    if list_utxos:
        for utxo in available:
            print(format_utxo(utxo))
        return

    owner = session.wallet.key_hash if mine else None
    utxos = select_utxos(
        available,
        refs,
        take_all=take_all or (mine and not refs),
        owner=owner,
    )
    if not utxos:
        raise NothingToUnlock("Nothing to unlock")

    if reference:
        from_script = find_reference_script(session.context, session.wallet, reference)
    else:
        from_script = validator.script

    signed_tx = unlock(
        utxos=utxos,
        from_script=from_script,
        redeemer_data=Void(),
        wallet=session.wallet,
        context=session.context,
    )
    finish(session, signed_tx, dry, waiting_message="Waiting for tx {tx_id}...", announce=False)


if __name__ == "__main__":
    main()

"""
Publish the freezer validator as a reference script held at the wallet's own address.
"""

import logging

import click
from pycardano import ChainContext, Transaction, TransactionBuilder, TransactionOutput

from freezer.cli import common_options, finish, with_session
from freezer.config import PUBLISH_LOVELACE
from freezer.validator import Validator
from freezer.wallet import Wallet

logger = logging.getLogger(__name__)


def publish(
    script: Validator,
    wallet: Wallet,
    context: ChainContext,
    lovelace: int = PUBLISH_LOVELACE,
) -> Transaction:
    logger.info(f"Publishing {script.title or 'validator'} ({script.script_hash.payload.hex()})")
    builder = TransactionBuilder(context=context)
    builder.add_input_address(wallet.address)
    builder.add_output(
        TransactionOutput(
            address=wallet.address,
            amount=lovelace,
            script=script.script,
        )
    )
    return builder.build_and_sign(
        signing_keys=[wallet.signing_key],
        change_address=wallet.address,
    )


@click.command()
@common_options
@click.option("--lovelace", type=int, default=PUBLISH_LOVELACE, show_default=True, help="Value held with the script.")
@with_session
def main(session, dry, lovelace):
    """Publish the validator as a reference script."""
    signed_tx = publish(session.validator, session.wallet, session.context, lovelace=lovelace)
    finish(session, signed_tx, dry, waiting_message="Waiting for tx {tx_id}.")


if __name__ == "__main__":
    main()

# freezer/submit.py

import logging

from blockfrost import ApiError
from pycardano import ChainContext, Transaction
from pycardano.hash import TransactionId
from retry.api import retry_call

from freezer.config import AWAIT_INTERVAL

logger = logging.getLogger(__name__)


class TransactionNotSeen(Exception):
    pass


def submit(context: ChainContext, signed_tx: Transaction, dry: bool = False) -> TransactionId:
    """
    Submit a signed transaction, or print it when ``dry`` is set.

    Returns:
        TransactionId: The hash of the transaction either way.
    """
    if dry:
        print("DRY: transaction not submitted")
        print(f"Tx: {signed_tx.to_cbor_hex()}")
        return signed_tx.id

    logger.info(f"Submitting transaction {signed_tx.id}")
    context.submit_tx(signed_tx)
    return signed_tx.id


def _check_seen(context, tx_hash: str):
    try:
        return context.api.transaction(tx_hash)
    except ApiError as e:
        if getattr(e, "status_code", None) == 404:
            raise TransactionNotSeen(tx_hash) from e
        raise


def await_tx(
    context,
    tx_id: TransactionId,
    interval: float = AWAIT_INTERVAL,
    tries: int = -1,
):
    """
    Poll Blockfrost until the transaction shows up on chain.

    ``tries`` of -1 waits forever; otherwise TransactionNotSeen is raised once
    the attempts run out.
    """
    tx_hash = str(tx_id)
    logger.debug(f"Polling for {tx_hash} every {interval}s")
    return retry_call(
        _check_seen,
        fargs=[context, tx_hash],
        exceptions=TransactionNotSeen,
        tries=tries,
        delay=interval,
        logger=None,
    )

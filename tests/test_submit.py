from unittest.mock import Mock

import pytest
from blockfrost import ApiError

from freezer.submit import TransactionNotSeen, await_tx, submit


def api_error(status_code):
    error = ApiError.__new__(ApiError)
    error.status_code = status_code
    return error


def test_dry_run_prints_instead_of_submitting(signed_tx, capsys):
    context = Mock()

    tx_id = submit(context, signed_tx, dry=True)

    assert tx_id == signed_tx.id
    context.submit_tx.assert_not_called()
    out = capsys.readouterr().out
    assert "DRY: transaction not submitted" in out
    assert "Tx: 84a400" in out


def test_submit(signed_tx):
    context = Mock()

    assert submit(context, signed_tx) == signed_tx.id
    context.submit_tx.assert_called_once_with(signed_tx)


def test_await_until_seen():
    context = Mock()
    context.api.transaction.side_effect = [api_error(404), api_error(404), {"hash": "b" * 64}]

    assert await_tx(context, "b" * 64, interval=0) == {"hash": "b" * 64}
    assert context.api.transaction.call_count == 3


def test_await_gives_up():
    context = Mock()
    context.api.transaction.side_effect = api_error(404)

    with pytest.raises(TransactionNotSeen):
        await_tx(context, "b" * 64, interval=0, tries=2)
    assert context.api.transaction.call_count == 2


def test_await_propagates_other_errors():
    context = Mock()
    context.api.transaction.side_effect = api_error(403)

    with pytest.raises(ApiError):
        await_tx(context, "b" * 64, interval=0)
    assert context.api.transaction.call_count == 1

"""
Options and plumbing shared by the lock, unlock and publish commands.
"""

import functools
import logging
from contextlib import contextmanager

import click

from freezer.config import (
    BLOCKFROST_API_KEY_VAR,
    BLUEPRINT_VAR,
    DEFAULT_BLUEPRINT,
    DEFAULT_ENV,
    ENV_VAR,
    ENVIRONMENTS,
    network_for,
)
from freezer.context import get_chain_context
from freezer.errors import FreezerError
from freezer.submit import await_tx, submit
from freezer.validator import read_validator
from freezer.wallet import select_wallet

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def common_options(f):
    """Wallet, network and blueprint flags every command takes."""
    options = [
        click.option("--dry", is_flag=True, help="Build and sign, but do not submit."),
        click.option("--skey-file", "--skeyFile", "skey_file", help="Payment signing key text envelope."),
        click.option("--mnemonic", help="Wallet recovery phrase."),
        click.option("--mnemonic-file", "--mnemonicFile", "mnemonic_file", help="File holding the recovery phrase."),
        click.option("--blockfrost", envvar=BLOCKFROST_API_KEY_VAR, help="Blockfrost project id."),
        click.option(
            "--env",
            envvar=ENV_VAR,
            default=DEFAULT_ENV,
            show_default=True,
            type=click.Choice(ENVIRONMENTS),
        ),
        click.option(
            "--blueprint",
            envvar=BLUEPRINT_VAR,
            default=DEFAULT_BLUEPRINT,
            show_default=True,
            help="Blueprint JSON holding the compiled validator.",
        ),
        click.option("--validator", "validator_title", help="Validator title; the first one by default."),
        click.option("-v", "--verbose", is_flag=True),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def setup_logging(verbose: bool):
    logging.basicConfig(level=logging.DEBUG if verbose else logging.INFO, format=LOG_FORMAT)


@contextmanager
def reported_errors():
    """Report expected failures as a one line message and exit status 1."""
    try:
        yield
    except FreezerError as e:
        logger.exception("command failed")
        raise click.ClickException(str(e)) from e


class Session:
    """The chain context, wallet and validator a command works with."""

    def __init__(self, env, blockfrost, skey_file, mnemonic, mnemonic_file, blueprint, validator_title):
        self.network = network_for(env)
        self.context = get_chain_context(env=env, project_id=blockfrost)
        self.wallet = select_wallet(
            self.network,
            skey_file=skey_file,
            mnemonic=mnemonic,
            mnemonic_file=mnemonic_file,
        )
        self.blueprint = blueprint
        self.validator_title = validator_title
        self._validator = None

    @property
    def validator(self):
        if self._validator is None:
            self._validator = read_validator(self.blueprint, self.validator_title)
        return self._validator


def with_session(f):
    """Build a Session from the common options and pass it in as ``session``."""

    @functools.wraps(f)
    def wrapper(dry, skey_file, mnemonic, mnemonic_file, blockfrost, env, blueprint, validator_title, verbose, **kwargs):
        setup_logging(verbose)
        with reported_errors():
            session = Session(env, blockfrost, skey_file, mnemonic, mnemonic_file, blueprint, validator_title)
            return f(session, dry=dry, **kwargs)

    return wrapper


def finish(session: Session, signed_tx, dry: bool, waiting_message=None, announce=True):
    """
    Submit (or print) the transaction, then wait for it unless this is a dry run.
    With ``announce`` off only the waiting message is printed, no hash or ``Tx Seen.``.
    """
    tx_id = submit(session.context, signed_tx, dry=dry)
    if announce:
        print(f"Transaction Hash: {tx_id}")
    if not dry:
        if waiting_message:
            print(waiting_message.format(tx_id=tx_id))
        await_tx(session.context, tx_id)
        if announce:
            print("Tx Seen.")
    return tx_id

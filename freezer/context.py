# freezer/context.py

import logging
from typing import Optional

from pycardano import BlockFrostChainContext

from freezer.config import DEFAULT_ENV, ENVIRONMENTS, blockfrost_url
from freezer.errors import ConfigError

logger = logging.getLogger(__name__)


def get_chain_context(
    env: str = DEFAULT_ENV,
    project_id: Optional[str] = None,
    method: str = "blockfrost",
):
    """
    Returns a chain context object for interacting with the Cardano blockchain.

    Currently, only the "blockfrost" method is supported, which uses the
    BlockFrostChainContext class from pycardano.

    Args:
        env (str): Network name, one of "mainnet", "preprod" or "preview".
        project_id (str): The Blockfrost project ID (API key).
        method (str): The name of the method to use for chain context creation.

    Raises:
        ConfigError: If the environment is unknown or no project ID is given.
        ValueError: If an unsupported method is specified.

    Returns:
        BlockFrostChainContext: A context configured for the requested network.
    """
    if method != "blockfrost":
        raise ValueError(f"Unsupported chain context method: {method}")
    if env not in ENVIRONMENTS:
        raise ConfigError(
            f"unknown environment {env!r}, expected one of {', '.join(ENVIRONMENTS)}"
        )
    if not project_id:
        raise ConfigError(
            "no Blockfrost project id: pass --blockfrost or set BLOCKFROST_API_KEY"
        )

    base_url = blockfrost_url(env)
    logger.debug(f"Using Blockfrost at {base_url}")
    return BlockFrostChainContext(project_id=project_id, base_url=base_url)

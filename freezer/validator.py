"""
Reading compiled validators out of a CIP-57 blueprint (plutus.json).
"""

import json
import logging
from dataclasses import dataclass
from typing import Optional, Union

import cbor2
from pycardano import (
    Address,
    Network,
    PlutusV1Script,
    PlutusV2Script,
    PlutusV3Script,
    ScriptHash,
    plutus_script_hash,
)

from freezer.errors import BlueprintError

logger = logging.getLogger(__name__)

PlutusScript = Union[PlutusV1Script, PlutusV2Script, PlutusV3Script]

SCRIPT_TYPES = {
    "v1": PlutusV1Script,
    "v2": PlutusV2Script,
    "v3": PlutusV3Script,
}


@dataclass
class Validator:
    title: str
    type: str
    script: PlutusScript
    script_hash: ScriptHash

    @property
    def cbor_hex(self) -> str:
        """The compiled code wrapped once more as a CBOR byte string."""
        return cbor2.dumps(bytes(self.script)).hex()

    def address(self, network: Network) -> Address:
        return Address(payment_part=self.script_hash, network=network)


def read_validator(path: str, title: Optional[str] = None) -> Validator:
    """
    Read and parse a Plutus validator from a blueprint file.

    Args:
        path: Location of the blueprint JSON.
        title: Title of the validator to use. The first validator is used when omitted.

    Returns:
        Validator: The script, its language version and its hash.

    Raises:
        BlueprintError: If the blueprint cannot be read or does not describe a usable validator.
    """
    try:
        with open(path, "r") as f:
            blueprint = json.load(f)
    except OSError as e:
        raise BlueprintError(f"cannot read blueprint {path}: {e}") from e
    except ValueError as e:
        raise BlueprintError(f"blueprint {path} is not valid JSON: {e}") from e

    validators = blueprint.get("validators") or []
    if not validators:
        raise BlueprintError(f"blueprint {path} has no validators")

    if title is None:
        entry = validators[0]
    else:
        matches = [v for v in validators if v.get("title") == title]
        if not matches:
            raise BlueprintError(f"no validator titled {title!r} in {path}")
        entry = matches[0]

    version = blueprint.get("preamble", {}).get("plutusVersion", "v2")
    if version not in SCRIPT_TYPES:
        raise BlueprintError(f"unsupported plutus version {version!r}")

    try:
        compiled = bytes.fromhex(entry["compiledCode"])
    except (KeyError, ValueError) as e:
        raise BlueprintError(f"validator in {path} has no usable compiledCode") from e

    script = SCRIPT_TYPES[version](compiled)
    script_hash = plutus_script_hash(script)

    declared = entry.get("hash")
    if declared and declared != script_hash.payload.hex():
        raise BlueprintError(
            f"blueprint hash {declared} does not match compiled code hash "
            f"{script_hash.payload.hex()}"
        )

    logger.debug(f"Loaded validator {entry.get('title')} ({script_hash.payload.hex()})")
    return Validator(
        title=entry.get("title", ""),
        type=f"Plutus{version.upper()}",
        script=script,
        script_hash=script_hash,
    )

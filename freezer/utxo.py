import logging
from typing import Dict, Iterable, List, Optional, Tuple

from pycardano import MultiAsset, UTxO, Value
from pycardano.hash import VerificationKeyHash

from freezer.datum import owned_by
from freezer.errors import AssetError

logger = logging.getLogger(__name__)

LOVELACE = "lovelace"
POLICY_ID_HEX_LENGTH = 56


def parse_assets(specs: Iterable[str]) -> Value:
    """
    Turn ``unit:amount`` pairs into a Value. A unit is either ``lovelace`` or a
    policy id followed by the hex asset name. Repeated units add up.
    """
    coin = 0
    tokens: Dict[bytes, Dict[bytes, int]] = {}
    for spec in specs:
        unit, sep, amount = spec.rpartition(":")
        if not sep or not unit:
            raise AssetError(f"expected unit:amount, got {spec!r}")
        try:
            quantity = int(amount)
        except ValueError:
            raise AssetError(f"amount in {spec!r} is not an integer") from None
        if quantity <= 0:
            raise AssetError(f"amount in {spec!r} must be positive")

        if unit == LOVELACE:
            coin += quantity
            continue
        if len(unit) < POLICY_ID_HEX_LENGTH:
            raise AssetError(f"unit {unit!r} is too short to hold a policy id")
        try:
            policy = bytes.fromhex(unit[:POLICY_ID_HEX_LENGTH])
            name = bytes.fromhex(unit[POLICY_ID_HEX_LENGTH:])
        except ValueError:
            raise AssetError(f"unit {unit!r} is not hex") from None
        assets = tokens.setdefault(policy, {})
        assets[name] = assets.get(name, 0) + quantity

    if tokens:
        return Value(coin, MultiAsset.from_primitive(tokens))
    return Value(coin)


def parse_utxo_ref(ref: str) -> Tuple[str, int]:
    tx_hash, sep, index = ref.partition("#")
    if not sep or len(tx_hash) != 64:
        raise AssetError(f"expected <tx hash>#<index>, got {ref!r}")
    try:
        bytes.fromhex(tx_hash)
        return tx_hash.lower(), int(index)
    except ValueError:
        raise AssetError(f"malformed utxo reference {ref!r}") from None


def utxo_ref(utxo: UTxO) -> str:
    return f"{utxo.input.transaction_id.payload.hex()}#{utxo.input.index}"


def asset_amounts(amount) -> List[Tuple[str, int]]:
    if isinstance(amount, int):
        return [(LOVELACE, amount)]
    entries = [(LOVELACE, amount.coin)]
    for policy, assets in amount.multi_asset.items():
        for name, quantity in assets.items():
            entries.append((policy.payload.hex() + name.payload.hex(), quantity))
    return entries


def format_utxo(utxo: UTxO) -> str:
    lines = [f"{utxo_ref(utxo)}:"]
    for unit, quantity in asset_amounts(utxo.output.amount):
        lines.append(f"  {unit}: {quantity}")
    return "\n".join(lines)


def select_utxos(
    available: Iterable[UTxO],
    refs: Iterable[str] = (),
    take_all: bool = False,
    owner: Optional[VerificationKeyHash] = None,
) -> List[UTxO]:
    wanted = {parse_utxo_ref(ref) for ref in refs}
    selected = []
    seen = set()
    for utxo in available:
        ref = parse_utxo_ref(utxo_ref(utxo))
        if ref in seen:
            continue
        if not take_all and ref not in wanted:
            continue
        if owner is not None and not owned_by(utxo.output.datum, owner):
            logger.info(f"Skipping {utxo_ref(utxo)}: not locked by this wallet")
            continue
        seen.add(ref)
        selected.append(utxo)
    return selected

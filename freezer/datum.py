"""
Plutus data shapes understood by the freezer validator.

Owners are multisig scripts encoded as Plutus constructors (tags 121 to 126),
the same layout the staking datums use. Lists inside them are written as
indefinite-length arrays.
"""

import hashlib
from dataclasses import dataclass
from typing import Any, List, Optional, Union

import cbor2
from cbor2 import CBORTag
from pycardano import Address, Datum, IndefiniteList, PlutusData, RawPlutusData
from pycardano.hash import VerificationKeyHash
from pycardano.serialization import RawCBOR

from freezer.errors import DatumError

TAG_BASE = 120


def _indefinite(items) -> IndefiniteList:
    if isinstance(items, IndefiniteList):
        return items
    return IndefiniteList(list(items))


@dataclass
class Signature(PlutusData):
    CONSTR_ID = 0
    key_hash: bytes


@dataclass
class AllOf(PlutusData):
    CONSTR_ID = 1
    scripts: IndefiniteList

    def __post_init__(self):
        super().__post_init__()
        self.scripts = _indefinite(self.scripts)


@dataclass
class AnyOf(PlutusData):
    CONSTR_ID = 2
    scripts: IndefiniteList

    def __post_init__(self):
        super().__post_init__()
        self.scripts = _indefinite(self.scripts)


@dataclass
class AtLeast(PlutusData):
    CONSTR_ID = 3
    required: int
    scripts: IndefiniteList

    def __post_init__(self):
        super().__post_init__()
        self.scripts = _indefinite(self.scripts)


@dataclass
class Before(PlutusData):
    CONSTR_ID = 4
    time: int  # POSIX seconds


@dataclass
class After(PlutusData):
    CONSTR_ID = 5
    time: int  # POSIX seconds


MultisigScript = Union[Signature, AllOf, AnyOf, AtLeast, Before, After]


@dataclass
class Void(PlutusData):
    CONSTR_ID = 0


@dataclass
class LockDatum(PlutusData):
    """Datum attached to every output locked into the freezer."""

    CONSTR_ID = 0
    owner: MultisigScript
    arbitrary: Datum

    @classmethod
    def decode(cls, data: bytes) -> "LockDatum":
        fields = _constr_fields(cbor2.loads(data), cls.CONSTR_ID, 2)
        arbitrary = fields[1]
        if isinstance(arbitrary, CBORTag):
            arbitrary = RawPlutusData(arbitrary)
        return cls(owner=decode_multisig(fields[0]), arbitrary=arbitrary)


@dataclass
class Delegation(PlutusData):
    CONSTR_ID = 0
    pool_ident: bytes
    weight: int


@dataclass
class StakeDatum(PlutusData):
    CONSTR_ID = 0
    owner: MultisigScript
    delegations: IndefiniteList

    def __post_init__(self):
        super().__post_init__()
        self.delegations = _indefinite(self.delegations)

    @classmethod
    def decode(cls, data: bytes) -> "StakeDatum":
        fields = _constr_fields(cbor2.loads(data), cls.CONSTR_ID, 2)
        delegations = []
        for raw in fields[1]:
            pool_ident, weight = _constr_fields(raw, Delegation.CONSTR_ID, 2)
            delegations.append(Delegation(pool_ident=bytes(pool_ident), weight=weight))
        return cls(owner=decode_multisig(fields[0]), delegations=delegations)


def _constr_fields(value: Any, constr_id: int, arity: int) -> List[Any]:
    if not isinstance(value, CBORTag) or value.tag != TAG_BASE + 1 + constr_id:
        raise DatumError(f"expected constructor {constr_id}, got {value!r}")
    fields = list(value.value)
    if len(fields) != arity:
        raise DatumError(
            f"constructor {constr_id} should have {arity} fields, found {len(fields)}"
        )
    return fields


def decode_multisig(value: Any) -> MultisigScript:
    """Turn a decoded CBOR tag back into the multisig script it encodes."""
    if not isinstance(value, CBORTag):
        raise DatumError(f"expected a tagged multisig script, got {value!r}")
    fields = list(value.value)
    kind = value.tag - TAG_BASE
    try:
        if kind == 1:
            return Signature(key_hash=bytes(fields[0]))
        elif kind == 2:
            return AllOf(scripts=[decode_multisig(s) for s in fields[0]])
        elif kind == 3:
            return AnyOf(scripts=[decode_multisig(s) for s in fields[0]])
        elif kind == 4:
            return AtLeast(
                required=fields[0],
                scripts=[decode_multisig(s) for s in fields[1]],
            )
        elif kind == 5:
            return Before(time=fields[0])
        elif kind == 6:
            return After(time=fields[0])
    except (IndexError, TypeError) as e:
        raise DatumError(f"malformed multisig script under tag {value.tag}") from e
    raise DatumError(f"unrecognized tag {kind}")


def multisig_hash(script: MultisigScript) -> str:
    """Blake2b-224 of the script's CBOR, hex encoded."""
    return hashlib.blake2b(script.to_cbor(), digest_size=28).hexdigest()


def build_lock_datum(address: Address, arbitrary: Optional[Datum] = None) -> LockDatum:
    payment_part = address.payment_part
    if not isinstance(payment_part, VerificationKeyHash):
        raise DatumError(f"address {address} is not controlled by a payment key")
    owner = Signature(key_hash=payment_part.payload)
    return LockDatum(owner=owner, arbitrary=arbitrary if arbitrary is not None else Void())


def datum_cbor(datum) -> bytes:
    """CBOR bytes of an output datum in whichever form the chain context returned it."""
    if isinstance(datum, RawCBOR):
        return datum.cbor
    if isinstance(datum, (bytes, bytearray)):
        return bytes(datum)
    return datum.to_cbor()


def owned_by(datum, key_hash: VerificationKeyHash) -> bool:
    """True when the inline datum is a lock datum signed for by ``key_hash``."""
    if datum is None:
        return False
    try:
        lock_datum = LockDatum.decode(datum_cbor(datum))
    except (DatumError, ValueError, cbor2.CBORDecodeError):
        return False
    owner = lock_datum.owner
    return isinstance(owner, Signature) and owner.key_hash == key_hash.payload

import json

import pytest
from pycardano import Network, PlutusV2Script, PlutusV3Script

from freezer.errors import BlueprintError
from freezer.validator import read_validator
from tests.conftest import COMPILED_CODE


def write_blueprint(tmp_path, body):
    path = tmp_path / "blueprint.json"
    path.write_text(json.dumps(body))
    return str(path)


def test_read_first_validator(blueprint, script_hash, script_address):
    validator = read_validator(blueprint)

    assert validator.title == "freezer.spend"
    assert validator.type == "PlutusV2"
    assert isinstance(validator.script, PlutusV2Script)
    assert validator.script_hash == script_hash
    assert validator.address(Network.TESTNET) == script_address


def test_cbor_hex_wraps_compiled_code(blueprint):
    assert read_validator(blueprint).cbor_hex == "4f" + COMPILED_CODE


def test_pick_by_title(tmp_path):
    path = write_blueprint(
        tmp_path,
        {
            "preamble": {"plutusVersion": "v3"},
            "validators": [
                {"title": "other.mint", "compiledCode": "4e4d0100"},
                {"title": "freezer.spend", "compiledCode": COMPILED_CODE},
            ],
        },
    )
    validator = read_validator(path, title="freezer.spend")

    assert isinstance(validator.script, PlutusV3Script)
    assert bytes(validator.script).hex() == COMPILED_CODE


def test_unknown_title(blueprint):
    with pytest.raises(BlueprintError, match="no validator titled"):
        read_validator(blueprint, title="missing")


def test_hash_mismatch(tmp_path):
    path = write_blueprint(
        tmp_path,
        {"validators": [{"compiledCode": COMPILED_CODE, "hash": "00" * 28}]},
    )
    with pytest.raises(BlueprintError, match="does not match"):
        read_validator(path)


@pytest.mark.parametrize(
    "body",
    [
        {"validators": []},
        {"validators": [{"title": "x"}]},
        {"validators": [{"compiledCode": "zz"}]},
        {"preamble": {"plutusVersion": "v9"}, "validators": [{"compiledCode": COMPILED_CODE}]},
    ],
)
def test_bad_blueprints(tmp_path, body):
    with pytest.raises(BlueprintError):
        read_validator(write_blueprint(tmp_path, body))


def test_missing_file(tmp_path):
    with pytest.raises(BlueprintError, match="cannot read blueprint"):
        read_validator(str(tmp_path / "nope.json"))


def test_not_json(tmp_path):
    path = tmp_path / "plutus.json"
    path.write_text("{not json")
    with pytest.raises(BlueprintError):
        read_validator(str(path))

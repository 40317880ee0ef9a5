import pytest

from taxtoken.config import ZERO_ADDRESS
from taxtoken.errors import InvalidAddress
from taxtoken.ledger.owner_gate import OwnerGate

OWNER = "0x" + "0f" * 20


def test_is_owner():
    gate = OwnerGate(OWNER)

    assert gate.is_owner(OWNER)
    assert gate.is_owner(OWNER.upper().replace("0X", "0x"))
    assert not gate.is_owner("0x" + "11" * 20)
    assert not gate.is_owner(None)


def test_zero_owner_rejected():
    with pytest.raises(InvalidAddress):
        OwnerGate(ZERO_ADDRESS)

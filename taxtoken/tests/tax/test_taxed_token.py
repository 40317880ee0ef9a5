import pytest

from taxtoken.config import DECIMALS
from taxtoken.errors import (
    AlreadyRegistered,
    InsufficientAllowance,
    InvalidAddress,
    InvalidSchedule,
    Unauthorized,
)
from taxtoken.ledger.ledger import Ledger
from taxtoken.tax.taxed_token import TaxedToken

OWNER = "0x" + "0f" * 20
ALICE = "0x" + "a1" * 20
BOB = "0x" + "b0" * 20
POOL = "0x" + "9a" * 20
LAUNCH = 1_700_000_000


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock(LAUNCH)


@pytest.fixture
def token(clock):
    return TaxedToken(
        OWNER,
        name="Launch",
        symbol="LCH",
        initial_supply=1_000_000,
        initial_rate=9900,
        breakpoint_rate=3000,
        breakpoint_duration_minutes=5,
        final_rate=0,
        final_duration_minutes=30,
        clock=clock,
    )


def test_construction(token):
    assert token.name == "Launch"
    assert token.symbol == "LCH"
    assert token.decimals == DECIMALS
    assert token.owner == OWNER
    assert token.total_supply == 1_000_000
    assert token.balance_of(OWNER) == 1_000_000


def test_schedule_accessors(token):
    assert token.initial_rate == 9900
    assert token.breakpoint_rate == 3000
    assert token.breakpoint_duration == 300
    assert token.final_rate == 0
    assert token.final_duration == 1800
    assert token.pool_address is None
    assert token.launch_timestamp is None
    assert token.current_tax_rate() is None


def test_malformed_schedule_rejected():
    with pytest.raises(InvalidSchedule):
        TaxedToken(OWNER, breakpoint_duration_minutes=30, final_duration_minutes=5)


def test_malformed_schedule_allowed_without_validation():
    token = TaxedToken(
        OWNER,
        breakpoint_duration_minutes=30,
        final_duration_minutes=5,
        validate_schedule=False,
    )

    assert token.breakpoint_duration == 1800


def test_injected_ledger_receives_supply():
    ledger = Ledger()
    token = TaxedToken(OWNER, initial_supply=500, ledger=ledger)

    assert token.ledger is ledger
    assert ledger.balance_of(OWNER) == 500


def test_register_pool_uses_clock(token, clock):
    clock.advance(42)
    token.register_pool(POOL, caller=OWNER)

    assert token.pool_address == POOL
    assert token.launch_timestamp == LAUNCH + 42
    assert token.current_tax_rate() == 9900


def test_register_pool_normalizes_addresses(token):
    token.register_pool(POOL.upper().replace("0X", "0x"), caller=OWNER.upper().replace("0X", "0x"))

    assert token.pool_address == POOL


def test_register_pool_non_owner(token):
    with pytest.raises(Unauthorized):
        token.register_pool(POOL, caller=ALICE)

    assert token.pool_address is None
    assert token.launch_timestamp is None


def test_register_pool_non_string_address(token):
    with pytest.raises(InvalidAddress):
        token.register_pool(12345, caller=OWNER)


def test_register_pool_twice(token):
    token.register_pool(POOL, caller=OWNER)

    with pytest.raises(AlreadyRegistered):
        token.register_pool(ALICE, caller=OWNER)
    with pytest.raises(AlreadyRegistered):
        token.register_pool(ALICE, caller=BOB)


def test_tax_decays_with_clock(token, clock):
    token.register_pool(POOL, caller=OWNER)
    token.transfer(OWNER, POOL, 100_000)

    expected = [(150, 6450), (150, 3000), (600, 1800), (900, 0), (3200, 0)]
    for step, rate in expected:
        clock.advance(step)
        assert token.current_tax_rate() == rate


def test_launch_scenario(token, clock):
    token.transfer(OWNER, POOL, 100_000)
    assert token.total_supply == 1_000_000

    token.register_pool(POOL, caller=OWNER)
    clock.advance(150)
    supply_before = token.total_supply

    receipt = token.transfer(POOL, ALICE, 1000)

    assert receipt.tax_amount == 645
    assert receipt.net_amount == 355
    assert token.balance_of(ALICE) == 355
    assert token.total_supply == supply_before - 645


def test_explicit_now_overrides_clock(token):
    token.register_pool(POOL, caller=OWNER, now=LAUNCH)

    receipt = token.quote(OWNER, POOL, 1000, now=LAUNCH + 900)

    assert receipt.tax_rate == 1800
    assert receipt.tax_amount == 180
    assert token.balance_of(POOL) == 0


def test_transfer_from(token, clock):
    token.register_pool(POOL, caller=OWNER)
    token.approve(OWNER, BOB, 1500)
    clock.advance(150)

    receipt = token.transfer_from(BOB, OWNER, POOL, 1000)

    assert receipt.tax_amount == 645
    assert token.allowance(OWNER, BOB) == 500
    assert token.balance_of(POOL) == 355
    assert token.total_supply == 1_000_000 - 645


def test_transfer_from_exceeds_allowance(token):
    token.approve(OWNER, BOB, 10)

    with pytest.raises(InsufficientAllowance):
        token.transfer_from(BOB, OWNER, ALICE, 11)

    assert token.allowance(OWNER, BOB) == 10
    assert token.balance_of(ALICE) == 0


def test_transfer_from_failure_restores_allowance(token):
    token.transfer(OWNER, ALICE, 100)
    token.approve(ALICE, BOB, 1000)

    with pytest.raises(Exception, match="exceeds balance"):
        token.transfer_from(BOB, ALICE, POOL, 500)

    assert token.allowance(ALICE, BOB) == 1000
    assert token.balance_of(ALICE) == 100


def test_to_json(token):
    token.register_pool(POOL, caller=OWNER)
    info = token.to_json()

    assert info["pool_address"] == POOL
    assert info["launch_timestamp"] == LAUNCH
    assert info["schedule"]["final_duration"] == 1800
    assert info["total_supply"] == 1_000_000

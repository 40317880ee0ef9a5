import time

from taxtoken.config import (
    TOKEN_NAME,
    TOKEN_SYMBOL,
    DECIMALS,
    INITIAL_SUPPLY,
    INITIAL_RATE,
    BREAKPOINT_RATE,
    BREAKPOINT_DURATION_MINUTES,
    FINAL_RATE,
    FINAL_DURATION_MINUTES,
)
from taxtoken.economics import FeeSchedule, current_tax_rate
from taxtoken.ledger.ledger import Ledger
from taxtoken.ledger.owner_gate import OwnerGate
from taxtoken.tax.launch_registrar import LaunchRegistrar
from taxtoken.tax.taxed_transfer import TaxedTransfer
from taxtoken.util.log import log_success
from taxtoken.wallet.wallet import normalize_address


def wall_clock() -> int:
    return int(time.time())


class TaxedToken:
    """
    Fungible token whose transfers to or from the registered liquidity pool
    are taxed on a decaying schedule, the tax being burned.

    The ledger and the owner gate are injected; the token itself only owns
    the fee schedule and the launch state.
    """

    def __init__(
        self,
        owner,
        name=TOKEN_NAME,
        symbol=TOKEN_SYMBOL,
        initial_supply=INITIAL_SUPPLY,
        initial_rate=INITIAL_RATE,
        breakpoint_rate=BREAKPOINT_RATE,
        breakpoint_duration_minutes=BREAKPOINT_DURATION_MINUTES,
        final_rate=FINAL_RATE,
        final_duration_minutes=FINAL_DURATION_MINUTES,
        ledger=None,
        owner_gate=None,
        clock=None,
        validate_schedule=True,
    ):
        owner = normalize_address(owner)
        self.name = name
        self.symbol = symbol
        self.decimals = DECIMALS
        self.ledger = ledger if ledger is not None else Ledger()
        self.owner_gate = owner_gate or OwnerGate(owner)
        self.clock = clock or wall_clock

        self.schedule = FeeSchedule.from_minutes(
            initial_rate,
            breakpoint_rate,
            breakpoint_duration_minutes,
            final_rate,
            final_duration_minutes,
            validate=validate_schedule,
        )
        self.registrar = LaunchRegistrar()
        self.taxed_transfer = TaxedTransfer(self.ledger, self.schedule, self.registrar.state)

        if initial_supply:
            self.ledger.mint(owner, initial_supply)

    @property
    def owner(self):
        return self.owner_gate.owner

    @property
    def pool_address(self):
        return self.registrar.state.pool_address

    @property
    def launch_timestamp(self):
        return self.registrar.state.launch_timestamp

    @property
    def initial_rate(self):
        return self.schedule.initial_rate

    @property
    def breakpoint_rate(self):
        return self.schedule.breakpoint_rate

    @property
    def breakpoint_duration(self):
        return self.schedule.breakpoint_duration

    @property
    def final_rate(self):
        return self.schedule.final_rate

    @property
    def final_duration(self):
        return self.schedule.final_duration

    @property
    def total_supply(self):
        return self.ledger.total_supply

    def balance_of(self, address):
        return self.ledger.balance_of(normalize_address(address))

    def allowance(self, owner, spender):
        return self.ledger.allowance(normalize_address(owner), normalize_address(spender))

    def current_tax_rate(self, now=None):
        """
        Pool tax rate in basis points, or None before the pool is registered.
        """
        if self.launch_timestamp is None:
            return None
        return current_tax_rate(self._now(now), self.launch_timestamp, self.schedule)

    def register_pool(self, address, caller, now=None):
        address = normalize_address(address)
        timestamp = self._now(now)
        self.registrar.register_pool(address, self.owner_gate.is_owner(caller), timestamp)
        log_success(f"[POOL] Registered pool={address} launch={timestamp}")

    def quote(self, sender, recipient, amount, now=None):
        return self.taxed_transfer.quote(
            normalize_address(sender),
            normalize_address(recipient),
            amount,
            self._now(now),
        )

    def transfer(self, sender, recipient, amount, now=None):
        return self.taxed_transfer.transfer(
            normalize_address(sender),
            normalize_address(recipient),
            amount,
            self._now(now),
        )

    def transfer_from(self, spender, sender, recipient, amount, now=None):
        """
        Spend `amount` of the sender's allowance to `spender`, then transfer
        it like `transfer`. The allowance covers the gross amount, tax included.
        """
        sender = normalize_address(sender)
        with self.ledger.atomic():
            self.ledger.spend_allowance(sender, normalize_address(spender), amount)
            return self.transfer(sender, recipient, amount, now)

    def approve(self, owner, spender, amount):
        self.ledger.approve(normalize_address(owner), normalize_address(spender), amount)

    def to_json(self):
        return {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "owner": self.owner,
            "total_supply": self.total_supply,
            "schedule": self.schedule.to_json(),
            **self.registrar.state.to_json(),
        }

    def _now(self, now):
        return self.clock() if now is None else now


if __name__ == '__main__':
    token = TaxedToken('0x' + 'aa' * 20, initial_supply=10_000, clock=lambda: 1_000)
    token.register_pool('0x' + 'bb' * 20, caller='0x' + 'aa' * 20)
    receipt = token.transfer('0x' + 'aa' * 20, '0x' + 'bb' * 20, 1000, now=1_150)
    print(f'Receipt: {receipt}')
    print(f'Token: {token.to_json()}')

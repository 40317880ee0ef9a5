from contextlib import contextmanager

from taxtoken.config import EVENT_TRANSFER, EVENT_APPROVAL, ZERO_ADDRESS
from taxtoken.errors import InvalidAddress, InsufficientBalance, InsufficientAllowance
from taxtoken.util.crypto_hash import crypto_hash
from taxtoken.util.safe_math import checked_add, checked_sub, require_uint
from taxtoken.wallet.wallet import is_zero_address


class Ledger:
    """
    In-memory fungible-token ledger: balances, total supply, allowances and
    an append-only event log. Burns are recorded as transfers to the zero
    address, mints as transfers from it.
    """

    def __init__(self):
        self.balances = {}
        self.allowances = {}
        self.total_supply = 0
        self.events = []

    def balance_of(self, address):
        return self.balances.get(address, 0)

    def allowance(self, owner, spender):
        return self.allowances.get((owner, spender), 0)

    def transfer(self, sender, recipient, amount):
        if is_zero_address(sender):
            raise InvalidAddress("Cannot transfer from the zero address")
        if is_zero_address(recipient):
            raise InvalidAddress("Cannot transfer to the zero address")
        require_uint(amount, "amount")

        sender_balance = self.balance_of(sender)
        if amount > sender_balance:
            raise InsufficientBalance(
                f"Transfer amount {amount} exceeds balance {sender_balance} of {sender}"
            )

        self.balances[sender] = checked_sub(sender_balance, amount)
        self.balances[recipient] = checked_add(self.balance_of(recipient), amount)
        self._emit(EVENT_TRANSFER, sender, recipient, amount)

    def mint(self, recipient, amount):
        if is_zero_address(recipient):
            raise InvalidAddress("Cannot mint to the zero address")

        self.total_supply = checked_add(self.total_supply, amount)
        self.balances[recipient] = checked_add(self.balance_of(recipient), amount)
        self._emit(EVENT_TRANSFER, ZERO_ADDRESS, recipient, amount)

    def burn(self, holder, amount):
        if is_zero_address(holder):
            raise InvalidAddress("Cannot burn from the zero address")
        require_uint(amount, "amount")

        holder_balance = self.balance_of(holder)
        if amount > holder_balance:
            raise InsufficientBalance(
                f"Burn amount {amount} exceeds balance {holder_balance} of {holder}"
            )

        self.balances[holder] = checked_sub(holder_balance, amount)
        self.total_supply = checked_sub(self.total_supply, amount)
        self._emit(EVENT_TRANSFER, holder, ZERO_ADDRESS, amount)

    def approve(self, owner, spender, amount):
        if is_zero_address(owner):
            raise InvalidAddress("Cannot approve from the zero address")
        if is_zero_address(spender):
            raise InvalidAddress("Cannot approve the zero address")

        self.allowances[(owner, spender)] = require_uint(amount, "amount")
        self._emit(EVENT_APPROVAL, owner, spender, amount)

    def spend_allowance(self, owner, spender, amount):
        require_uint(amount, "amount")
        current = self.allowance(owner, spender)
        if amount > current:
            raise InsufficientAllowance(
                f"Amount {amount} exceeds allowance {current} granted by {owner} to {spender}"
            )
        self.allowances[(owner, spender)] = checked_sub(current, amount)

    @contextmanager
    def atomic(self):
        """
        Run a block of ledger operations all-or-nothing: if the block raises,
        balances, allowances, supply and events are restored and the error re-raised.
        """
        snapshot = (
            dict(self.balances),
            dict(self.allowances),
            self.total_supply,
            len(self.events),
        )
        try:
            yield self
        except Exception:
            balances, allowances, total_supply, event_count = snapshot
            self.balances = balances
            self.allowances = allowances
            self.total_supply = total_supply
            del self.events[event_count:]
            raise

    def events_for(self, address=None, limit=None):
        """
        Return events newest first, optionally those touching `address`.
        """
        matching = [
            event for event in reversed(self.events)
            if address is None or address in (event["from"], event["to"])
        ]
        if limit:
            matching = matching[:limit]
        return matching

    def to_json(self):
        return {
            "total_supply": self.total_supply,
            "holders": len([b for b in self.balances.values() if b > 0]),
            "events": len(self.events),
        }

    def _emit(self, event_type, source, target, amount):
        sequence = len(self.events)
        self.events.append({
            "id": crypto_hash(sequence, event_type, source, target, amount)[:16],
            "sequence": sequence,
            "type": event_type,
            "from": source,
            "to": target,
            "amount": amount,
        })

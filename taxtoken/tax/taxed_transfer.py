from dataclasses import dataclass, asdict

from taxtoken.economics import FeeSchedule, current_tax_rate, tax_amount
from taxtoken.tax.launch_registrar import LaunchState
from taxtoken.util.safe_math import checked_sub, require_uint


@dataclass(frozen=True)
class TransferReceipt:
    sender: str
    recipient: str
    amount: int
    net_amount: int
    tax_amount: int
    tax_rate: int

    def to_json(self):
        return asdict(self)


class TaxedTransfer:
    """
    Routes every transfer through the pool tax: transfers touching the pool
    pay the current rate, which is burned from the sender.
    """

    def __init__(self, ledger, schedule: FeeSchedule, launch_state: LaunchState):
        self.ledger = ledger
        self.schedule = schedule
        self.launch_state = launch_state

    def quote(self, sender, recipient, amount, now) -> TransferReceipt:
        require_uint(amount, "amount")

        rate = 0
        tax = 0
        # the calculator is only consulted once the pool exists
        if self.launch_state.touches_pool(sender, recipient):
            rate = current_tax_rate(now, self.launch_state.launch_timestamp, self.schedule)
            tax = tax_amount(amount, rate)

        return TransferReceipt(
            sender=sender,
            recipient=recipient,
            amount=amount,
            net_amount=checked_sub(amount, tax),
            tax_amount=tax,
            tax_rate=rate,
        )

    def transfer(self, sender, recipient, amount, now) -> TransferReceipt:
        receipt = self.quote(sender, recipient, amount, now)

        with self.ledger.atomic():
            self.ledger.transfer(sender, recipient, receipt.net_amount)
            if receipt.tax_amount > 0:
                self.ledger.burn(sender, receipt.tax_amount)

        return receipt

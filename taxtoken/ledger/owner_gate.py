from taxtoken.errors import InvalidAddress
from taxtoken.wallet.wallet import is_zero_address


class OwnerGate:
    """
    Single-owner authorisation. Addresses compare case-insensitively.
    """

    def __init__(self, owner):
        if is_zero_address(owner):
            raise InvalidAddress("Owner cannot be the zero address")
        self.owner = owner

    def is_owner(self, caller) -> bool:
        return bool(caller) and caller.lower() == self.owner.lower()

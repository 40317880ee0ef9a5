from taxtoken.errors import AlreadyRegistered, InvalidAddress, Unauthorized
from taxtoken.util.safe_math import require_uint
from taxtoken.wallet.wallet import is_zero_address


class LaunchState:
    """
    Pool address and launch timestamp. Both unset until registration, then fixed.
    """

    def __init__(self):
        self.pool_address = None
        self.launch_timestamp = None

    @property
    def launched(self) -> bool:
        return self.pool_address is not None

    def touches_pool(self, sender, recipient) -> bool:
        return self.launched and self.pool_address in (sender, recipient)

    def to_json(self):
        return {
            "pool_address": self.pool_address,
            "launch_timestamp": self.launch_timestamp,
        }


class LaunchRegistrar:
    def __init__(self, launch_state: LaunchState = None):
        self.state = launch_state or LaunchState()

    def register_pool(self, candidate_address, caller_is_owner: bool, now: int):
        """
        Bind the pool and start the decay clock. Single use: once registered,
        every later call fails with AlreadyRegistered whoever the caller is.
        """
        if self.state.launched:
            raise AlreadyRegistered(f"Pool already registered at {self.state.pool_address}")
        if not caller_is_owner:
            raise Unauthorized("Only the owner can register the pool")
        if is_zero_address(candidate_address):
            raise InvalidAddress("Pool address cannot be the zero address")
        require_uint(now, "now")

        self.state.launch_timestamp = now
        self.state.pool_address = candidate_address

class TokenError(Exception):
    """
    Base class for every failure raised by the token core and its ledger.
    A raised TokenError always means the call left no state behind.
    """


class Unauthorized(TokenError):
    pass


class InvalidAddress(TokenError):
    pass


class AlreadyRegistered(TokenError):
    pass


class NotLaunched(TokenError):
    pass


class InsufficientBalance(TokenError):
    pass


class InsufficientAllowance(TokenError):
    pass


class ArithmeticFault(TokenError):
    """
    Checked integer arithmetic left the unsigned 256-bit range, divided by zero
    or received a non-integer operand.
    """


class InvalidSchedule(TokenError):
    pass


class BadRequest(TokenError):
    pass

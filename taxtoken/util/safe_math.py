from taxtoken.config import UINT256_MAX
from taxtoken.errors import ArithmeticFault


def require_uint(value, name: str = "value") -> int:
    """
    Return value if it is an integer in [0, UINT256_MAX], otherwise trap.
    bool is rejected even though it subclasses int.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ArithmeticFault(f"{name} must be an integer, got {type(value).__name__}")
    if value < 0:
        raise ArithmeticFault(f"{name} underflow: {value}")
    if value > UINT256_MAX:
        raise ArithmeticFault(f"{name} overflow: {value}")
    return value


def checked_add(a: int, b: int) -> int:
    return require_uint(require_uint(a, "lhs") + require_uint(b, "rhs"), "sum")


def checked_sub(a: int, b: int) -> int:
    return require_uint(require_uint(a, "lhs") - require_uint(b, "rhs"), "difference")


def checked_mul(a: int, b: int) -> int:
    return require_uint(require_uint(a, "lhs") * require_uint(b, "rhs"), "product")


def checked_div(a: int, b: int) -> int:
    """
    Floor division of unsigned operands, trapping on a zero divisor.
    """
    require_uint(a, "dividend")
    if require_uint(b, "divisor") == 0:
        raise ArithmeticFault("division by zero")
    return a // b


def mul_div(a: int, b: int, denominator: int) -> int:
    return checked_div(checked_mul(a, b), denominator)

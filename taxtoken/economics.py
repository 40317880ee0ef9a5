from dataclasses import dataclass

from taxtoken.config import (
    BASE,
    SECONDS_PER_MINUTE,
    INITIAL_RATE,
    BREAKPOINT_RATE,
    BREAKPOINT_DURATION_MINUTES,
    FINAL_RATE,
    FINAL_DURATION_MINUTES,
)
from taxtoken.errors import InvalidSchedule, NotLaunched
from taxtoken.util.safe_math import checked_mul, checked_sub, mul_div, require_uint


@dataclass(frozen=True)
class FeeSchedule:
    """
    Two-phase linear decay of the pool tax, in basis points of BASE.
    Durations are seconds measured from launch.
    """
    initial_rate: int
    breakpoint_rate: int
    breakpoint_duration: int
    final_rate: int
    final_duration: int

    def __post_init__(self):
        for field in ("initial_rate", "breakpoint_rate", "breakpoint_duration", "final_rate", "final_duration"):
            require_uint(getattr(self, field), field)

    @classmethod
    def from_minutes(cls, initial_rate, breakpoint_rate, breakpoint_duration_minutes, final_rate, final_duration_minutes, validate=True):
        schedule = cls(
            initial_rate=initial_rate,
            breakpoint_rate=breakpoint_rate,
            breakpoint_duration=checked_mul(breakpoint_duration_minutes, SECONDS_PER_MINUTE),
            final_rate=final_rate,
            final_duration=checked_mul(final_duration_minutes, SECONDS_PER_MINUTE),
        )
        if validate:
            schedule.validate()
        return schedule

    def validate(self):
        """
        Reject schedules the decay formula cannot price correctly.
        """
        if self.initial_rate > BASE:
            raise InvalidSchedule(f"Initial rate {self.initial_rate} exceeds {BASE} basis points")
        if not self.final_rate <= self.breakpoint_rate <= self.initial_rate:
            raise InvalidSchedule(
                "Rates must be non-increasing: "
                f"initial={self.initial_rate} breakpoint={self.breakpoint_rate} final={self.final_rate}"
            )
        if self.breakpoint_duration == 0:
            raise InvalidSchedule("Breakpoint duration must be positive")
        if self.breakpoint_duration >= self.final_duration:
            raise InvalidSchedule(
                f"Breakpoint duration {self.breakpoint_duration}s must be shorter than "
                f"final duration {self.final_duration}s"
            )

    def to_json(self):
        return {
            "initial_rate": self.initial_rate,
            "breakpoint_rate": self.breakpoint_rate,
            "breakpoint_duration": self.breakpoint_duration,
            "final_rate": self.final_rate,
            "final_duration": self.final_duration,
        }


def current_tax_rate(now: int, launch_timestamp: int, schedule: FeeSchedule) -> int:
    """
    Compute the pool tax rate in basis points at time `now` (seconds).

    Rates fall linearly from initial_rate to breakpoint_rate over the first
    breakpoint_duration seconds, then linearly to final_rate at
    final_duration, and stay there. Divisions truncate, so the rate may sit up
    to one basis point above the ideal line.
    """
    if launch_timestamp is None:
        raise NotLaunched("Tax rate is undefined before the pool is registered")

    elapsed = checked_sub(now, launch_timestamp)

    if elapsed >= schedule.final_duration:
        return schedule.final_rate

    if elapsed < schedule.breakpoint_duration:
        drop = mul_div(
            checked_sub(schedule.initial_rate, schedule.breakpoint_rate),
            elapsed,
            schedule.breakpoint_duration,
        )
        return checked_sub(schedule.initial_rate, drop)

    # at elapsed == breakpoint_duration the drop is zero
    drop = mul_div(
        checked_sub(schedule.breakpoint_rate, schedule.final_rate),
        checked_sub(elapsed, schedule.breakpoint_duration),
        checked_sub(schedule.final_duration, schedule.breakpoint_duration),
    )
    return checked_sub(schedule.breakpoint_rate, drop)


def tax_amount(amount: int, rate: int) -> int:
    return mul_div(amount, rate, BASE)


def default_fee_schedule() -> FeeSchedule:
    """
    Build the schedule configured in taxtoken.config.
    """
    return FeeSchedule.from_minutes(
        INITIAL_RATE,
        BREAKPOINT_RATE,
        BREAKPOINT_DURATION_MINUTES,
        FINAL_RATE,
        FINAL_DURATION_MINUTES,
    )


if __name__ == '__main__':
    schedule = default_fee_schedule()
    for elapsed in (0, 150, 300, 900, 1800, 5000):
        print(f'elapsed={elapsed}s rate={current_tax_rate(elapsed, 0, schedule)}')

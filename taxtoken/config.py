SECONDS = 1
MINUTES = 60 * SECONDS
SECONDS_PER_MINUTE = MINUTES

# Rates are basis points of BASE (9900 = 99%)
BASE = 10_000

# Storage bounds, values outside trap instead of wrapping
UINT256_MAX = 2 ** 256 - 1

ZERO_ADDRESS = "0x" + "0" * 40
ADDRESS_HEX_LENGTH = 40

# Token metadata
TOKEN_NAME = "Launch Tax Token"
TOKEN_SYMBOL = "LTT"
DECIMALS = 18
INITIAL_SUPPLY = 1_000_000_000 * 10 ** DECIMALS

# Decay schedule: 99% at launch, 30% after 5 minutes, 0% after 30 minutes
INITIAL_RATE = 9900
BREAKPOINT_RATE = 3000
BREAKPOINT_DURATION_MINUTES = 5
FINAL_RATE = 0
FINAL_DURATION_MINUTES = 30

# Event types recorded by the ledger
EVENT_TRANSFER = "Transfer"
EVENT_APPROVAL = "Approval"

# HTTP defaults
API_PORT = 5000
EVENTS_PAGE_LIMIT = 50
EVENTS_PAGE_MAX = 200

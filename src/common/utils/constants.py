import os

DEFAULT_FULL_REFUND_BEFORE_DAYS = 7
DEFAULT_PARTIAL_REFUND_BEFORE_DAYS = 3
DEFAULT_NO_REFUND_BEFORE_DAYS = 1
DEFAULT_PARTIAL_REFUND_PERCENTAGE = 50

# 1 LKR in USD, display only
EXCHANGE_RATE_LKR_TO_USD = float(os.environ.get("EXCHANGE_RATE_LKR_TO_USD", "0.00333"))

TOKEN_BYTES = 18
TOKEN_GENERATION_ATTEMPTS = 10

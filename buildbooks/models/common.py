import enum
import secrets
import string
from typing import Optional


class PaymentMode(str, enum.Enum):
    bank = "bank"
    cash = "cash"


class CashLocation(str, enum.Enum):
    locker1 = "locker1"
    locker2 = "locker2"


class FundingSource(str, enum.Enum):
    """Independent pools of money whose balances are tracked separately."""
    bank = "bank"
    locker1 = "locker1"
    locker2 = "locker2"


def generate_custom_id(prefix: str, length: int = 8) -> str:
    random_part = ''.join(secrets.choice(string.ascii_uppercase + string.digits)
                          for _ in range(length))
    return f"{prefix}-{random_part}"


def funding_source_for(mode, cash_location=None) -> Optional[FundingSource]:
    """Map a payment channel (mode + cash location) to its funding source."""
    if mode == PaymentMode.bank:
        return FundingSource.bank
    if mode == PaymentMode.cash and cash_location is not None:
        return FundingSource(CashLocation(cash_location).value)
    return None

from buildbooks.core.exceptions import ValidationError
from buildbooks.models.common import CashLocation, PaymentMode


def validate_payment_channel(mode, cash_location=None, bank_name=None, account_number=None):
    """
    Validates and normalizes the payment channel of an income, expense or payment.

    Returns:
        (PaymentMode, CashLocation or None, bank_name or None, account_number or None)

    Raises:
        ValidationError on invalid input
    """
    if mode is None:
        raise ValidationError("Payment mode is required")
    try:
        mode_enum = PaymentMode(mode)
    except ValueError:
        raise ValidationError(f"Invalid payment mode: {mode}")

    if mode_enum == PaymentMode.cash:
        if not cash_location:
            raise ValidationError("Cash location required for cash payment")
        try:
            location_enum = CashLocation(cash_location)
        except ValueError:
            raise ValidationError(f"Invalid cash location: {cash_location}")
        return mode_enum, location_enum, None, None

    return mode_enum, None, bank_name, account_number

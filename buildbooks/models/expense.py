import enum
from decimal import Decimal
from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from buildbooks.core.database import Base
from buildbooks.core.exceptions import ValidationError
from buildbooks.models.common import CashLocation, FundingSource, PaymentMode, generate_custom_id

ZERO = Decimal("0.00")


class ExpenseType(str, enum.Enum):
    material = "material"
    labor = "labor"
    factory_overhead = "factory_overhead"
    petty_cash = "petty_cash"


class PaidBy(str, enum.Enum):
    customer = "customer"
    company = "company"


class LaborType(str, enum.Enum):
    direct = "direct"
    contractor = "contractor"


class VendorPaymentStatus(str, enum.Enum):
    pending = "pending"
    partial = "partial"
    full = "full"


def derive_payment_status(paid_amount: Decimal, amount: Decimal) -> VendorPaymentStatus:
    """Status is a pure function of how much of the face amount has been paid."""
    if paid_amount <= 0:
        return VendorPaymentStatus.pending
    if paid_amount >= amount:
        return VendorPaymentStatus.full
    return VendorPaymentStatus.partial


# Per-source paid-amount counter column for each funding source
_SOURCE_COUNTERS = {
    FundingSource.bank: "paid_from_bank",
    FundingSource.locker1: "paid_from_locker1",
    FundingSource.locker2: "paid_from_locker2",
}


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("EXP"))
    project_id = Column(String(20), ForeignKey("projects.id"), nullable=False, index=True)
    type = Column(Enum(ExpenseType), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=True)

    mode = Column(Enum(PaymentMode), nullable=False)
    paid_by = Column(Enum(PaidBy), nullable=False, default=PaidBy.company)
    bank_name = Column(String(100), nullable=True)
    account_number = Column(String(50), nullable=True)
    cash_location = Column(Enum(CashLocation), nullable=True)

    # Material details. vendor_name is the legacy free-text reference.
    vendor_id = Column(String(20), ForeignKey("vendors.id"), nullable=True, index=True)
    vendor_name = Column(String(200), nullable=True)
    material_name = Column(String(200), nullable=True)
    material_quantity = Column(Numeric(15, 3), nullable=True)
    material_unit = Column(String(30), nullable=True)

    # Written only through record_vendor_payment()
    vendor_payment_status = Column(Enum(VendorPaymentStatus), nullable=False, default=VendorPaymentStatus.pending)
    vendor_paid_amount = Column(Numeric(15, 2), nullable=False, default=ZERO)
    paid_from_bank = Column(Numeric(15, 2), nullable=False, default=ZERO)
    paid_from_locker1 = Column(Numeric(15, 2), nullable=False, default=ZERO)
    paid_from_locker2 = Column(Numeric(15, 2), nullable=False, default=ZERO)

    # Labor details. contractor_name is the legacy free-text reference.
    labor_type = Column(Enum(LaborType), nullable=True)
    contractor_id = Column(String(20), ForeignKey("contractors.id"), nullable=True, index=True)
    contractor_name = Column(String(200), nullable=True)
    team_name = Column(String(200), nullable=True)
    labor_name = Column(String(200), nullable=True)

    # Petty cash details
    supervisor_name = Column(String(200), nullable=True)
    petty_cash_summary = Column(Text, nullable=True)
    week_ending = Column(Date, nullable=True)

    entered_by_id = Column(String(20), ForeignKey("users.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    project = relationship("Project")
    vendor = relationship("Vendor")
    contractor = relationship("Contractor")
    entered_by = relationship("User")
    payment_history = relationship(
        "ExpensePaymentHistory",
        back_populates="expense",
        order_by="ExpensePaymentHistory.created_at",
    )

    @property
    def is_material(self) -> bool:
        return self.type == ExpenseType.material

    @property
    def paid_amount(self) -> Decimal:
        return self.vendor_paid_amount or ZERO

    @property
    def outstanding_amount(self) -> Decimal:
        return max(ZERO, (self.amount or ZERO) - self.paid_amount)

    def paid_by_source(self, source: FundingSource) -> Decimal:
        return getattr(self, _SOURCE_COUNTERS[FundingSource(source)]) or ZERO

    def record_vendor_payment(self, amount: Decimal, source: FundingSource) -> VendorPaymentStatus:
        """
        Add a disbursement against this material expense.

        The paid amount and the matching per-source counter move together and
        the status is re-derived, so the three counters always sum to the
        paid amount and the paid amount never exceeds the face amount.
        """
        if not self.is_material:
            raise ValidationError("Vendor payments only apply to material expenses")
        if amount <= 0:
            raise ValidationError("Payment amount must be greater than 0")
        if amount > self.outstanding_amount:
            raise ValidationError(
                f"Payment of {amount} exceeds outstanding {self.outstanding_amount} on expense {self.id}"
            )

        column = _SOURCE_COUNTERS[FundingSource(source)]
        setattr(self, column, self.paid_by_source(source) + amount)
        self.vendor_paid_amount = self.paid_amount + amount
        self.vendor_payment_status = derive_payment_status(self.vendor_paid_amount, self.amount)
        return self.vendor_payment_status

    def revise_amount(self, amount: Decimal) -> None:
        """Change the face amount; a material expense may not drop below what is already paid."""
        if amount <= 0:
            raise ValidationError("Amount must be greater than 0")
        if self.is_material and amount < self.paid_amount:
            raise ValidationError(
                f"Amount {amount} is less than the {self.paid_amount} already paid on expense {self.id}"
            )
        self.amount = amount
        if self.is_material:
            self.vendor_payment_status = derive_payment_status(self.paid_amount, amount)

    def reset_vendor_payment_state(self) -> None:
        """Blank payment state for a freshly constructed expense."""
        self.vendor_paid_amount = ZERO
        self.paid_from_bank = ZERO
        self.paid_from_locker1 = ZERO
        self.paid_from_locker2 = ZERO
        self.vendor_payment_status = VendorPaymentStatus.pending


class ExpensePaymentHistory(Base):
    """One row per (payment, expense) allocation step. Append-only."""
    __tablename__ = "expense_payment_history"

    id = Column(String(20), primary_key=True, default=lambda: generate_custom_id("EPH"))
    expense_id = Column(String(20), ForeignKey("expenses.id"), nullable=False, index=True)
    vendor_payment_id = Column(String(20), ForeignKey("vendor_payments.id"), nullable=True, index=True)
    amount = Column(Numeric(15, 2), nullable=False)
    date = Column(Date, nullable=False)

    mode = Column(Enum(PaymentMode), nullable=False)
    bank_name = Column(String(100), nullable=True)
    account_number = Column(String(50), nullable=True)
    cash_location = Column(Enum(CashLocation), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    expense = relationship("Expense", back_populates="payment_history")

"""
Vendor Payment Service
Applies lump-sum manual payments to a vendor's outstanding material expenses

Example Scenario:
- Jan 1: Cement 100 (pending)
- Feb 1: Steel 200 (pending)
- Mar 1: Pay 150 from locker1 -> oldest expenses paid first (FIFO)
- Result: Cement FULL (100 from locker1), Steel PARTIAL (50 from locker1)
- A payment larger than everything outstanding keeps the remainder as vendor credit
"""

from datetime import date as date_type
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from buildbooks.core.exceptions import NotFoundError, ValidationError
from buildbooks.core.identity import ActingUser
from buildbooks.logger_config import logger
from buildbooks.models.common import funding_source_for
from buildbooks.models.expense import ExpensePaymentHistory, derive_payment_status
from buildbooks.models.vendor import PaymentSourceType, Vendor, VendorPayment
from buildbooks.services.vendor_service import get_vendor_expenses
from buildbooks.utils.payment_validation import validate_payment_channel
from buildbooks.utils.transactions import unit_of_work

ZERO = Decimal("0.00")


class VendorPaymentService:
    """Service for manual payments to vendors."""

    def __init__(self, db: Session):
        self.db = db

    def _get_vendor(self, vendor_id: str, lock: bool = False) -> Vendor:
        query = self.db.query(Vendor).filter(Vendor.id == vendor_id)
        if lock:
            # Serializes concurrent payments to the same vendor until commit
            query = query.with_for_update()
        vendor = query.first()
        if not vendor:
            raise NotFoundError("Vendor", vendor_id)
        return vendor

    @staticmethod
    def _allocate(amount: Decimal, expenses: List) -> List[Dict[str, Any]]:
        """Walk expenses in the given order, taking min(outstanding, remaining) from each."""
        allocations = []
        remaining = amount
        for expense in expenses:
            if remaining <= 0:
                break
            outstanding = expense.outstanding_amount
            if outstanding <= 0:
                continue
            applied = min(outstanding, remaining)
            allocations.append({"expense": expense, "amount": applied})
            remaining -= applied
        return allocations

    def create_manual_payment(
        self,
        vendor_id: str,
        amount: Decimal,
        date: date_type,
        mode,
        acting_user: ActingUser,
        cash_location=None,
        bank_name: Optional[str] = None,
        account_number: Optional[str] = None,
        description: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Record a manual payment and allocate it across outstanding expenses.

        The payment row, every expense update and every history entry are
        committed together or not at all.
        """
        with unit_of_work(self.db, "Vendor payment failed"):
            vendor = self._get_vendor(vendor_id, lock=True)

            if amount is None or amount <= 0:
                raise ValidationError("Payment amount must be greater than 0")
            mode, cash_location, bank_name, account_number = validate_payment_channel(
                mode, cash_location, bank_name, account_number
            )
            source = funding_source_for(mode, cash_location)

            logger.info(f"Manual payment - Vendor: {vendor.id}, Amount: {amount}, Source: {source.value}")

            payment = VendorPayment(
                vendor_id=vendor.id,
                project_id=vendor.project_id or project_id,
                amount=amount,
                applied_amount=ZERO,
                date=date,
                description=description,
                mode=mode,
                bank_name=bank_name,
                account_number=account_number,
                cash_location=cash_location,
                source_type=PaymentSourceType.manual,
                applied_to_expenses=False,
                entered_by_id=acting_user.id,
            )
            self.db.add(payment)
            self.db.flush()

            expenses = get_vendor_expenses(self.db, vendor, project_id=project_id, oldest_first=True)
            allocations = self._allocate(amount, expenses)

            allocation_records = []
            applied_total = ZERO
            for allocation in allocations:
                expense = allocation["expense"]
                applied = allocation["amount"]

                self.db.add(ExpensePaymentHistory(
                    expense_id=expense.id,
                    vendor_payment_id=payment.id,
                    amount=applied,
                    date=date,
                    mode=mode,
                    bank_name=bank_name,
                    account_number=account_number,
                    cash_location=cash_location,
                ))
                status = expense.record_vendor_payment(applied, source)
                applied_total += applied

                allocation_records.append({
                    "expense_id": expense.id,
                    "expense_date": expense.date,
                    "applied_amount": applied,
                    "paid_amount": expense.paid_amount,
                    "outstanding_amount": expense.outstanding_amount,
                    "status": status,
                })

            payment.applied_amount = applied_total
            if applied_total > 0:
                payment.applied_to_expenses = True

        self.db.refresh(payment)
        logger.info(
            f"Payment {payment.id} complete - {len(allocation_records)} expenses affected, "
            f"applied {applied_total}, unapplied {payment.unapplied_amount}"
        )

        return {
            "payment": payment,
            "vendor_name": vendor.name,
            "expenses_affected": len(allocation_records),
            "applied_amount": applied_total,
            "unapplied_amount": payment.unapplied_amount,
            "allocations": allocation_records,
        }

    def simulate_payment(
        self,
        vendor_id: str,
        amount: Decimal,
        project_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Simulate payment allocation without creating it."""
        vendor = self._get_vendor(vendor_id)
        if amount is None or amount <= 0:
            raise ValidationError("Payment amount must be greater than 0")

        expenses = get_vendor_expenses(self.db, vendor, project_id=project_id, oldest_first=True)
        allocations = self._allocate(amount, expenses)

        simulation = []
        for allocation in allocations:
            expense = allocation["expense"]
            applied = allocation["amount"]
            next_paid = expense.paid_amount + applied
            simulation.append({
                "expense_id": expense.id,
                "expense_date": expense.date,
                "current_outstanding": expense.outstanding_amount,
                "will_pay": applied,
                "remaining": expense.outstanding_amount - applied,
                "status": derive_payment_status(next_paid, expense.amount),
            })

        applied_total = sum((a["amount"] for a in allocations), ZERO)
        return {
            "vendor_id": vendor.id,
            "vendor_name": vendor.name,
            "payment_amount": amount,
            "expenses_affected": len(simulation),
            "applied_amount": applied_total,
            "unapplied_amount": amount - applied_total,
            "allocations": simulation,
        }

    def list_payments(
        self,
        vendor_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> List[VendorPayment]:
        query = self.db.query(VendorPayment)
        if vendor_id:
            query = query.filter(VendorPayment.vendor_id == vendor_id)
        if project_id:
            query = query.filter(VendorPayment.project_id == project_id)
        return query.order_by(VendorPayment.date.desc(), VendorPayment.created_at.desc()).all()

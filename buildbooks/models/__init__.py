# buildbooks/models/__init__.py
from .user import User, UserRole
from .project import Project
from .vendor import Vendor, VendorPayment
from .contractor import Contractor
from .income import Income
from .expense import Expense, ExpensePaymentHistory
from .loan import Loan

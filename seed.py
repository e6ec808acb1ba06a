from buildbooks.core.database import Base, SessionLocal, engine
from buildbooks.core.identity import ActingUser
from buildbooks.core.security import create_access_token
from buildbooks.models import (
    Contractor,
    Expense,
    ExpensePaymentHistory,
    Income,
    Loan,
    Project,
    User,
    UserRole,
    Vendor,
    VendorPayment,
)
from buildbooks.models.expense import ExpenseType, VendorPaymentStatus
from buildbooks.models.project import ProjectType
from buildbooks.services.expense_service import create_expense
from buildbooks.services.income_service import create_income
from buildbooks.services.loan_service import create_inter_project_loan, record_loan_return
from buildbooks.services.project_service import create_project
from buildbooks.services.vendor_payment_service import VendorPaymentService

from faker import Faker
from datetime import timedelta
from decimal import Decimal
import random

fake = Faker()


def money(low, high):
    return Decimal(str(round(random.uniform(low, high), -2))).quantize(Decimal("0.01"))


def channel():
    if random.choice([True, False]):
        return {"mode": "bank", "bank_name": random.choice(["HBL", "MCB", "UBL"]),
                "account_number": fake.bban()}
    return {"mode": "cash", "cash_location": random.choice(["locker1", "locker2"])}


Base.metadata.create_all(bind=engine)
db = SessionLocal()

try:
    print("🔄 Clearing existing data...")
    for model in (ExpensePaymentHistory, VendorPayment, Expense, Income, Loan, Vendor, Contractor, Project, User):
        if model is Loan:
            db.query(Loan).update({Loan.linked_loan_id: None})
        db.query(model).delete()
    db.commit()
    print("✅ Data cleared.")

    owner = User(name=fake.name(), email=fake.unique.email(), role=UserRole.owner)
    accountant = User(name=fake.name(), email=fake.unique.email(), role=UserRole.accountant)
    db.add_all([owner, accountant])
    db.commit()
    as_owner = ActingUser(id=owner.id, role=UserRole.owner)
    as_accountant = ActingUser(id=accountant.id, role=UserRole.accountant)
    print(f"✅ Seeded users {owner.id} (owner), {accountant.id} (accountant)")
    for user in (owner, accountant):
        token = create_access_token({"sub": user.id, "role": user.role.value})
        print(f"🔑 {user.role.value} token: {token}")

    print("🔄 Creating projects...")
    projects = []
    for _ in range(3):
        start = fake.date_between(start_date="-1y", end_date="-6M")
        project = create_project(
            db,
            acting_user=as_owner,
            name=f"{fake.street_name()} {random.choice(['Villa', 'Plaza', 'Residency'])}",
            type=random.choice(list(ProjectType)),
            customer_name=fake.name(),
            agreement_total_amount=money(2_000_000, 9_000_000),
            agreement_start_date=start,
            agreement_end_date=start + timedelta(days=365),
            supervisor=fake.first_name(),
            vendors=[fake.company() for _ in range(3)],
            contractors=[fake.company() for _ in range(2)],
        )
        projects.append(project)
    print(f"✅ Seeded {len(projects)} projects")

    print("🔄 Creating income and expenses...")
    for project in projects:
        for _ in range(random.randint(4, 8)):
            create_income(
                db, project_id=project.id, amount=money(100_000, 800_000),
                date=fake.date_between(start_date=project.agreement_start_date, end_date="today"),
                acting_user=as_accountant, description="Installment", **channel(),
            )

        for _ in range(random.randint(8, 15)):
            expense_type = random.choice(list(ExpenseType))
            details = {}
            if expense_type == ExpenseType.material:
                vendor = random.choice(project.vendors)
                details = {
                    "vendor_id": vendor.id,
                    "material_name": random.choice(["Cement", "Steel", "Bricks", "Sand"]),
                    "material_quantity": Decimal(random.randint(10, 500)),
                    "material_unit": random.choice(["bags", "tons", "pcs"]),
                    "vendor_payment_status": random.choice(list(VendorPaymentStatus)),
                }
                details["vendor_paid_amount"] = money(5_000, 50_000)
            elif expense_type == ExpenseType.labor:
                contractor = random.choice(project.contractors)
                details = {"labor_type": "contractor", "contractor_id": contractor.id}
            elif expense_type == ExpenseType.petty_cash:
                details = {"supervisor_name": project.supervisor, "petty_cash_summary": fake.sentence()}

            create_expense(
                db, project_id=project.id, type=expense_type, amount=money(10_000, 300_000),
                date=fake.date_between(start_date=project.agreement_start_date, end_date="today"),
                acting_user=as_accountant, description=fake.sentence(nb_words=4), **channel(), **details,
            )

    print("🔄 Paying vendors...")
    payments = VendorPaymentService(db)
    for project in projects:
        for vendor in project.vendors:
            result = payments.create_manual_payment(
                vendor_id=vendor.id, amount=money(20_000, 200_000),
                date=fake.date_between(start_date="-30d", end_date="today"),
                acting_user=as_accountant, **channel(),
            )
            print(f"💰 {vendor.name}: {result['expenses_affected']} expenses paid, "
                  f"credit {result['unapplied_amount']}")

    print("🔄 Creating an inter-project loan...")
    loan = create_inter_project_loan(
        db, project_id=projects[0].id, linked_project_id=projects[1].id,
        amount_given=Decimal("250000.00"), date_given=fake.date_between(start_date="-60d", end_date="-30d"),
        acting_user=as_owner, description="Bridge funding",
    )
    record_loan_return(db, loan.id, as_owner, amount_returned=Decimal("100000.00"))
    print(f"✅ Loan {loan.id} <-> {loan.linked_loan_id}")

    print("✅ Seeding complete.")
except Exception as e:
    db.rollback()
    print(f"❌ Seeding failed: {e}")
    raise
finally:
    db.close()

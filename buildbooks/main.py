from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from buildbooks.api.v1 import (
    contractors,
    expenses,
    income,
    loans,
    projects,
    summary,
    vendor_payments,
    vendors,
)
from buildbooks.common.error_handlers import register_error_handlers
from buildbooks.core.config import settings

app = FastAPI(title=settings.APP_NAME, version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)

# Register API routers
app.include_router(projects.router, prefix="/api/v1/projects", tags=["projects"])
app.include_router(vendors.router, prefix="/api/v1/vendors", tags=["vendors"])
app.include_router(
    contractors.router, prefix="/api/v1/contractors", tags=["contractors"])
app.include_router(income.router, prefix="/api/v1/income", tags=["income"])
app.include_router(expenses.router, prefix="/api/v1/expenses", tags=["expenses"])
app.include_router(
    vendor_payments.router, prefix="/api/v1/vendor-payments", tags=["vendor payments"])
app.include_router(loans.router, prefix="/api/v1/loans", tags=["loans"])
app.include_router(summary.router, prefix="/api/v1/summary", tags=["summary"])


@app.get("/")
def read_root():
    return {"message": "Welcome to the BuildBooks APIs!"}

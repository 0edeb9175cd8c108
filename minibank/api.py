"""
FastAPI REST API Module

Exposes customer registration, account opening, transfers and the ledger
reports over HTTP. Runs on port 8090 by default.
"""

from datetime import datetime, timezone
import threading
from typing import Optional

from fastapi import FastAPI, Depends, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field
import uvicorn

from .bank import MiniBank
from .config import get_config
from .errors import (
    MiniBankError, ValidationError, NotFoundError,
    DuplicateEmailError, InsufficientBalanceError
)
from .logging_config import setup_logging, get_logger


logger = get_logger("minibank.api")


# Pydantic models for API requests
class CreateCustomerRequest(BaseModel):
    name: str
    email: str
    phone: Optional[str] = None


class UpdateContactRequest(BaseModel):
    email: Optional[str] = None
    phone: Optional[str] = None


class OpenAccountRequest(BaseModel):
    customer_id: int
    account_type: str = Field(..., description="Savings or Current")
    initial_balance: str = Field("0.00", description="Decimal amount as string")


class TransferRequest(BaseModel):
    from_account_id: int
    to_account_id: int
    amount: str = Field(..., description="Decimal amount as string")


ERROR_STATUS = {
    ValidationError: 422,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    DuplicateEmailError: status.HTTP_409_CONFLICT,
    InsufficientBalanceError: status.HTTP_409_CONFLICT,
}


# Ledger instance, created on first request
bank: Optional[MiniBank] = None
_bank_lock = threading.Lock()


def get_bank() -> MiniBank:
    global bank
    if bank is None:
        with _bank_lock:
            if bank is None:
                bank = MiniBank(get_config())
    return bank


app = FastAPI(
    title="MiniBank API",
    description="Customers, accounts, transfers and ledger reports",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)


@app.exception_handler(MiniBankError)
async def minibank_error_handler(request: Request, exc: MiniBankError):
    status_code = ERROR_STATUS.get(type(exc), status.HTTP_400_BAD_REQUEST)
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": exc.error_code}
    )


def _money(value) -> str:
    return str(value.amount)


def _customer_response(customer) -> dict:
    return {
        "id": customer.id,
        "name": customer.name,
        "email": customer.email,
        "phone": customer.phone,
        "created_at": customer.created_at.isoformat()
    }


def _account_response(account) -> dict:
    return {
        "id": account.id,
        "customer_id": account.customer_id,
        "account_type": account.account_type.value,
        "balance": _money(account.balance),
        "currency": account.currency.code,
        "created_at": account.created_at.isoformat()
    }


def _transaction_response(transaction) -> dict:
    return {
        "id": transaction.id,
        "from_account_id": transaction.from_account_id,
        "to_account_id": transaction.to_account_id,
        "amount": _money(transaction.amount),
        "kind": transaction.kind.value,
        "related_transaction_id": transaction.related_transaction_id,
        "transaction_date": transaction.transaction_date.isoformat()
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/")
async def root():
    """Root endpoint with service information"""
    return {
        "system": "MiniBank",
        "version": "1.0.0",
        "endpoints": {
            "docs": "/docs",
            "health": "/health",
            "customers": "/customers",
            "accounts": "/accounts",
            "transfers": "/transfers",
            "transactions": "/transactions",
            "reports": "/reports",
            "audit": "/audit/verify"
        }
    }


# Customers

@app.post("/customers", status_code=status.HTTP_201_CREATED)
def create_customer(request: CreateCustomerRequest, system: MiniBank = Depends(get_bank)):
    """Register a new customer"""
    customer_id = system.open_customer(request.name, request.email, request.phone)
    return {"customer_id": customer_id, "message": "Customer created successfully"}


@app.get("/customers/{customer_id}")
def get_customer(customer_id: int, system: MiniBank = Depends(get_bank)):
    return _customer_response(system.get_customer(customer_id))


@app.patch("/customers/{customer_id}")
def update_contact(customer_id: int, request: UpdateContactRequest,
                   system: MiniBank = Depends(get_bank)):
    """Update a customer's email or phone"""
    customer = system.customer_manager.update_contact(
        customer_id, email=request.email, phone=request.phone
    )
    return _customer_response(customer)


@app.get("/customers/{customer_id}/accounts")
def get_customer_accounts(customer_id: int, system: MiniBank = Depends(get_bank)):
    system.get_customer(customer_id)
    accounts = system.account_manager.get_customer_accounts(customer_id)
    return {"accounts": [_account_response(a) for a in accounts]}


# Accounts

@app.post("/accounts", status_code=status.HTTP_201_CREATED)
def open_account(request: OpenAccountRequest, system: MiniBank = Depends(get_bank)):
    """Open an account for an existing customer"""
    account_id = system.open_account(
        request.customer_id, request.account_type, request.initial_balance
    )
    return {"account_id": account_id, "message": "Account opened successfully"}


@app.get("/accounts/{account_id}")
def get_account(account_id: int, system: MiniBank = Depends(get_bank)):
    return _account_response(system.get_account(account_id))


# Transfers

@app.post("/transfers", status_code=status.HTTP_201_CREATED)
def transfer(request: TransferRequest, system: MiniBank = Depends(get_bank)):
    """Move funds between two accounts"""
    transaction_id = system.transfer(
        request.from_account_id, request.to_account_id, request.amount
    )
    return {"transaction_id": transaction_id, "message": "Transfer completed successfully"}


@app.get("/transactions")
def list_transactions(account_id: Optional[int] = None, system: MiniBank = Depends(get_bank)):
    transactions = system.list_transactions(account_id)
    return {"transactions": [_transaction_response(t) for t in transactions]}


# Reports

@app.get("/reports/transactions")
def transaction_view(system: MiniBank = Depends(get_bank)):
    engine = system.reporting_engine
    return {"rows": engine.export(engine.transaction_view())}


@app.get("/reports/monthly-spending")
def monthly_spending(system: MiniBank = Depends(get_bank)):
    engine = system.reporting_engine
    return {"rows": engine.export(engine.monthly_spending())}


@app.get("/reports/suspicious")
def suspicious_transactions(system: MiniBank = Depends(get_bank)):
    engine = system.reporting_engine
    return {"rows": engine.export(engine.suspicious_transactions())}


@app.get("/reports/top-customers")
def top_customers(limit: Optional[int] = Query(None, ge=0), system: MiniBank = Depends(get_bank)):
    engine = system.reporting_engine
    return {"rows": engine.export(engine.top_customers(limit))}


@app.get("/audit/verify")
def verify_audit(system: MiniBank = Depends(get_bank)):
    return system.verify_audit_trail()


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the FastAPI server"""
    config = get_config()
    setup_logging(config.log_level, config.log_format, config.log_file)
    logger.info("Starting MiniBank API on %s:%s", host or config.api_host, port or config.api_port)
    uvicorn.run(
        "minibank.api:app",
        host=host or config.api_host,
        port=port or config.api_port,
        reload=debug,
        log_level=config.log_level.lower()
    )

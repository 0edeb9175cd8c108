"""
Domain Errors

Every business-rule failure raised by the ledger derives from MiniBankError,
which is a ValueError so callers catching ValueError keep working.
"""


class MiniBankError(ValueError):
    """Base class for ledger errors"""
    error_code = "minibank_error"


class ValidationError(MiniBankError):
    """A required field is missing or a value is malformed"""
    error_code = "validation_error"


class DuplicateEmailError(MiniBankError):
    """A customer with the same email address already exists"""
    error_code = "duplicate_email"

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Customer with email {email} already exists")


class NotFoundError(MiniBankError):
    """A referenced customer, account or transaction does not exist"""
    error_code = "not_found"

    def __init__(self, entity_type: str, entity_id):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type.capitalize()} {entity_id} not found")


class InsufficientBalanceError(MiniBankError):
    """The sender's balance does not cover the transfer amount"""
    error_code = "insufficient_balance"

    def __init__(self, account_id=None, balance=None, amount=None):
        self.account_id = account_id
        self.balance = balance
        self.amount = amount
        super().__init__("Insufficient Balance")

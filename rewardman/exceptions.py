"""Rewardman exceptions."""


class RewardmanError(Exception):
    """
    Structured exception for loyalty operations.

    Every error carries a stable code, a human-readable message and the data
    needed to act on it. Subclasses give the failure category.

    Usage:
        try:
            RedemptionService.redeem_by_code("RST-001", "K7QX2M")
        except InvalidState as e:
            if e.code == "CODE_EXPIRED":
                ask_customer_to_present_again()
    """

    _default_messages = {
        # NotFound
        "MERCHANT_NOT_FOUND": "Restaurant not found",
        "BRANCH_NOT_FOUND": "Branch not found",
        "DINER_NOT_FOUND": "Diner not found",
        "VOUCHER_NOT_FOUND": "Voucher not found",
        "VOUCHER_TYPE_NOT_FOUND": "Voucher type not found",
        "BATCH_NOT_FOUND": "Reconciliation batch not found",
        "CODE_NOT_FOUND": "Invalid or expired code. Ask the customer to present the voucher again",
        # ValidationError
        "INVALID_AMOUNT": "Amount must be greater than zero",
        "BRANCH_REQUIRED": "A branch is required because {merchant_name} keeps loyalty per branch",
        "CODE_REQUIRED": "Voucher code is required",
        "FILENAME_REQUIRED": "A filename is required",
        "CSV_MISSING_BILL_ID_COLUMN": (
            "CSV must contain a column for Bill ID (e.g. 'bill_id', 'billid', 'invoice_id')"
        ),
        "CSV_NO_RECORDS": "No valid records found in CSV file",
        "INVALID_SETTINGS": "Invalid settings",
        "ONBOARDING_INCOMPLETE": "Onboarding details are incomplete",
        # InvalidState
        "VOUCHER_ALREADY_REDEEMED": "Voucher has already been redeemed",
        "VOUCHER_EXPIRED": "Voucher has expired",
        "CODE_EXPIRED": "Code expired. Ask the customer to present the voucher again",
        "VOUCHER_TYPE_INACTIVE": "This voucher type is no longer available",
        "ONBOARDING_STATE": "Onboarding is {status}, expected {expected}",
        # ScopeViolation
        "VOUCHER_WRONG_MERCHANT": "This voucher belongs to {merchant_name} and cannot be redeemed here",
        "VOUCHER_TYPE_WRONG_MERCHANT": "Voucher type does not belong to this restaurant",
        "BRANCH_NOT_ELIGIBLE": "This voucher can only be redeemed at: {eligible_branches}",
        # InsufficientCredits
        "INSUFFICIENT_CREDITS": "You need {required} credit(s) but only have {available}",
    }

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.data = data
        if message is None:
            message = self._default_messages.get(code, code)
            try:
                message = message.format(**data)
            except (KeyError, IndexError):
                pass
        self.message = message
        super().__init__(message)

    def __repr__(self):
        return f"{type(self).__name__}({self.code!r}, {self.message!r})"

    def as_dict(self) -> dict:
        return {
            "error": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }


class NotFound(RewardmanError):
    """Merchant, diner, branch, voucher, voucher type or code binding is missing."""


class ValidationError(RewardmanError):
    """Malformed input: bad amount, missing branch, missing CSV column, bad settings."""


class InvalidState(RewardmanError):
    """Voucher redeemed or expired, code expired, type inactive, onboarding mismatch."""


class ScopeViolation(RewardmanError):
    """Voucher used at the wrong merchant or at an ineligible branch."""


class InsufficientCredits(RewardmanError):
    """Credit pool does not cover the voucher type's cost."""

"""Directory lookups - merchants, branches and diners by code.

Every lookup raises NotFound instead of returning None so that service
operations fail with a specific, caller-visible error.
"""

from rewardman.exceptions import NotFound
from rewardman.models import Branch, Diner, Merchant


def get_merchant(code: str) -> Merchant:
    """Get active merchant by code."""
    try:
        return Merchant.objects.get(code=code, is_active=True)
    except Merchant.DoesNotExist:
        raise NotFound("MERCHANT_NOT_FOUND", merchant_code=code)


def get_diner(code: str) -> Diner:
    """Get active diner by code."""
    try:
        return Diner.objects.get(code=code, is_active=True)
    except Diner.DoesNotExist:
        raise NotFound("DINER_NOT_FOUND", diner_code=code)


def get_branch(merchant: Merchant, code: str | None) -> Branch | None:
    """
    Get an active branch of merchant by code.

    Returns None when code is empty (no branch supplied).
    """
    if not code:
        return None
    try:
        return Branch.objects.get(merchant=merchant, code=code, is_active=True)
    except Branch.DoesNotExist:
        raise NotFound("BRANCH_NOT_FOUND", merchant_code=merchant.code, branch_code=code)


def scoped_branch(merchant: Merchant, branch: Branch | None) -> Branch | None:
    """Branch the balance row is keyed on: the branch itself, or None for org-wide."""
    return branch if merchant.is_branch_scoped else None

"""Utility for resolving account references to codes."""

from microledger.domain.account import AccountService


def resolve_account_code(account_service: AccountService, reference: str) -> str:
    """Resolve an account code or name to an account code.

    An exact code match wins; otherwise the reference must match exactly
    one account name, ignoring case.

    Args:
        account_service: AccountService instance
        reference: Account code or name

    Returns:
        Account code

    Raises:
        ValueError: If no account or more than one account matches
    """
    reference = str(reference).strip()
    if account_service.get_account(reference) is not None:
        return reference

    matches = [
        acc for acc in account_service.list_accounts() if acc.name.lower() == reference.lower()
    ]
    if len(matches) == 1:
        return matches[0].code
    if matches:
        codes = ", ".join(acc.code for acc in matches)
        raise ValueError(f"Account name '{reference}' is ambiguous (codes: {codes})")
    raise ValueError(f"Account '{reference}' not found")

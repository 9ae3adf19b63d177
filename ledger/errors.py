class LedgerError(Exception): ...


class AlreadyProcessed(LedgerError):
    """Duplicate posting or reversal detected through an idempotency key. Callers treat it as success."""


class InvalidState(LedgerError):
    """Reversal requested on a sale whose payment is not in a reversible state."""


class SaleNotFound(LedgerError): ...


class NoLiableSplits(LedgerError):
    """No split of the sale is liable for the requested reversal kind."""


class PartialReversalFailure(LedgerError):
    """Debiting one beneficiary failed; the remaining splits were still processed."""


class AccountResolutionFailure(LedgerError):
    """A split points at an account that does not exist."""


def describe(error: Exception) -> str:
    return f"{type(error).__name__}: {error}"

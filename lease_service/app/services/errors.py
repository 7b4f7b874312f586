class InvalidPaymentAmount(ValueError):
    """Payment amount is non-numeric, non-finite or not positive."""


class DeductionNotFound(LookupError):
    pass


class InvalidSettlementTransition(ValueError):
    pass

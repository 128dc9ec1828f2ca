"""Exception types for the Notorious rules engine."""


class InvariantViolation(AssertionError):
    """Raised when game state breaks an invariant that validation should guarantee.

    Validation failures are reported through result objects; this error
    signals a programming mistake, so callers should not catch it.
    """
    pass

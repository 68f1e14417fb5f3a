"""
Error kinds raised by the weight store, the suggestion tracker and the dataset mutator.
"""


class ReviewError(Exception):
    """Base class for review core errors."""


class NotFoundError(ReviewError, KeyError):
    """A weight or profile id is not known."""

    def __init__(self, kind: str, identifier: str):
        self.kind = kind
        self.identifier = identifier
        super().__init__(f"{kind} '{identifier}' not found")

    def __str__(self):
        return self.args[0]


class DegenerateStateError(ReviewError, ValueError):
    """Normalization denominator is zero; the previous weights are kept."""


class DuplicateApplyError(ReviewError):
    """A suggestion key is already in flight or resolved."""

    def __init__(self, key):
        self.key = key
        super().__init__(f"Suggestion {key} already resolved or in flight")


class MutationError(ReviewError):
    """The dataset could not take a corrected value."""


class MutationFailedError(ReviewError):
    """The downstream mutation failed; the key stays applied."""

    def __init__(self, key, cause: Exception):
        self.key = key
        self.cause = cause
        super().__init__(f"Mutation for suggestion {key} failed: {cause}")

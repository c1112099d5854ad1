"""Exceptions raised by the pricing core.

Only input problems are raised. Collaborator outages degrade to tagged
defaults instead (see ResolutionStatus).
"""


class PricingError(Exception):
    """Base class for all pricing errors."""


class PricingInputError(PricingError, ValueError):
    """The trip request is structurally invalid and cannot be priced.

    No partial quote is ever returned alongside this error.
    """


class CollaboratorError(PricingError):
    """A routing or geocoding backend failed or answered with nothing usable.

    Raised by the HTTP adapters; DistanceResolver and JurisdictionClassifier
    catch it and degrade.
    """

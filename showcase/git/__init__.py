"""Version-control collaborators: checkouts and publishing."""

from .checkout import CheckoutManager, CloneFailure
from .publisher import Publisher, PushFailure

__all__ = ["CheckoutManager", "CloneFailure", "Publisher", "PushFailure"]

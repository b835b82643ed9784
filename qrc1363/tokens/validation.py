"""
Acceptance Validator

Turns a dispatch outcome into a verdict. Only the exact sentinel of the
notification's own kind counts as acceptance.
"""

from enum import Enum

from .dispatch import DispatchOutcome, DispatchStatus
from .interfaces import NotificationKind


class Verdict(Enum):
    ACCEPT = "accept"
    REJECT = "reject"


class AcceptanceValidator:

    @staticmethod
    def validate(kind: NotificationKind, outcome: DispatchOutcome) -> Verdict:
        if outcome.status is not DispatchStatus.RETURNED:
            return Verdict.REJECT
        value = outcome.value
        # Exact type first: a bytes subclass or any object can override __eq__
        if type(value) is not bytes:
            return Verdict.REJECT
        if len(value) != 4 or value != kind.sentinel:
            return Verdict.REJECT
        return Verdict.ACCEPT

"""
Fixture generation errors.

Every failure of a generation run surfaces as one of these. The orchestrator
never returns partial fixture lists: it either completes or raises.
"""

from typing import Any, Dict, List, Optional


class GenerationError(Exception):
    """Base class for all fixture generation failures"""

    code = "GENERATION_ERROR"

    def __init__(self, message: str, details: Optional[List[str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or []

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message, "details": self.details}


class ConfigurationError(GenerationError):
    """Raised when the entrant roster or GenerationConfig cannot produce a schedule"""

    code = "CONFIGURATION_ERROR"


class CapacityError(GenerationError):
    """Raised when the date window, day cap, kickoff times and venues cannot hold every fixture"""

    code = "CAPACITY_ERROR"


class InvariantViolation(GenerationError):
    """Raised when a generated schedule breaks a structural invariant"""

    code = "INVARIANT_VIOLATION"


class DuplicatePairingInvariantViolation(InvariantViolation):
    """Raised when a round robin does not pair every two entrants exactly once per leg"""

    code = "DUPLICATE_PAIRING"


class SlotConflictInvariantViolation(InvariantViolation):
    """Raised when allocated fixtures collide on a slot or overflow a day"""

    code = "SLOT_CONFLICT"

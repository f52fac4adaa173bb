from .webhook import (
    LEGACY_SIGNATURE_HEADER,
    SIGNATURE_HEADER,
    IntakeDecision,
    SourceIntake,
    sign,
    verify_signature,
)

__all__ = [
    "IntakeDecision",
    "LEGACY_SIGNATURE_HEADER",
    "SIGNATURE_HEADER",
    "SourceIntake",
    "sign",
    "verify_signature",
]

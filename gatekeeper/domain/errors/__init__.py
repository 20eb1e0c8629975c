"""Domain errors package.

Usage:
    from gatekeeper.domain.errors import AdmissionError
"""

from gatekeeper.domain.errors.admission_error import AdmissionError

__all__ = ["AdmissionError"]

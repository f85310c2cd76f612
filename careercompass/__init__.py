"""Core package for CareerCompass.

The service layer (:class:`CareerCompassService`) sits between the
FastAPI routes in :mod:`careercompass.server` and the two model-backed
agents (career analysis and mentor chat). The terminal journey in
:mod:`careercompass.graph` drives the same API the web client uses.
"""

__version__ = "0.1.0"

from .service import CareerCompassService  # re-export for convenience
from .storage.memory import MemStorage

__all__ = ["CareerCompassService", "MemStorage", "__version__"]

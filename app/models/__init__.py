from .airline import Airline
from .feature import Feature
from .implementation import Implementation
from .audit import AuditLog

# Ensure all models are registered on Base.metadata
__all__ = ["Airline", "Feature", "Implementation", "AuditLog"]

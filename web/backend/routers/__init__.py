"""API route handlers."""

from .matching import router as matching_router
from .timebanking import router as timebanking_router

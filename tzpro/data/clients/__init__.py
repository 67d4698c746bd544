"""Client sessions."""

from .tzpro_client import TzproClient

__all__ = ["TzproClient"]

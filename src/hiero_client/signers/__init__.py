"""
Signature collection.
"""

from .signature_map import SignatureMap

__all__ = ["SignatureMap"]

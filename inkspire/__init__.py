"""
Inkspire editor core.

Block and inline formatting, paste sanitization, autolinking and guarded
external navigation over an explicit document model.
"""

__version__ = "0.1.0"

"""Fleet operations service.

Order intake with OCR-assisted drafting from scanned shipping documents,
driver and unit rosters, trip event logging, and per-mile cost rollups.
"""

__version__ = "0.1.0"

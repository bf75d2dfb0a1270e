"""
Ledger Kernel

The read-only domain model of a plain-text double-entry ledger:
- Immutable value objects (accounts, amounts, costs, flags)
- One frozen dataclass per directive kind
- Typed exceptions with machine-readable codes
- Structured JSON logging
"""

__version__ = "0.1.0"

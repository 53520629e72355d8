"""
Token Operations Core

Reference resolution, signing-strategy selection and namespaced entity state
for token-management commands against a distributed ledger network.
"""

__version__ = "0.1.0"

"""pqscan — static analyzer flagging quantum-vulnerable patterns in Solidity contracts.

Scans a contract for reliance on classical signature recovery (``ecrecover``)
and raw key-like byte fields, scores the result, and persists a JSON report.
"""

__version__ = "1.0.0"

"""Domain records for transfers, quotes and live rates.

The Pydantic models parse Wise API payloads directly; derived records such as
rate decisions and rebooking results are plain dataclasses.
"""

__all__ = [
    "transfers",
]

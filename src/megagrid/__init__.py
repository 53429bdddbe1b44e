"""
megagrid: collaborative painting client for a shared on-chain grid.

Local edits are painted optimistically, batched, and submitted through a
negotiated wallet session; confirmed events from the remote log are painted as
they arrive.
"""

__version__ = "0.1.0"

__all__ = ["__version__"]

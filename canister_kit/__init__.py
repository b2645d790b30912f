"""Typed canister management records, principals and reject-code classification."""

__version__ = "0.3.3"
__all__ = ["base", "canister", "reject_codes", "snapshots"]
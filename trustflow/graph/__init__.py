"""Graph primitives and helpers.

This package provides the token-keyed residual graph `CapacityGraph`, the
`TrustLedger` holding balances and trust limits, and helper modules for
construction from trust data (`convert`) and serialization (`io`).
"""

"""
Infrastructure Components

Foundational services for the CoinEx futures client:
- networking: WebSocket state, event emitter and frame decoding
- logging: structured logging with pluggable backends
- exceptions: client-wide exception definitions
"""

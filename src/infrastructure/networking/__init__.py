"""
Networking Infrastructure

- websocket: connection/auth state, event emitter, inbound frame decoding
"""

"""
Services Module

Backends the HTTP routes and the realtime layer depend on. Stores come
in a memory (development) and a MongoDB (production) implementation.

Services:
    - store: Document store for users, orders, locations and messages
    - tokens: JWT issue/verify for the auth cookie and socket handshake
"""

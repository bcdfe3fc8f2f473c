"""Authentication.

Learn: Users log in with username/password and receive a signed JWT.
Every other request carries that token as a Bearer credential; the
token alone identifies the caller (no session table, no revocation).

- password.py: bcrypt hashing and verification
- jwt.py: token issuing and verification
- dependencies.py: FastAPI dependency that resolves the caller
"""

"""auth/ -- Credentials, session tokens and the auth gate for the marina backend.

Layer rule: auth/ imports only core/ and third-party libraries.
It does NOT import from api/, web/ or marina/.
api/ and web/ import from auth/, not the other way around.
"""

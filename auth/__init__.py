"""auth/ -- Credentials, bearer tokens, and the access guard for Beacon.

Layer rule: auth/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or locations/.
api/ imports from auth/, not the other way around.
"""

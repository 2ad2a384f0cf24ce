"""locations/ -- Location ledger and visibility redaction for Beacon.

Layer rule: locations/ imports only stdlib, third-party libraries, and core/.
It does NOT import from api/ or auth/. Ownership of the token bound to a
location is checked by the access guard before the ledger is called.
"""

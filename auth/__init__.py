"""auth/ -- Credentials, tokens, authentication gate and authorization policy for Messagely.

Layer rule: auth/ imports only stdlib, third-party libraries and core/.
policy.py additionally reads the Message dataclass from messages/models.py.
It does NOT import from api/. api/ imports from auth/, not the other way around.
"""

"""auth/ -- Credential, token and session core for SessionKit.

Layer rule: auth/ imports only stdlib + third-party libraries (and core/ for
Settings typing). It does NOT import from api/. api/ imports from auth/, not
the other way around.
"""

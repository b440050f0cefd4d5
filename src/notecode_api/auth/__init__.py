"""
Bearer-token authentication: token codec, identity resolver and the request gate.
"""

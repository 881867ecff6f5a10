"""Authentication and authorization.

Learn: Three layers, each in its own module:
1. jwt.py → issue/verify access and refresh tokens (separate secrets)
2. dependencies.py → request gates: authenticate, then require_admin
3. policy.py → which task rows an identity may see or change

Both gates resolve to a CurrentIdentity built from token claims only.
"""

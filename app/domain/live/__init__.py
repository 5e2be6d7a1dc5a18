"""
Live broadcast domain logic.

Includes:
- broadcast: Provisioning, go-live transition coordination, status and teardown.
"""

"""
Domain layer containing core business logic and domain services.

Submodules:
- live: Live broadcast domain logic (provisioning, go-live coordination).
"""

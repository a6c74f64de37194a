"""
Service layer for AWS lookups.

Data sources the provisioning engine resolves at plan time can be checked
ahead of synthesis through these services.
"""

"""
VaultMerkle API Package.

FastAPI REST API for hashing and comparing credential exports.
Requires Python 3.11+.
"""

# Import app lazily to avoid circular imports
# Use: from api.main import app

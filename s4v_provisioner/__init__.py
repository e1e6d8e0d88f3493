"""S4V camera provisioner for Raspberry Pi OS.

Core design goals:
- Single linear run of idempotent steps
- Re-runs skip work that is already done (packages, files, certificates)
- Every host mutation behind a narrow adapter (apt, archives, openssl, systemctl)
- Operator confirmation before anything is replaced
- Centralized logging
"""

__version__ = "0.1.0"

__all__ = ["__version__"]

"""
agp-local: local drafts and game installations for the AGP Studios client.
"""

__version__ = "1.0.0"

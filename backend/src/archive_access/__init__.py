"""Archive access backend - researcher access requests and file download authorization"""

__version__ = "0.1.0"

"""
crl - clipboard record log
Keeps a local, ordered history of plain-text clipboard values
"""

__version__ = "0.3.0"

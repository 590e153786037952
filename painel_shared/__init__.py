"""
Schemas shared between the Painel API server and its clients.
"""

__version__ = "0.1.0"

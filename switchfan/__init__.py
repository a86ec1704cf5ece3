"""
switchfan - cools a network switch with a fan on a TP-Link HS1xx plug
"""

__version__ = "1.0.0"

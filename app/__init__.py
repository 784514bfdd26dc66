"""
                Food Delivery API

Backend for a food delivery platform: account registration and login,
restaurant and menu management, and order placement with status tracking.

Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"

"""
                    Food Swift Server

Backend for a food-delivery front end: user/restaurant/order API,
cookie-based JWT authentication, and a Socket.IO layer for live
delivery tracking and customer/agent chat.

Author: Food Swift Team
Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
__author__ = "Food Swift Team"

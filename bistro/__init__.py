"""
                Bistro Boss Ordering API

Backend for the Bistro restaurant platform: accounts and roles, the food
menu, reviews, shopping carts and paid orders on top of MongoDB and Stripe.
"""

__version__ = "1.0.0"

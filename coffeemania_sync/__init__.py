"""Coffeemania menu and restaurant sync pipeline.

Usage::

    python -m coffeemania_sync                     # Menu + restaurants, once
    python -m coffeemania_sync --every 3600        # Periodic driver
    python -m coffeemania_sync --links             # Print restaurant links
"""

"""
Bot wiring: configuration, database, Discord client and web view.
"""

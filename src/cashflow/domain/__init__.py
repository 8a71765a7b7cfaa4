"""Domain layer for cashflow application.

Services are imported from their modules directly; importing them here
would load the database layer for every pure computation import.
"""

"""
Data layer for the ITAM module
Organized in a tiered structure: core (tenancy, users, settings), assets, notifications
"""

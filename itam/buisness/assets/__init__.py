"""
Asset business layer
Status rules, asset context, actions, history timeline, column settings and CSV export
"""

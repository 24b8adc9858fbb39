"""Presentation layer: blueprints and Jinja templates"""

"""Workflow services used by the route blueprints"""

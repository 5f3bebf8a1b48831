"""Maple command line interface."""

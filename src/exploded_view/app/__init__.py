"""Headless view controller and optional desktop viewer."""

"""Utilities for datapack-loader."""

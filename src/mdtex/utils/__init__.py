#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/mdtex/utils/__init__.py
"""Utility modules for mdtex."""

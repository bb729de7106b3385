"""
Shared Kernel

This module contains base classes and value objects shared across the domain apps.
"""

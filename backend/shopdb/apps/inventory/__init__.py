"""
Inventory module.

Unified inventory view (parts joined with stock), the main inventory table
and buildability of assemblies against current availability.
"""

"""
Production module.

Explodes an assembly's bill of materials and consumes it from stock.
"""

# backend/shopdb/__init__.py
"""
Shop-floor inventory consistency engine.

The data directory is the store: assemblies, parts, BOM rows and stock are
flat delimiter-separated tables, build history is append-only. The apps are:

- catalog:    loads a snapshot of the directory, rewrites the stock table
- inventory:  unified parts + stock view, main inventory, buildability
- production: BOM explosion and stock consumption
- builds:     build history logs and the record-build sequence
"""

"""
Builds module.

Append-only build history (build and panel logs) and the record-build
sequence: stage, commit, replay.
"""

"""
tilestitch test suite

Structure:
- unit/: projection math, bbox resolution, compositing, elevation, writers, config
- integration/: full stitching runs (pipeline + CLI) against an in-memory tile server
"""

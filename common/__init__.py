"""
Shared building blocks for tilestitch:

- types: bounding boxes, tile ranges, decoded tiles, georeference records
- geo: slippy tile grid and Web Mercator (EPSG:3857) math
- errors: exception taxonomy (all fatal for a stitching run)
- utils: running elevation statistics
- logging_setup: JSON logging on stderr
"""

"""Command-line front end for checksums_core."""

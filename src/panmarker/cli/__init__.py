"""
Command line interface for panmarker (entry point: panmarker.cli.main:cli).
"""

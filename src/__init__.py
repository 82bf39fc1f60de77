"""
JMH Report

Turns benchmark results into per-benchmark charts and a Markdown report.

Package structure:
- core/: Records, grouping, plot configurations and pivoting
- reporting/: Results decoding, chart rendering and report writing
- frontend.py: Command line interface
"""

__version__ = "1.0.0"

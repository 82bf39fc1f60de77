"""
Reporting and output generation for the benchmark report generator.

Contains:
- artifacts: Results file decoding and JSON report writing
- plot_declarations: YAML plot declarations loading
- plotting: Chart generation
- reporter: Markdown report generation
"""

from .artifacts import read_results_json, parse_results, write_report_json, ensure_reports_dir
from .plot_declarations import load_plot_registry, registry_from_yaml
from .reporter import generate_report, write_report_files, generate_markdown_report

from mincov.output.json import format_report, write_report
from mincov.output.summary import render_summary

__all__ = ["format_report", "render_summary", "write_report"]

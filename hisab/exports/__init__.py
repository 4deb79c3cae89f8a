"""Export package: read-only text and CSV projections of a group."""

from hisab.exports.summary import generate_summary_csv, generate_summary_text

__all__ = ["generate_summary_csv", "generate_summary_text"]

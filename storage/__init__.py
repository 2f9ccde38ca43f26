"""Storage package providing the durable sample log."""

from .csv_sink import CsvSink, format_record

__all__ = ["CsvSink", "format_record"]

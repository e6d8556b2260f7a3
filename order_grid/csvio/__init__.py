"""CSV import/export for the order grid."""

from .codec import EXPORT_FILENAME, export_csv, import_csv, read_csv_file, write_csv_file

__all__ = [
    "EXPORT_FILENAME",
    "export_csv",
    "import_csv",
    "read_csv_file",
    "write_csv_file",
]

from linkpack.reporting.exporters.csv import build_delimited_export, csv_escape
from linkpack.reporting.exporters.json import build_structured_export, dump_json


__all__ = [
    "build_delimited_export",
    "csv_escape",
    "build_structured_export",
    "dump_json",
]

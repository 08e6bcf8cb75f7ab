"""Domain models for the order reconciliation and shipment document pipeline.

All entities are value objects passed by copy between pipeline stages.
"""

from .config_models import AppConfig, GeneratorSettings
from .error_record import ErrorRecord
from .excel_file import ExcelFile, FileStatus
from .field_metadata import FieldMetadata, ParsedTemplate
from .processing_result import FileStat, ProcessingResult
from .row_data import CanonicalRow, HeaderMapping, RawRow
from .shipment_record import ShipmentRecord
from .validation_error import ValidationError

__all__ = [
    # Configuration models
    "AppConfig",
    "GeneratorSettings",
    # Pipeline models
    "CanonicalRow",
    "FieldMetadata",
    "HeaderMapping",
    "ParsedTemplate",
    "RawRow",
    "ShipmentRecord",
    "ValidationError",
    # Run bookkeeping
    "ErrorRecord",
    "ExcelFile",
    "FileStat",
    "FileStatus",
    "ProcessingResult",
]

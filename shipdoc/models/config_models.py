from __future__ import annotations

from dataclasses import dataclass, field

"""Config dataclasses for the order -> shipment document tool.

These are the typed domain view of config/shipdoc.yml. The loader in
shipdoc/config/loader.py validates the raw YAML and builds these objects.
"""

__all__ = [
    "AppConfig",
    "GeneratorSettings",
]


@dataclass(frozen=True)
class GeneratorSettings:
    """Document synthesis settings.

    Dimension defaults are centimetres; ``default_weight`` is already grams and
    is emitted as-is when a row carries no usable weight.
    """
    default_service_code: str = "DOM.EP"
    default_length: float = 30
    default_width: float = 20
    default_height: float = 10
    default_weight: int = 1000  # grams
    signature_threshold: float = 200  # 金額がこれを超えたら署名オプション付与
    notifications_enabled: bool = False
    duplicate_by_quantity: bool = False


@dataclass(frozen=True)
class AppConfig:
    """Root configuration object for a run."""
    source_directory: str  # Directory scanned for .xlsx order exports
    output_directory: str  # Where <stem>.xml documents are written
    mapping_file: str | None = None  # Manual header mapping (JSON); None = static normalization
    generator: GeneratorSettings = field(default_factory=GeneratorSettings)

"""Content adapters: the capability contract and the registry that resolves them."""

from adapters.base import (
    CAPABILITY_PROTOCOLS,
    AnnotationMapSource,
    AnnotationSource,
    BulkContentSource,
    Capability,
    ContentAdapter,
    CourseItemsSource,
    DeletedContentSource,
    EmbeddedFileResolver,
    HtmlContentSource,
    ReplaceableContentSource,
    SupportType,
    capabilities_of,
)
from adapters.registry import AdapterRegistry, RegisteredAdapter, import_adapter_class

__all__ = [
    "CAPABILITY_PROTOCOLS",
    "AdapterRegistry",
    "AnnotationMapSource",
    "AnnotationSource",
    "BulkContentSource",
    "Capability",
    "ContentAdapter",
    "CourseItemsSource",
    "DeletedContentSource",
    "EmbeddedFileResolver",
    "HtmlContentSource",
    "RegisteredAdapter",
    "ReplaceableContentSource",
    "SupportType",
    "capabilities_of",
    "import_adapter_class",
]

from __future__ import annotations

from functools import lru_cache
from typing import Callable, Dict

from ..detection import FormatKind
from .base import Adapter, ContainerAdapter, EmptyAdapter, StructuredAdapter, TextAdapter, decode_text
from .document import DocumentAdapter
from .pdf import PDFAdapter
from .spreadsheet import SpreadsheetAdapter
from .structured import JSONAdapter, XMLAdapter, YAMLAdapter

_ADAPTER_FACTORIES: Dict[FormatKind, Callable[[], Adapter]] = {
    FormatKind.TEXT: lambda: TextAdapter(FormatKind.TEXT),
    FormatKind.MARKDOWN: lambda: TextAdapter(FormatKind.MARKDOWN),
    FormatKind.JSON: JSONAdapter,
    FormatKind.YAML: YAMLAdapter,
    FormatKind.XML: XMLAdapter,
    FormatKind.SPREADSHEET: SpreadsheetAdapter,
    FormatKind.DOCUMENT: DocumentAdapter,
    FormatKind.PDF: PDFAdapter,
    FormatKind.SLIDEDECK: lambda: EmptyAdapter(FormatKind.SLIDEDECK),
    FormatKind.UNSUPPORTED: lambda: EmptyAdapter(FormatKind.UNSUPPORTED),
}


@lru_cache(maxsize=len(_ADAPTER_FACTORIES))
def get_adapter(kind: FormatKind) -> Adapter:
    factory = _ADAPTER_FACTORIES.get(kind)
    if not factory:
        raise KeyError(f"No adapter registered for {kind}")
    return factory()


__all__ = [
    "Adapter",
    "ContainerAdapter",
    "StructuredAdapter",
    "decode_text",
    "get_adapter",
]

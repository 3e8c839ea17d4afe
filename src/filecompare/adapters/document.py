from __future__ import annotations

from io import BytesIO
from typing import Any, Iterator

import docx
from docx.table import Table
from docx.text.paragraph import Paragraph

from ..detection import FormatKind
from .base import ContainerAdapter


def _iter_paragraphs(container: Any, parent: Any) -> Iterator[Paragraph]:
    """Yield paragraphs in reading order, descending into table cells."""
    for child in container.iterchildren():
        tag = child.tag.rsplit("}", 1)[-1]
        if tag == "p":
            yield Paragraph(child, parent)
        elif tag == "tbl":
            table = Table(child, parent)
            for row in table.rows:
                for cell in row.cells:
                    yield from _iter_paragraphs(cell._tc, cell)


class DocumentAdapter(ContainerAdapter):
    kind = FormatKind.DOCUMENT
    label = "document"

    def extract(self, data: bytes) -> str:
        document = docx.Document(BytesIO(data))
        text = "".join(paragraph.text + "\n\n" for paragraph in _iter_paragraphs(document.element.body, document))
        return text if text.endswith("\n") else text + "\n"


__all__ = ["DocumentAdapter"]

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from .model import InvoiceDocument

logger = logging.getLogger(__name__)


class InvoiceDocumentRepository:
    """Invoice documents discovered once from a list of directories.

    Directories are scanned non-recursively in the given order; the first
    directory providing a document name wins, so custom directories should be
    listed before the bundled one.
    """

    def __init__(self, paths: Sequence[Union[str, Path]], *, base_dir: Optional[Union[str, Path]] = None):
        self._documents: Dict[str, InvoiceDocument] = {}
        base = Path(base_dir) if base_dir is not None else None

        for raw in paths:
            directory = Path(raw)
            if base is not None and not directory.is_absolute():
                directory = base / directory
            if not directory.is_dir():
                logger.warning("Skipping missing invoice document directory %s", directory)
                continue

            for path in sorted(directory.iterdir()):
                if not path.is_file() or path.name.startswith("."):
                    continue
                document = InvoiceDocument(path=path)
                self._documents.setdefault(document.name, document)

        logger.debug("Discovered %d invoice documents", len(self._documents))

    def get_documents(self) -> List[InvoiceDocument]:
        return list(self._documents.values())

    def get_document_by_name(self, name: str) -> Optional[InvoiceDocument]:
        return self._documents.get(name)

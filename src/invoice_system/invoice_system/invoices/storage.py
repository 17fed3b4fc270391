from __future__ import annotations

from pathlib import Path
from typing import Union

from werkzeug.utils import secure_filename

from .model import RenderedInvoice


class InvoiceFileStorage:
    """Stores rendered invoices below one data directory."""

    def __init__(self, data_dir: Union[str, Path]):
        self._data_dir = Path(data_dir)

    def path_for(self, filename: str) -> Path:
        return self._data_dir / secure_filename(filename)

    def save(self, rendered: RenderedInvoice) -> str:
        """Write the file and return the stored name; existing files are never overwritten."""

        self._data_dir.mkdir(parents=True, exist_ok=True)
        first = self.path_for(rendered.filename)
        target = first
        counter = 1
        while target.exists():
            target = first.with_name(f"{first.stem}-{counter}{first.suffix}")
            counter += 1
        target.write_bytes(rendered.content)
        return target.name

    def delete(self, filename: str) -> bool:
        path = self.path_for(filename)
        if not path.is_file():
            return False
        path.unlink()
        return True

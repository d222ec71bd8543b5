"""Delimited file-based storage adapter — implements StoragePort."""

import csv
import io
import os
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Type, TypeVar

from pipebot.adapters.storage.codecs import DEFAULT_CODECS, RecordCodec
from pipebot.ports.outbound import StorageError

T = TypeVar("T")

DELIMITER = ";"
QUOTE_CHAR = '"'


class DelimitedStorage:
    """File-based ``;``-delimited storage implementing StoragePort protocol.

    One file per collection name, one row per record. Field order comes from
    the codec registered for the record type.
    """

    def __init__(self, storage_dir: str = "memory", codecs: Optional[Dict[type, RecordCodec]] = None):
        self._storage_dir = Path(storage_dir)
        self._storage_dir.mkdir(parents=True, exist_ok=True)
        self._codecs: Dict[type, RecordCodec] = dict(DEFAULT_CODECS if codecs is None else codecs)

    def _path(self, name: str) -> Path:
        return self._storage_dir / f"{name}.csv"

    def _codec(self, record_type: type) -> RecordCodec:
        codec = self._codecs.get(record_type)
        if codec is None:
            raise StorageError(f"no codec registered for {record_type.__name__}")
        return codec

    def read_records(self, name: str, record_type: Type[T]) -> List[T]:
        path = self._path(name)
        codec = self._codec(record_type)
        if not path.exists():
            return []
        try:
            content = path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageError(f"cannot read {path}: {e}") from e

        records: List[T] = []
        reader = csv.reader(io.StringIO(content, newline=""), delimiter=DELIMITER, quotechar=QUOTE_CHAR)
        for line_no, row in enumerate(reader, start=1):
            if not row:
                continue
            if len(row) != codec.field_count:
                raise StorageError(
                    f"{path}:{line_no}: expected {codec.field_count} fields, got {len(row)}"
                )
            records.append(codec.decode(row))
        return records

    def write_records(self, name: str, records: Sequence[T]) -> None:
        path = self._path(name)
        buf = io.StringIO(newline="")
        writer = csv.writer(
            buf,
            delimiter=DELIMITER,
            quotechar=QUOTE_CHAR,
            quoting=csv.QUOTE_MINIMAL,
            lineterminator="\n",
        )
        for record in records:
            writer.writerow(self._codec(type(record)).encode(record))

        # Atomic write
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), suffix=".tmp")
        except OSError as e:
            raise StorageError(f"cannot write {path}: {e}") from e
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                f.write(buf.getvalue())
            os.replace(tmp_path, str(path))
        except BaseException as e:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            if isinstance(e, OSError):
                raise StorageError(f"cannot write {path}: {e}") from e
            raise

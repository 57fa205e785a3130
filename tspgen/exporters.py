# File: tspgen/exporters.py
"""
TSPGen - Document Exporter (File-System Manager)
=================================================

Responsible for:
    1. Mirroring each schema file's directory (relative to the project
       root) under the output directory.
    2. Writing rendered documents atomically (write-to-temp then rename).
    3. Refusing to overwrite existing files unless ``force`` is set.

Every write is isolated: a failure is recorded as an export error and the
remaining documents are still written.

Complexity: O(F) where F = number of documents.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, List, Sequence, Tuple

from tspgen.models import TypespecDocument
from tspgen.utils import Timer, count_lines, write_file

if TYPE_CHECKING:
    from tspgen.generator import SchemaFileResult

# ---------------------------------------------------------------------------
# Logger
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("tspgen.exporters")


# ---------------------------------------------------------------------------
# Data classes for export results
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class FileRecord:
    """Immutable record of a single exported document."""

    relative_path: str
    absolute_path: str
    size_bytes: int
    line_count: int
    schema: str


@dataclass(frozen=True, slots=True)
class ExportResult:
    """Final result returned by ``DocumentExporter.export()``."""

    success: bool
    files: Tuple[FileRecord, ...] = ()
    errors: Tuple[str, ...] = ()
    elapsed_seconds: float = 0.0

    @property
    def total_bytes(self) -> int:
        return sum(r.size_bytes for r in self.files)


# ---------------------------------------------------------------------------
# DocumentExporter class
# ---------------------------------------------------------------------------


class DocumentExporter:
    """
    Writes ``TypespecDocument`` objects to the filesystem.

    A document produced from ``<root>/engines/billing/db/schema.rb`` lands
    in ``<output>/engines/billing/db/<document name>``.  Schema files
    outside the project root write straight into ``<output>``.

    Thread-safety: NOT thread-safe.  Use one exporter per export run.
    """

    def __init__(
        self,
        output_dir: Path,
        *,
        project_root: Path,
        force: bool = False,
    ) -> None:
        self._output_dir: Path = output_dir.resolve()
        self._project_root: Path = project_root.resolve()
        self._force: bool = force

        self._errors: List[str] = []
        self._file_records: List[FileRecord] = []

        logger.debug(
            "DocumentExporter initialised: output_dir=%s, force=%s.",
            self._output_dir,
            self._force,
        )

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    # -----------------------------------------------------------------
    # Public API
    # -----------------------------------------------------------------

    def target_directory(self, schema_path: Path) -> Path:
        """Directory receiving the documents generated from *schema_path*."""
        relative: str = os.path.relpath(schema_path.resolve().parent, self._project_root)
        if relative in ("", ".") or relative.startswith(".."):
            return self._output_dir
        return self._output_dir / relative

    def export(
        self,
        documents: Sequence[Tuple["SchemaFileResult", TypespecDocument]],
    ) -> ExportResult:
        """
        Write every (source file, document) pair.

        Returns:
            ExportResult with success flag, file records and error details.
        """
        with Timer("export") as timer:
            for source, document in documents:
                self._write_document(source, document)

        result: ExportResult = ExportResult(
            success=len(self._errors) == 0,
            files=tuple(self._file_records),
            errors=tuple(self._errors),
            elapsed_seconds=timer.elapsed,
        )

        if result.success:
            logger.info(
                "Export completed successfully: %d files, %d bytes, %.3fs.",
                len(result.files),
                result.total_bytes,
                timer.elapsed,
            )
        else:
            logger.error(
                "Export completed with %d error(s) in %.3fs.",
                len(self._errors),
                timer.elapsed,
            )
        return result

    # -----------------------------------------------------------------
    # Internal: file writing
    # -----------------------------------------------------------------

    def _write_document(
        self,
        source: "SchemaFileResult",
        document: TypespecDocument,
    ) -> None:
        full_path: Path = self.target_directory(source.schema_path) / document.name
        try:
            size_bytes: int = write_file(full_path, document.content, overwrite=self._force)
        except FileExistsError:
            self._record_error(
                f"File already exists: {full_path}. Use --force to overwrite."
            )
            return
        except OSError as exc:
            self._record_error(
                f"Failed to write {full_path} (from {source.relative_path}): {exc}"
            )
            return

        self._file_records.append(FileRecord(
            relative_path=full_path.relative_to(self._output_dir).as_posix(),
            absolute_path=str(full_path),
            size_bytes=size_bytes,
            line_count=count_lines(document.content),
            schema=source.relative_path,
        ))
        logger.info("Wrote %s", full_path)

    def _record_error(self, message: str) -> None:
        self._errors.append(message)
        logger.error(message)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "DocumentExporter",
    "ExportResult",
    "FileRecord",
]

logger.debug("tspgen.exporters loaded.")

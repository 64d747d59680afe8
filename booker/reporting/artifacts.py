"""Scenario artifact directories used as the attachment sink."""

from __future__ import annotations

import logging
import os
import re
import shutil
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from booker.constants import ENV_VAR_ARTIFACTS_DIR, JSON_CONTENT_TYPE, TEXT_CONTENT_TYPE

logger = logging.getLogger(__name__)

_EXTENSIONS = {
    JSON_CONTENT_TYPE: "json",
    TEXT_CONTENT_TYPE: "txt",
}


class AttachmentSink(Protocol):
    """Anything that can receive a named report attachment."""

    def attach(self, name: str, content_type: str, content: str) -> None: ...


@dataclass(frozen=True)
class Attachment:
    """Attachment written to a scenario directory.

    Attributes
    ----------
    name : str
        Display name, e.g. "API Response Body"
    content_type : str
        MIME type of the content
    path : Path
        File holding the content
    """

    name: str
    content_type: str
    path: Path


def slugify(name: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or "unnamed"


class ArtifactAttachmentSink:
    """Writes attachments into a per-scenario artifact directory.

    The directory is kept when the scenario fails, so the report files
    survive next to the scenario log, and removed otherwise.

    Attributes
    ----------
    base_dir : Path
        Base directory for all scenario directories
    scenario_dir : Path | None
        Current scenario's artifact directory
    attachments : list[Attachment]
        Attachments written so far, in order
    """

    def __init__(self, base_dir: Path | None = None) -> None:
        if base_dir is None:
            base_dir = Path(os.environ.get(ENV_VAR_ARTIFACTS_DIR, Path.cwd() / "tmp" / "behave"))
        self.base_dir = Path(base_dir)
        self.scenario_dir: Path | None = None
        self.attachments: list[Attachment] = []

    def create_scenario_dir(self, scenario_name: str) -> Path:
        """Create the artifact directory of a scenario.

        The name carries the process id and a short random suffix, so
        parallel workers running the same scenario never share a directory.

        Parameters
        ----------
        scenario_name : str
            Name of the scenario

        Returns
        -------
        Path
            Path to created scenario directory
        """
        suffix = f"{os.getpid()}-{uuid.uuid4().hex[:8]}"
        self.scenario_dir = self.base_dir / f"{slugify(scenario_name)}-{suffix}"
        self.scenario_dir.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Created artifact directory: {self.scenario_dir}")
        return self.scenario_dir

    def write_file(self, filename: str, content: str) -> Path:
        """Write a file into the scenario directory.

        Raises
        ------
        RuntimeError
            If no scenario directory was created
        """
        if self.scenario_dir is None:
            raise RuntimeError(
                "No scenario directory created. Call create_scenario_dir first."
            )

        file_path = self.scenario_dir / filename
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content, encoding="utf-8")
        logger.debug(f"Wrote artifact file: {file_path}")
        return file_path

    def attach(self, name: str, content_type: str, content: str) -> None:
        """Store an attachment as a numbered file named after it."""
        extension = _EXTENSIONS.get(content_type, "txt")
        filename = f"{len(self.attachments) + 1:02d}-{slugify(name)}.{extension}"
        path = self.write_file(filename, content)
        self.attachments.append(Attachment(name=name, content_type=content_type, path=path))
        logger.info(f"Attached '{name}' ({content_type}) to {path}")

    def cleanup(self, preserve_on_failure: bool = True) -> None:
        """Remove the scenario directory unless it must be preserved.

        Parameters
        ----------
        preserve_on_failure : bool, optional
            If True, keep the directory (the scenario failed).
            If False, delete it.
        """
        if self.scenario_dir is None:
            return

        if preserve_on_failure:
            logger.info(f"Preserving artifacts: {self.scenario_dir}")
            return

        try:
            if self.scenario_dir.exists():
                shutil.rmtree(self.scenario_dir)
                logger.debug(f"Cleaned up artifacts: {self.scenario_dir}")
        except OSError as e:
            logger.warning(f"Failed to cleanup artifacts {self.scenario_dir}: {e}")

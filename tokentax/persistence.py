"""
Persistence delegates for taxonomy mutations.

The mutation pipeline changes the in-memory store first and then asks a
delegate to make the change durable. A delegate answers with a plain
bool; any failure is logged here and the pipeline rolls back.
"""

from __future__ import annotations

import json
import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

import yaml

from .models import ArtifactType, Record
from .store.loader import DESCRIPTOR_SUFFIXES

logger = logging.getLogger(__name__)


class Persistence(Protocol):
    """Write-through target for mutations."""

    # True when a reload from disk reflects what ``save``/``delete`` wrote
    durable: bool

    def save(self, artifact_type: ArtifactType, folder: str, record: Record) -> bool: ...

    def delete(self, artifact_type: ArtifactType, folder: str) -> bool: ...

    def folder_exists(self, artifact_type: ArtifactType, folder: str) -> bool: ...


@dataclass
class VcsResponse:
    success: bool
    reason: str = ""


class GitBackend:
    """Thin wrapper over the git CLI for the artifact repository."""

    def __init__(self, repo: Path | str, *, timeout: float = 60.0):
        self.repo = Path(repo)
        self.timeout = timeout

    def _git(self, *args: str) -> VcsResponse:
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=self.repo,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (OSError, subprocess.SubprocessError) as e:
            logger.error("git %s failed: %s", args[0], e)
            return VcsResponse(False, str(e))

        if result.returncode != 0:
            reason = (result.stderr or result.stdout).strip()
            logger.error("git %s exited with %d: %s", args[0], result.returncode, reason)
            return VcsResponse(False, reason)
        return VcsResponse(True, result.stdout.strip())

    def commit(self, message: str) -> VcsResponse:
        """Stage everything under the repo and commit it."""
        staged = self._git("add", "-A")
        if not staged.success:
            return staged
        return self._git("commit", "-m", message)

    def pull(self) -> VcsResponse:
        return self._git("pull")


class NullPersistence:
    """Accepts every change without writing anything."""

    durable = False

    def save(self, artifact_type: ArtifactType, folder: str, record: Record) -> bool:
        logger.debug("Not persisting %s %s", artifact_type.value, folder)
        return True

    def delete(self, artifact_type: ArtifactType, folder: str) -> bool:
        logger.debug("Not persisting deletion of %s %s", artifact_type.value, folder)
        return True

    def folder_exists(self, artifact_type: ArtifactType, folder: str) -> bool:
        return False


def _check_folder(folder: str) -> None:
    if not folder or folder in (".", "..") or "/" in folder or "\\" in folder:
        raise ValueError(f"Invalid artifact folder name: {folder!r}")


def render_descriptor(record: Record, suffix: str = ".json") -> str:
    """Serialize a record as JSON or YAML according to the file suffix."""
    data = record.to_dict()
    if suffix.lower() in (".yaml", ".yml"):
        return yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


class FilesystemPersistence:
    """
    Writes artifacts back into the artifact tree.

    Layout: ``<root>/<type folder>/<folder>/<folder>.json`` plus the
    record's attached files. An existing descriptor keeps its file name
    and format. With a VCS backend and ``commit_on_mutation`` every
    successful change is committed.
    """

    durable = True

    def __init__(
        self,
        root: Path | str,
        *,
        vcs: GitBackend | None = None,
        commit_on_mutation: bool = False,
    ):
        self.root = Path(root)
        self.vcs = vcs
        self.commit_on_mutation = commit_on_mutation

    def artifact_dir(self, artifact_type: ArtifactType, folder: str) -> Path:
        _check_folder(folder)
        return self.root / artifact_type.folder / folder

    def folder_exists(self, artifact_type: ArtifactType, folder: str) -> bool:
        try:
            return self.artifact_dir(artifact_type, folder).exists()
        except ValueError:
            return False

    def _descriptor_path(self, directory: Path, folder: str) -> Path:
        if directory.is_dir():
            existing = sorted(
                p for p in directory.iterdir()
                if p.is_file() and p.suffix.lower() in DESCRIPTOR_SUFFIXES and not p.name.startswith(".")
            )
            if len(existing) == 1:
                return existing[0]
        return directory / f"{folder}.json"

    def save(self, artifact_type: ArtifactType, folder: str, record: Record) -> bool:
        """
        Write the descriptor and attached files into the artifact directory.

        Every file is staged to a temp file first; the staged files are
        renamed into place with the descriptor last. A failure before the
        descriptor rename leaves the descriptor on disk untouched.
        """
        try:
            directory = self.artifact_dir(artifact_type, folder)
            for f in record.artifact.files:
                _check_folder(f.file_name)
        except ValueError as e:
            logger.error("Failed to save %s %s: %s", artifact_type.value, folder, e)
            return False

        created = not directory.exists()
        staged: list[tuple[Path, Path]] = []
        try:
            directory.mkdir(parents=True, exist_ok=True)
            descriptor = self._descriptor_path(directory, folder)
            contents = [(directory / f.file_name, f.file_data) for f in record.artifact.files]
            contents.append((descriptor, render_descriptor(record, descriptor.suffix).encode("utf-8")))

            for target, data in contents:
                temp_path = target.with_name(f".{target.name}.tmp")
                staged.append((temp_path, target))
                temp_path.write_bytes(data)
            for temp_path, target in staged:
                temp_path.replace(target)
        except OSError as e:
            logger.error("Failed to save %s %s: %s", artifact_type.value, folder, e)
            for temp_path, _ in staged:
                temp_path.unlink(missing_ok=True)
            if created:
                shutil.rmtree(directory, ignore_errors=True)
            return False

        logger.info("Saved %s %s to %s", artifact_type.value, record.tooling, descriptor)
        self._commit(f"Save {artifact_type.value} {record.tooling}")
        return True

    def delete(self, artifact_type: ArtifactType, folder: str) -> bool:
        try:
            directory = self.artifact_dir(artifact_type, folder)
            if directory.exists():
                shutil.rmtree(directory)
            else:
                logger.warning("Artifact folder %s already absent", directory)
        except (OSError, ValueError) as e:
            logger.error("Failed to delete %s %s: %s", artifact_type.value, folder, e)
            return False

        logger.info("Deleted %s folder %s", artifact_type.value, folder)
        self._commit(f"Delete {artifact_type.value} {folder}")
        return True

    def _commit(self, message: str) -> None:
        if self.vcs is None or not self.commit_on_mutation:
            return
        response = self.vcs.commit(message)
        if not response.success:
            # The files are written; only the commit is missing
            logger.warning("Change written but not committed: %s", response.reason)

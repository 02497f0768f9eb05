"""
Git Archive Materializer - Clone, tar and gpg-encrypt a source project.

Shells out to ``git`` and ``gpg``; every call is bounded by a timeout.
"""

import logging
import subprocess
import tarfile
from pathlib import Path
from typing import Callable, Optional, Sequence

from ...core.domain.entities import SyncTarget
from ...core.exceptions import ArchiveError, CloneError, EncryptError
from ...core.ports.git_host import GitHostPort
from ...core.ports.materializer import MaterializerPort


Runner = Callable[..., subprocess.CompletedProcess]


class GitArchiveMaterializer(MaterializerPort):
    """
    Builds ``<slot>/archive.tar.gpg`` for a sync target.

    Steps:
    1. Clone the source project and check out the exact resolved commit
    2. Pack the working tree (without ``.git``) into a tarball
    3. Encrypt the tarball for the configured public key
    """

    DEFAULT_TIMEOUT = 600.0

    def __init__(
        self,
        git_host: GitHostPort,
        public_key: str,
        runner: Runner = subprocess.run,
        git_binary: str = "git",
        gpg_binary: str = "gpg",
    ):
        """
        Initialize the materializer.

        Args:
            git_host: Supplies authenticated clone URLs
            public_key: ASCII-armored public key the archives are encrypted for
            runner: subprocess.run compatible callable (injectable for tests)
            git_binary: git executable
            gpg_binary: gpg executable
        """
        self.git_host = git_host
        self.public_key = public_key
        self.git_binary = git_binary
        self.gpg_binary = gpg_binary
        self.logger = logging.getLogger("GitArchiveMaterializer")
        self._run = runner

    def materialize(
        self,
        target: SyncTarget,
        commit_sha: str,
        workdir: Path,
        timeout: Optional[float] = None,
    ) -> Path:
        if timeout is None:
            timeout = self.DEFAULT_TIMEOUT
        workdir = Path(workdir)

        repo_dir = workdir / "repo"
        self.clone(target, commit_sha, repo_dir, timeout)

        tarball = workdir / "archive.tar"
        self.archive(repo_dir, tarball)

        encrypted = workdir / "archive.tar.gpg"
        self.encrypt(tarball, encrypted, workdir, timeout)
        return encrypted

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def clone(self, target: SyncTarget, commit_sha: str, repo_dir: Path, timeout: float) -> None:
        """Clone ``target.source`` and detach at ``commit_sha``."""
        url = self.git_host.clone_url(target.source.identity)
        self.logger.info(f"Cloning {target.source.identity} at {commit_sha}")

        self._call(
            [self.git_binary, "clone", "--quiet", "--no-checkout",
             "--branch", target.source.branch, url, str(repo_dir)],
            CloneError,
            f"git clone of {target.source.identity} failed",
            timeout,
            secret=url,
        )
        self._call(
            [self.git_binary, "-C", str(repo_dir), "checkout", "--quiet", "--detach", commit_sha],
            CloneError,
            f"git checkout of {commit_sha} in {target.source.identity} failed",
            timeout,
        )

    def archive(self, repo_dir: Path, tarball: Path) -> None:
        """Pack the working tree of ``repo_dir`` into ``tarball``."""
        try:
            with tarfile.open(tarball, "w") as tar:
                for entry in sorted(repo_dir.iterdir()):
                    if entry.name == ".git":
                        continue
                    tar.add(entry, arcname=entry.name)
        except (OSError, tarfile.TarError) as e:
            raise ArchiveError(f"Failed to archive {repo_dir}", cause=e) from e

    def encrypt(self, tarball: Path, output: Path, workdir: Path, timeout: float) -> None:
        """Encrypt ``tarball`` for the public key into ``output``."""
        if not self.public_key:
            raise EncryptError("No public key configured")

        gnupg_home = workdir / ".gnupg"
        key_file = workdir / "recipient.asc"
        try:
            gnupg_home.mkdir(mode=0o700, exist_ok=True)
            key_file.write_text(self.public_key)
        except OSError as e:
            raise EncryptError("Failed to prepare gpg home", cause=e) from e

        self._call(
            [self.gpg_binary, "--homedir", str(gnupg_home), "--batch", "--yes",
             "--trust-model", "always", "--recipient-file", str(key_file),
             "--output", str(output), "--encrypt", str(tarball)],
            EncryptError,
            f"gpg encryption of {tarball.name} failed",
            timeout,
        )

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _call(
        self,
        args: Sequence[str],
        error_cls: type,
        message: str,
        timeout: float,
        secret: Optional[str] = None,
    ) -> None:
        # args may embed credentials; only redacted stderr goes into the message
        try:
            self._run(list(args), check=True, capture_output=True, text=True, timeout=timeout)
        except subprocess.CalledProcessError as e:
            stderr = _redact((e.stderr or "").strip(), secret)
            raise error_cls(f"{message}: {stderr[:500]}") from e
        except subprocess.TimeoutExpired as e:
            raise error_cls(f"{message}: timed out after {timeout:g}s") from e
        except OSError as e:
            raise error_cls(f"{message}: {e}", cause=e) from e


def _redact(text: str, secret: Optional[str]) -> str:
    if secret:
        return text.replace(secret, "<clone-url>")
    return text

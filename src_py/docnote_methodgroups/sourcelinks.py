from __future__ import annotations

import logging
import os
import platform
import re
import subprocess
import sys
import sysconfig
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from enum import Enum
from pathlib import Path
from types import ModuleType
from typing import Annotated

from docnote import Note

from docnote_methodgroups.records import ImplementationRecord

logger = logging.getLogger(__name__)

FALLBACK_REPO_SLUG_ENVVAR: Annotated[
        str,
        Note('''CI systems export the originating repository here even for
            checkouts that have no git remote (or no ``.git`` directory at
            all, when the sources were unpacked from an archive).''')
    ] = 'GITHUB_REPOSITORY'

# Matches scp-like remotes (``[user@]host:owner/repo.git``, but not Windows
# drive paths) as well as ``ssh://``, ``git://`` and ``http(s)://`` URLs,
# with optional user info, port, and ``.git`` suffix.
_REPO_SLUG_PATTERN = re.compile(
    r'''^(?:
        (?:ssh|git|https?)://(?:[\w.+\-~%]+(?::[^@/]*)?@)?[\w.\-]+(?::\d+)?/
        | (?![A-Za-z]:[/\\])(?:[\w.+\-]+@)?[\w.\-]+:/?
    )
    (?P<slug>[^/\s][^/\s]*/[^/\s]+?)
    (?:\.git)?/?$''',
    re.VERBOSE)
_PSEUDO_FILENAME_PATTERN = re.compile(r'^<.*>$')
_FROZEN_FILENAME_PATTERN = re.compile(r'^<frozen (?P<module>[\w.]+)>$')


class RepoOrigin(Enum):
    STDLIB = 'stdlib'
    LOCAL_CHECKOUT = 'local_checkout'
    UNAVAILABLE = 'unavailable'


@dataclass(slots=True, frozen=True, kw_only=True)
class LinkerConfig:
    """Everything the source linker needs to know about its
    environment. The linker never reads environment variables itself;
    use ``from_environ`` to construct one from them.
    """
    fallback_repo_slug: Annotated[
            str | None,
            Note('''An ``owner/repo`` identifier to use when the local
                checkout has no (recognizable) ``origin`` remote.''')
        ] = None
    host_url: Annotated[
            str,
            Note('''Repository links are built as
                ``<host_url>/<owner/repo>/tree/<commit>/<path>#L<line>``.
                ''')
        ] = 'https://github.com'
    stdlib_url: Annotated[
            str,
            Note('''Standard library links are built as
                ``<stdlib_url>/<ref>/Lib/<path>#L<line>``.''')
        ] = 'https://github.com/python/cpython/tree'
    python_revision: Annotated[
            str,
            Note('''The commit the running interpreter was built from. This
                is usually empty for release builds, in which case the
                version tag is used instead.''')
        ] = field(default_factory=platform.python_revision)
    python_version: str = field(default_factory=platform.python_version)
    stdlib_dir: Annotated[
            str | None,
            Note('''Absolute paths inside this directory (but outside of
                its site-packages) are linked as standard library sources.
                ''')
        ] = field(default_factory=lambda: sysconfig.get_paths()['stdlib'])
    git_executable: str = 'git'

    @classmethod
    def from_environ(
            cls,
            environ: Mapping[str, str] | None = None,
            **kwargs
            ) -> LinkerConfig:
        """Creates a config, reading the fallback repo slug from
        ``environ`` (``os.environ`` by default). Any other config
        values can be passed as kwargs.
        """
        if environ is None:
            environ = os.environ

        return cls(
            fallback_repo_slug=environ.get(FALLBACK_REPO_SLUG_ENVVAR) or None,
            **kwargs)


@dataclass(slots=True, frozen=True)
class _Classification:
    origin: RepoOrigin
    stdlib_path: str | None = None
    checkout_root: Path | None = None


@dataclass(slots=True, frozen=True)
class SourceLinker:
    """Resolves defining locations into browsable URLs. An empty string
    means that no link is available; this is a normal outcome, and
    nothing here raises for it. Failures while querying git are logged
    and also result in an empty string.
    """
    config: LinkerConfig = field(default_factory=LinkerConfig)

    def url_for(self, record: ImplementationRecord) -> str:
        return self.resolve_url(record.module, record.file, record.line)

    def resolve_url(
            self,
            module: ModuleType | str,
            file: str,
            line: int
            ) -> str:
        module_name = (
            module.__name__ if isinstance(module, ModuleType) else module)
        if os.sep == '\\':
            file = file.replace('\\', '/')

        classification = self._classify(module_name, file)
        logger.debug(
            'Classified %s (module %s) as %s',
            file, module_name, classification.origin)

        if classification.origin is RepoOrigin.STDLIB:
            return self._stdlib_url(classification.stdlib_path or file, line)
        elif classification.origin is RepoOrigin.LOCAL_CHECKOUT:
            return self._checkout_url(
                file, line, checkout_root=classification.checkout_root)
        else:
            return ''

    def _classify(self, module_name: str, file: str) -> _Classification:
        # Builtins and other code without a source file
        if not file:
            return _Classification(RepoOrigin.UNAVAILABLE)

        if _is_stdlib_module(module_name):
            if _PSEUDO_FILENAME_PATTERN.match(file):
                frozen_path = _frozen_stdlib_path(file)
                if frozen_path is None:
                    return _Classification(RepoOrigin.UNAVAILABLE)
                return _Classification(
                    RepoOrigin.STDLIB, stdlib_path=frozen_path)

            if not os.path.isabs(file):
                return _Classification(RepoOrigin.STDLIB, stdlib_path=file)

            stdlib_path = _stdlib_relpath(file, self.config.stdlib_dir)
            if stdlib_path is not None:
                return _Classification(
                    RepoOrigin.STDLIB, stdlib_path=stdlib_path)

        try:
            is_file = Path(file).is_file()
        except OSError as exc:
            logger.debug('Failed to stat %s', file, exc_info=exc)
            is_file = False

        if is_file:
            checkout_root = find_checkout_root(Path(file).absolute().parent)
            if checkout_root is not None:
                return _Classification(
                    RepoOrigin.LOCAL_CHECKOUT, checkout_root=checkout_root)

        return _Classification(RepoOrigin.UNAVAILABLE)

    def _stdlib_url(self, stdlib_path: str, line: int) -> str:
        if self.config.python_revision:
            ref = self.config.python_revision
        else:
            ref = f'v{self.config.python_version}'

        base = self.config.stdlib_url.rstrip('/')
        return f'{base}/{ref}/Lib/{stdlib_path}#L{line}'

    def _checkout_url(
            self,
            file: str,
            line: int,
            *,
            checkout_root: Path | None
            ) -> str:
        if checkout_root is None:
            return ''

        relpath = _relative_to_root(file, checkout_root)
        if relpath is None:
            logger.debug(
                '%s does not lie within the checkout at %s; no link.',
                file, checkout_root)
            return ''

        repo_slug = self._repo_slug(checkout_root)
        if repo_slug is None:
            logger.debug(
                'No repo slug available for checkout at %s; no link.',
                checkout_root)
            return ''

        commit = run_git(
            ['rev-parse', 'HEAD'],
            cwd=checkout_root,
            executable=self.config.git_executable)
        if not commit:
            logger.debug(
                'Failed to get HEAD commit for checkout at %s; no link.',
                checkout_root)
            return ''

        base = self.config.host_url.rstrip('/')
        return f'{base}/{repo_slug}/tree/{commit}/{relpath}#L{line}'

    def _repo_slug(self, checkout_root: Path) -> str | None:
        remote_url = run_git(
            ['config', '--get', 'remote.origin.url'],
            cwd=checkout_root,
            executable=self.config.git_executable)
        if remote_url:
            repo_slug = parse_repo_slug(remote_url)
            if repo_slug is not None:
                return repo_slug

            logger.debug(
                'Unrecognized remote URL %r; using fallback repo slug.',
                remote_url)

        return self.config.fallback_repo_slug or None


def resolve_url(
        module: ModuleType | str,
        file: str,
        line: int,
        *,
        config: Annotated[
                LinkerConfig | None,
                Note('''If omitted, the config is created from the current
                    environment via ``LinkerConfig.from_environ``.''')
            ] = None
        ) -> str:
    """Shortcut for ``SourceLinker(config).resolve_url(...)``."""
    if config is None:
        config = LinkerConfig.from_environ()

    return SourceLinker(config).resolve_url(module, file, line)


def parse_repo_slug(remote_url: str) -> str | None:
    """Extracts ``owner/repo`` from a git remote URL, or returns None
    if the URL doesn't have a recognizable shape.
    """
    match = _REPO_SLUG_PATTERN.match(remote_url.strip())
    if match is None:
        return None

    return match.group('slug')


def find_checkout_root(start: Path) -> Path | None:
    """Walks upwards from ``start`` (inclusive), returning the first
    directory containing a ``.git`` entry. Note that ``.git`` can be a
    file as well as a directory (for worktrees and submodules).
    """
    try:
        for directory in (start, *start.parents):
            if (directory / '.git').exists():
                return directory
    except OSError as exc:
        logger.debug(
            'Failed while searching for a checkout above %s',
            start, exc_info=exc)

    return None


def run_git(
        args: list[str],
        *,
        cwd: Path,
        executable: str = 'git'
        ) -> str | None:
    """Runs a (read-only) git command, returning its stripped stdout,
    or None if git couldn't be run or exited nonzero.
    """
    try:
        result = subprocess.run(
            [executable, *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False)
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug('Failed to run git %s', args, exc_info=exc)
        return None

    if result.returncode != 0:
        logger.debug(
            'git %s exited with %s: %s',
            args, result.returncode, result.stderr.strip())
        return None

    return result.stdout.strip()


def _is_stdlib_module(module_name: str) -> bool:
    toplevel_name, _, _ = module_name.partition('.')
    return toplevel_name in sys.stdlib_module_names


def _frozen_stdlib_path(file: str) -> str | None:
    """Frozen stdlib modules report filenames like
    ``<frozen importlib._bootstrap>``; these map back onto their
    ``Lib/`` source. Other pseudo-filenames (``<string>``, etc) have no
    source at all.
    """
    match = _FROZEN_FILENAME_PATTERN.match(file)
    if match is None:
        return None

    return match.group('module').replace('.', '/') + '.py'


def _stdlib_relpath(file: str, stdlib_dir: str | None) -> str | None:
    if not stdlib_dir:
        return None

    try:
        relative = Path(file).relative_to(stdlib_dir)
    except ValueError:
        return None

    if 'site-packages' in relative.parts or 'dist-packages' in relative.parts:
        return None

    return relative.as_posix()


def _relative_to_root(file: str, checkout_root: Path) -> str | None:
    try:
        resolved_file = Path(file).resolve()
        resolved_root = checkout_root.resolve()
    except (OSError, RuntimeError) as exc:
        logger.debug('Failed to resolve %s', file, exc_info=exc)
        return None

    try:
        return resolved_file.relative_to(resolved_root).as_posix()
    except ValueError:
        return None

"""Editor-side policy around root resolution.

``ProjectSession`` decides when to resolve, tries attached language servers
first when configured, submits pattern walks to a ``RootResolver`` and changes
the working directory when a new root is found. The host editor integration
feeds it buffers and server metadata; nothing here talks to a server.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Sequence

from rich.console import Console

from projroot.config import Options
from projroot.core import start_dir_for
from projroot.exceptions import SubmissionError
from projroot.history import ProjectHistory
from projroot.worker import Completion, CompletionQueue, RootResolver

logger = logging.getLogger(__name__)

# Buffer types that represent files on disk
FILE_BUFTYPES = {"", "acwrite"}


@dataclass
class Buffer:
    """What the session needs to know about an editor buffer."""

    name: str
    buftype: str = ""
    filetype: str = ""


@dataclass
class LanguageServer:
    """Metadata of a language server attached to a buffer."""

    name: str
    root_dir: Optional[str]
    filetypes: List[str] = field(default_factory=list)


ServerAttachCallback = Callable[[LanguageServer, Buffer], None]
ChdirObserver = Callable[[Path], None]


class ServerAttachHooks:
    """Callbacks the host invokes after a language server attaches to a buffer."""

    def __init__(self) -> None:
        self._callbacks: List[ServerAttachCallback] = []

    def register(self, callback: ServerAttachCallback) -> None:
        if callback not in self._callbacks:
            self._callbacks.append(callback)

    def unregister(self, callback: ServerAttachCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def notify(self, server: LanguageServer, buffer: Buffer) -> None:
        for callback in list(self._callbacks):
            callback(server, buffer)

    def __len__(self) -> int:
        return len(self._callbacks)


class ProjectSession:
    """Per-editor project root tracking."""

    def __init__(
        self,
        options: Optional[Options] = None,
        resolver: Optional[RootResolver] = None,
        history: Optional[ProjectHistory] = None,
        chdir: Callable[[str], None] = os.chdir,
        getcwd: Callable[[], str] = os.getcwd,
        console: Optional[Console] = None,
    ):
        self.options = options or Options()
        self._owns_resolver = resolver is None
        self.resolver = resolver if resolver is not None else RootResolver()
        self.history = history or ProjectHistory(self.options.datapath)
        self._chdir = chdir
        self._getcwd = getcwd
        self.console = console or Console()

        self.started = False
        self.lsp_attached = False
        self.last_project: Optional[str] = None
        self.pending_request_id: Optional[int] = None
        self.chdir_observers: List[ChdirObserver] = []
        self._hooks: Optional[ServerAttachHooks] = None
        self._last_servers: Sequence[LanguageServer] = ()

    def init(self, hooks: Optional[ServerAttachHooks] = None) -> None:
        """Start the session: hook server attach events and load history."""
        if "lsp" in self.options.detection_methods and hooks is not None:
            self.attach_to_lsp(hooks)
        self.history.read_projects_from_history()
        self.started = True

    def attach_to_lsp(self, hooks: ServerAttachHooks) -> None:
        """Re-resolve whenever a language server attaches. Idempotent."""
        if self.lsp_attached:
            return
        hooks.register(self._on_server_attach)
        self._hooks = hooks
        self.lsp_attached = True

    def _on_server_attach(self, server: LanguageServer, buffer: Buffer) -> None:
        servers = list(self._last_servers)
        if server not in servers:
            servers.append(server)
        self.on_buf_enter(buffer, servers)

    @staticmethod
    def is_file(buffer: Buffer) -> bool:
        return buffer.buftype in FILE_BUFTYPES and buffer.name != ""

    def find_lsp_root(
        self, buffer: Buffer, servers: Iterable[LanguageServer]
    ) -> Optional[str]:
        """Return the root of the first server handling the buffer's filetype."""
        for server in servers:
            if server.name in self.options.ignore_lsp:
                continue
            if buffer.filetype in server.filetypes and server.root_dir:
                return server.root_dir
        return None

    def find_pattern_root(self, buffer: Buffer) -> Optional[int]:
        """Submit a pattern walk for buffer. Returns its request id."""
        start_dir = start_dir_for(buffer.name)
        try:
            request = self.resolver.submit(
                start_dir, self.options.patterns, self._on_pattern_completion
            )
        except SubmissionError as e:
            logger.error("%s", e)
            self.pending_request_id = None
            return None
        self.pending_request_id = request.request_id
        return request.request_id

    def _on_pattern_completion(self, completion: Completion) -> None:
        if completion.request_id != self.pending_request_id:
            logger.debug("Dropping stale completion %d", completion.request_id)
            return
        self.pending_request_id = None
        if completion.match is None:
            return
        self.set_pwd(str(completion.match.directory), f"pattern {completion.match.pattern}")

    def on_buf_enter(
        self, buffer: Buffer, servers: Sequence[LanguageServer] = ()
    ) -> None:
        """Handle a buffer becoming current."""
        if not self.started or self.options.manual_mode:
            return
        if not self.is_file(buffer):
            return
        self.resolve_now(buffer, servers)

    def resolve_now(
        self, buffer: Buffer, servers: Sequence[LanguageServer] = ()
    ) -> None:
        """Run the configured detection methods for buffer, in order."""
        self._last_servers = tuple(servers)
        for method in self.options.detection_methods:
            if method == "lsp":
                root = self.find_lsp_root(buffer, servers)
                if root is not None:
                    # A walk submitted by an earlier method is now stale
                    self.pending_request_id = None
                    self.set_pwd(root, "lsp")
                    return
            elif method == "pattern":
                self.find_pattern_root(buffer)

    def set_pwd(self, directory: Optional[str], method: str) -> bool:
        """Make directory the current project root.

        Returns:
            False if directory is None, True otherwise.
        """
        if directory is None:
            return False

        self.last_project = directory
        self.history.add_session_project(directory)

        if self._getcwd() != directory:
            self._chdir(directory)
            for observer in list(self.chdir_observers):
                try:
                    observer(Path(directory))
                except Exception as e:
                    logger.warning("chdir observer %r failed: %s", observer, e)
            if not self.options.silent_chdir:
                self.console.print(f"Set CWD to {directory} using {method}")
        return True

    def drain_completions(self, timeout: Optional[float] = None) -> int:
        """Apply finished pattern walks on the calling thread.

        Only needed when the resolver delivers through a CompletionQueue;
        other dispatchers run completions themselves and this returns 0.
        """
        if isinstance(self.resolver.dispatch, CompletionQueue):
            return self.resolver.dispatch.drain(timeout=timeout)
        return 0

    def close(self) -> None:
        """Persist history, stop listening for server attach events and
        shut down the resolver if the session created it."""
        if self._hooks is not None:
            self._hooks.unregister(self._on_server_attach)
            self._hooks = None
            self.lsp_attached = False
        if self._owns_resolver:
            self.resolver.shutdown()
        self.history.write_projects_to_history()

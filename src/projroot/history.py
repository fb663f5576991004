"""Recently used project roots and their persistence."""

import logging
from pathlib import Path
from typing import List, Union

from projroot.exceptions import HistoryError

logger = logging.getLogger(__name__)

HISTORY_FILE = "project_history"
MAX_HISTORY = 100


def _dedupe_keep_last(paths: List[str]) -> List[str]:
    """Drop earlier duplicates so each path sits at its most recent position."""
    seen = set()
    result = []
    for path in reversed(paths):
        if path in seen:
            continue
        seen.add(path)
        result.append(path)
    result.reverse()
    return result


class ProjectHistory:
    """Project roots from earlier sessions plus the ones accepted in this session."""

    def __init__(self, datapath: Path):
        self.datapath = Path(datapath)
        self.recent_projects: List[str] = []
        self.session_projects: List[str] = []

    @property
    def history_file(self) -> Path:
        return self.datapath / HISTORY_FILE

    def add_session_project(self, directory: Union[str, Path]) -> None:
        self.session_projects.append(str(directory))

    def read_projects_from_history(self) -> List[str]:
        """Load recent projects from the history file.

        A missing file is an empty history.

        Raises:
            HistoryError: If the file exists but cannot be read.
        """
        try:
            content = self.history_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            self.recent_projects = []
            return self.recent_projects
        except OSError as e:
            raise HistoryError("read", self.history_file, e.strerror or str(e)) from e

        self.recent_projects = [line.strip() for line in content.splitlines() if line.strip()]
        logger.debug("Read %d projects from %s", len(self.recent_projects), self.history_file)
        return self.recent_projects

    def get_recent_projects(self) -> List[str]:
        """Return known projects that still exist, most recent last."""
        projects = _dedupe_keep_last(self.recent_projects + self.session_projects)
        return [p for p in projects if Path(p).is_dir()]

    def delete_project(self, directory: Union[str, Path]) -> None:
        target = str(directory)
        self.recent_projects = [p for p in self.recent_projects if p != target]
        self.session_projects = [p for p in self.session_projects if p != target]

    def write_projects_to_history(self) -> Path:
        """Persist the newest MAX_HISTORY projects.

        Raises:
            HistoryError: If the data directory or file cannot be written.
        """
        projects = self.get_recent_projects()[-MAX_HISTORY:]
        try:
            self.datapath.mkdir(parents=True, exist_ok=True)
            self.history_file.write_text(
                "".join(f"{p}\n" for p in projects), encoding="utf-8"
            )
        except OSError as e:
            raise HistoryError("write", self.history_file, e.strerror or str(e)) from e
        return self.history_file

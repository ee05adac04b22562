"""
Local SDK repository locations.

The three source trees are resolved once from the user's home directory
and never change while the server runs. Paths are not checked here;
a missing tree shows up later as "No matches found" or "File not found".
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, Tuple


ALL_REPOS = "all"

# key -> (display name, path segments under $HOME)
REPOSITORY_LAYOUT = (
    ("js", "quickbase-js", ("Projects", "Personal", "quickbase-js")),
    ("go", "quickbase-go", ("Projects", "Personal", "quickbase-tree", "quickbase-go")),
    ("spec", "quickbase-spec", ("Projects", "Personal", "quickbase-spec")),
)


@dataclass(frozen=True)
class Repository:
    """One local source tree."""
    key: str
    name: str
    path: str


@dataclass(frozen=True)
class RepositorySet:
    """The fixed, ordered collection of local repositories (js, go, spec)."""
    repositories: Tuple[Repository, ...]

    def __iter__(self) -> Iterator[Repository]:
        return iter(self.repositories)

    def __len__(self) -> int:
        return len(self.repositories)

    def get(self, key: str) -> Optional[Repository]:
        for repo in self.repositories:
            if repo.key == key:
                return repo
        return None

    def select(self, scope: str = ALL_REPOS) -> Tuple[Repository, ...]:
        """Repositories matching ``scope``, always in canonical order."""
        if scope == ALL_REPOS:
            return self.repositories
        return tuple(r for r in self.repositories if r.key == scope)

    @property
    def js(self) -> Repository:
        return self.get("js")

    @property
    def go(self) -> Repository:
        return self.get("go")

    @property
    def spec(self) -> Repository:
        return self.get("spec")


def home_directory() -> str:
    """Base directory for repository paths, taken from $HOME."""
    return os.environ.get("HOME") or str(Path.home())


def resolve_repositories(home: Optional[str] = None) -> RepositorySet:
    """Build the repository set rooted at ``home`` (default: $HOME)."""
    base = home if home is not None else home_directory()
    return RepositorySet(
        repositories=tuple(
            Repository(key=key, name=name, path=os.path.join(base, *segments))
            for key, name, segments in REPOSITORY_LAYOUT
        )
    )

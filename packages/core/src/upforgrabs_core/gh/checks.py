"""Remote status checks against the GitHub API.

Both checks share one request quota. When it runs out part-way through a
run, the remaining checks come back as *inconclusive* (``rate_limited``)
rather than as failures, so a contribution is never flagged as broken only
because the quota ran out. ``RemoteBudget`` carries that state across the
worker threads of one run, together with the batch deadline.
"""

from __future__ import annotations

import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable
from urllib.parse import quote

import requests
from github import Auth, Github, GithubException, RateLimitExceededException, UnknownObjectException

logger = logging.getLogger(__name__)


class StatusReason(str, Enum):
    OK = "ok"
    ARCHIVED = "archived"
    MISSING = "missing"
    REDIRECT = "redirect"
    REPOSITORY_MISSING = "repository-missing"
    ERROR = "error"


@dataclass(frozen=True)
class RemoteStatus:
    """Outcome of one remote check.

    When ``rate_limited`` is set every other field is advisory only.
    """

    reason: StatusReason = StatusReason.OK
    rate_limited: bool = False
    location: str | None = None  # redirect: where the repository lives now
    old_location: str | None = None  # redirect: where the project file points
    error: str | None = None  # error: detail from the API or transport
    url: str | None = None  # label found: canonical label URL

    @classmethod
    def inconclusive(cls) -> RemoteStatus:
        return cls(rate_limited=True)


class RemoteBudget:
    """Rate-limit and deadline state shared by every check in one run.

    Thread-safe: checks running on different workers consult the same
    budget. With ``shared=False`` a rate-limited response only affects the
    check that received it, but the deadline still applies to all.
    """

    def __init__(self, timeout: float | None = None, shared: bool = True, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._deadline = clock() + timeout if timeout else None
        self._shared = shared
        self._exhausted = threading.Event()

    def available(self) -> bool:
        if self._exhausted.is_set():
            return False
        if self._deadline is not None and self._clock() >= self._deadline:
            logger.info("Batch timeout reached; remaining remote checks are marked inconclusive")
            self._exhausted.set()
            return False
        return True

    def record_rate_limit(self) -> None:
        if self._shared:
            self._exhausted.set()


class RemoteChecks(ABC):
    """Repository and label status lookups used by the review engine."""

    @abstractmethod
    def check_repository(self, owner_name: str) -> RemoteStatus:
        """Report whether ``owner/name`` exists, is archived or has moved."""

    @abstractmethod
    def check_label(self, owner_name: str, label: str) -> RemoteStatus:
        """Report whether ``label`` exists on ``owner/name`` and its canonical URL."""


class GitHubChecks(RemoteChecks):
    """RemoteChecks backed by the GitHub REST API via PyGithub.

    The token is passed in by the caller; nothing here reads the environment.
    Retries are disabled: a rate-limited call is reported, never waited out.
    Each worker thread gets its own client, since a PyGithub connection
    keeps per-request state between sending and reading a response.
    """

    def __init__(self, token: str | None = None, budget: RemoteBudget | None = None, timeout: int = 15):
        self._token = token
        self._timeout = timeout
        self._local = threading.local()
        self._budget = budget if budget is not None else RemoteBudget()

    @property
    def _gh(self) -> Github:
        client = getattr(self._local, "client", None)
        if client is None:
            auth = Auth.Token(self._token) if self._token else None
            client = Github(auth=auth, timeout=self._timeout, retry=None)
            self._local.client = client
        return client

    def check_repository(self, owner_name: str) -> RemoteStatus:
        if not self._budget.available():
            return RemoteStatus.inconclusive()

        repo, failure = self._fetch(owner_name, lambda: self._gh.get_repo(owner_name), StatusReason.MISSING)
        if failure is not None:
            return failure

        if repo.archived:
            return RemoteStatus(StatusReason.ARCHIVED)
        # GitHub names are case-insensitive; only a real rename is a redirect.
        if repo.full_name.lower() != owner_name.lower():
            return RemoteStatus(StatusReason.REDIRECT, old_location=owner_name, location=repo.full_name)
        return RemoteStatus(StatusReason.OK)

    def check_label(self, owner_name: str, label: str) -> RemoteStatus:
        if not self._budget.available():
            return RemoteStatus.inconclusive()

        repo, failure = self._fetch(owner_name, lambda: self._gh.get_repo(owner_name), StatusReason.REPOSITORY_MISSING)
        if failure is not None:
            return failure

        found, failure = self._fetch(owner_name, lambda: repo.get_label(label), StatusReason.MISSING)
        if failure is not None:
            return failure

        return RemoteStatus(StatusReason.OK, url=label_url(repo.html_url, found.name))

    def _fetch(self, owner_name: str, call, missing: StatusReason):
        """Run one API call, translating failures into a RemoteStatus."""
        try:
            return call(), None
        except RateLimitExceededException:
            logger.info("Rate-limited by the GitHub API while checking %s", owner_name)
            logger.info("Marking as inconclusive to indicate that no further work will be done here")
            self._budget.record_rate_limit()
            return None, RemoteStatus.inconclusive()
        except UnknownObjectException:
            return None, RemoteStatus(missing)
        except (GithubException, requests.RequestException) as e:
            logger.warning("GitHub API call for %s failed: %s", owner_name, e)
            return None, RemoteStatus(StatusReason.ERROR, error=str(e))


def label_url(repo_html_url: str, label: str) -> str:
    """Return the browser URL listing issues with ``label``."""
    return f"{repo_html_url.rstrip('/')}/labels/{quote(label, safe='')}"

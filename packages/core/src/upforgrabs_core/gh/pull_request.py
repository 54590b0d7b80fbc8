from __future__ import annotations

from github import Auth, Github

# Hidden marker identifying comments posted by this tool.
COMMENT_MARKER = "<!-- PULL REQUEST ANALYZER GITHUB ACTION -->"


def get_repo(repo_name: str, token: str | None):
    auth = Auth.Token(token) if token else None
    return Github(auth=auth).get_repo(repo_name)


def get_pull(repo, pr_number: int):
    return repo.get_pull(pr_number)


def get_changed_project_files(pr, projects_dir: str = "_data/projects") -> list[str]:
    """Return added, modified or renamed files under projects_dir, in API order."""
    prefix = projects_dir.rstrip("/") + "/"
    return [
        f.filename for f in pr.get_files() if f.status in ("added", "modified", "renamed") and f.filename.startswith(prefix)
    ]


def has_previous_comment(pr) -> bool:
    """Return True if this tool has already commented on the pull request."""
    return any(COMMENT_MARKER in (c.body or "") for c in pr.get_issue_comments())


def post_comment(pr, body: str):
    return pr.create_issue_comment(body)

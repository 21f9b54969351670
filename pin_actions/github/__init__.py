from .client import GitHubClient, GitHubAPIError, NotFoundError, Tag, TagPage, GitObject

__all__ = ["GitHubClient", "GitHubAPIError", "NotFoundError", "Tag", "TagPage", "GitObject"]

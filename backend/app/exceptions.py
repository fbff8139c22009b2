"""Custom exception classes for DevPath.

All exceptions follow the DevPath error format:
{
    "error": {
        "code": "DEVPATH_ERROR_CODE",
        "message": "Human-readable message",
        "details": {}  # optional
    }
}

Three families matter to callers:
- not found (unknown GitHub user, unsupported roadmap role, unknown
  profile or project)
- upstream failure (GitHub API errors, surfaced with the upstream message)
- validation gap (required profile data missing before an operation,
  or a skill that is blank or already declared)
"""

from __future__ import annotations

from typing import Any


class DevPathError(Exception):
    """Base exception for DevPath."""

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "error": {
                "code": self.code,
                "message": self.message,
            }
        }
        if self.details:
            result["error"]["details"] = self.details
        return result


class GitHubAPIError(DevPathError):
    """Non-404 failure reported by the GitHub API."""

    def __init__(self, message: str, status_code: int = 502) -> None:
        super().__init__(
            code="GITHUB_API_ERROR",
            message=message,
            status_code=status_code,
        )


class GitHubUserNotFoundError(DevPathError):
    """GitHub user not found."""

    def __init__(self) -> None:
        super().__init__(
            code="GITHUB_USER_NOT_FOUND",
            message="GitHub user not found.",
            status_code=404,
        )


class GitHubRateLimitError(DevPathError):
    """GitHub API rate limit exceeded."""

    def __init__(self, retry_after: int | None = None) -> None:
        details = {}
        if retry_after:
            details["retry_after_seconds"] = retry_after
        super().__init__(
            code="GITHUB_RATE_LIMIT",
            message="GitHub API rate limit exceeded. Try again later.",
            status_code=429,
            details=details,
        )


class RoleNotSupportedError(DevPathError):
    """No roadmap template or requirement set exists for a role."""

    def __init__(self, role: str) -> None:
        super().__init__(
            code="ROLE_NOT_SUPPORTED",
            message=f'Roadmap for "{role}" is not available yet.',
            status_code=404,
            details={"role": role},
        )


class ProfileNotFoundError(DevPathError):
    """Stored user profile does not exist."""

    def __init__(self) -> None:
        super().__init__(
            code="PROFILE_NOT_FOUND",
            message="User profile not found.",
            status_code=404,
        )


class ProjectNotFoundError(DevPathError):
    """Stored project does not exist for this user."""

    def __init__(self, project_id: str) -> None:
        super().__init__(
            code="PROJECT_NOT_FOUND",
            message="Project not found.",
            status_code=404,
            details={"project_id": project_id},
        )


class ConcurrentUpdateError(DevPathError):
    """A document kept changing under an optimistic update."""

    def __init__(self) -> None:
        super().__init__(
            code="CONCURRENT_UPDATE",
            message="The profile was updated concurrently. Please retry.",
            status_code=409,
        )


class MissingTargetRoleError(DevPathError):
    """Roadmap requested before a target role was set on the profile."""

    def __init__(self) -> None:
        super().__init__(
            code="MISSING_TARGET_ROLE",
            message="Please set your target role in your profile before generating a roadmap.",
            status_code=422,
        )


class RateLimitError(DevPathError):
    """Application rate limit exceeded."""

    def __init__(self, limit_type: str, retry_after: int = 60) -> None:
        super().__init__(
            code="RATE_LIMIT_EXCEEDED",
            message=f"Rate limit exceeded for {limit_type}. Try again later.",
            status_code=429,
            details={"retry_after_seconds": retry_after, "limit_type": limit_type},
        )


class ValidationError(DevPathError):
    """Input validation error."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=422,
            details=details,
        )

"""
User identity as seen by the jobs core.

The identity store is owned by the auth collaborator. The core only reads a
user's barangay, skills and role, so this module holds the read-only view and
the lookup protocol.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Protocol


class UserType(str, Enum):
    """Role tag carried by every account."""

    EMPLOYEE = "employee"  # Worker only
    EMPLOYER = "employer"  # Posts jobs only
    BOTH = "both"
    ADMIN = "admin"


WORKER_TYPES = frozenset({UserType.EMPLOYEE.value, UserType.BOTH.value})


@dataclass
class UserProfile:
    """The parts of a user record the jobs core reads."""

    user_id: str
    barangay: str
    skills: List[str] = field(default_factory=list)
    user_type: str = UserType.EMPLOYEE.value
    first_name: str = ""
    last_name: str = ""
    is_verified: bool = False

    def __post_init__(self):
        valid = {t.value for t in UserType}
        if self.user_type not in valid:
            raise ValueError(f"Invalid user_type: {self.user_type}. Must be one of {valid}")

    @property
    def can_apply(self) -> bool:
        """Only worker accounts may apply to jobs."""
        return self.user_type in WORKER_TYPES

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserType.ADMIN.value

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip() or self.user_id

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "UserProfile":
        return cls(
            user_id=data.get("user_id") or data["id"],
            barangay=data.get("barangay") or "",
            skills=list(data.get("skills") or []),
            user_type=data.get("user_type", UserType.EMPLOYEE.value),
            first_name=data.get("first_name") or "",
            last_name=data.get("last_name") or "",
            is_verified=bool(data.get("is_verified", False)),
        )


@dataclass(frozen=True)
class Actor:
    """The authenticated caller of a transition."""

    user_id: str
    user_type: str = UserType.EMPLOYEE.value

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserType.ADMIN.value

    @classmethod
    def of(cls, profile: UserProfile) -> "Actor":
        return cls(user_id=profile.user_id, user_type=profile.user_type)


class UserDirectory(Protocol):
    """Read access to the identity collaborator."""

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        """Get a user profile by ID."""
        ...

    def find_workers(self, barangay: str, skills: Iterable[str]) -> List[UserProfile]:
        """Workers in a barangay holding at least one of the skills."""
        ...


class InMemoryUserDirectory:
    """In-memory user directory for testing and local development."""

    def __init__(self, users: Optional[Iterable[UserProfile]] = None):
        self._users: Dict[str, UserProfile] = {}
        for user in users or []:
            self.add(user)

    def add(self, user: UserProfile) -> UserProfile:
        self._users[user.user_id] = user
        return user

    def get_user(self, user_id: str) -> Optional[UserProfile]:
        return self._users.get(user_id)

    def find_workers(self, barangay: str, skills: Iterable[str]) -> List[UserProfile]:
        wanted = set(skills)
        return [
            u
            for u in self._users.values()
            if u.barangay == barangay and u.can_apply and wanted.intersection(u.skills)
        ]

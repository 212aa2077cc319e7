from datetime import datetime
from typing import TYPE_CHECKING, Dict

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from .core import GitBackend


class TemplateVariables(BaseModel):
    """
    The fixed set of values a commit template can reference.
    An absent commit_number renders as an empty string.
    """

    model_config = ConfigDict(frozen=True)

    commit_number: int | None = Field(default=None, ge=0)
    commit_type: str
    branch_name: str
    message: str
    date: str
    time: str
    author: str
    email: str

    @classmethod
    def create(
        cls,
        backend: "GitBackend",
        commit_number: int | None,
        commit_type: str,
        branch_name: str,
        message: str,
        now: datetime | None = None,
    ) -> "TemplateVariables":
        """Stamps the local date/time and reads the author identity from git config."""
        now = now or datetime.now()
        author, email = backend.get_author_identity()
        return cls(
            commit_number=commit_number,
            commit_type=commit_type,
            branch_name=branch_name,
            message=message,
            date=now.strftime("%Y-%m-%d"),
            time=now.strftime("%H:%M:%S"),
            author=author,
            email=email,
        )

    def to_map(self) -> Dict[str, str]:
        values = self.model_dump(exclude={"commit_number"})
        values["commit_number"] = (
            "" if self.commit_number is None else str(self.commit_number)
        )
        return values

"""View models for the dashboard user card and the team roster."""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class UserProfile(BaseModel):
    name: str
    email: str = ""
    role: str = ""


class UserCard(BaseModel):
    """What the dashboard card renders; ``loading`` replaces the body with a spinner."""

    title: str
    loading: bool
    lines: List[str] = Field(default_factory=list)


class TeamMember(BaseModel):
    id: int
    name: str
    designation: str
    image: str


TEAM: List[TeamMember] = [
    TeamMember(
        id=1,
        name="Sameer Sahu",
        designation="Full Stack Developer",
        image="https://avatars.githubusercontent.com/u/62953198?v=4",
    ),
]


def build_user_card(profile: Optional[UserProfile]) -> UserCard:
    if profile is None:
        return UserCard(title="Loading ...", loading=True)
    lines = [line for line in (profile.name, profile.email, profile.role) if line]
    return UserCard(title=f"{profile.name}'s Dashboard", loading=False, lines=lines)

"""Jira login credentials."""

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """Username and password posted with every Jelly runner request."""

    username: str = Field(..., description='Jira username')
    password: str = Field(..., description='Jira password')

    def form_fields(self) -> dict:
        """Return the credentials as Jira login form fields."""
        return {'os_username': self.username, 'os_password': self.password}

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, password='***')"

    __str__ = __repr__

    class Config:
        """Pydantic configuration."""

        frozen = True

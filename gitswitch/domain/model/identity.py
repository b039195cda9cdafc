"""Identity entity.

An identity is one account the user can switch to: the git author name and
email plus the bearer credential used against the hosting provider.
"""

from typing import Optional

from pydantic import Field, SecretStr

from gitswitch.domain.model.common import DomainModel
from gitswitch.domain.value import IdentityId, RemoteUser, new_identity_id


class Identity(DomainModel):
    """A managed (name, email, credential) triple.

    The credential may be empty for identities that were imported from
    external git config and never authenticated. It is a SecretStr so it
    never shows up in reprs or log output.
    """

    id: IdentityId = Field(default_factory=new_identity_id)
    display_name: str
    email: str
    credential: SecretStr = SecretStr("")
    remote_username: Optional[str] = None  # Filled in after first authenticated round trip
    avatar_url: Optional[str] = None

    @property
    def token(self) -> str:
        """Raw bearer credential, empty string when unauthenticated."""
        return self.credential.get_secret_value()

    @property
    def has_credential(self) -> bool:
        return bool(self.token)

    @property
    def masked_credential(self) -> str:
        """Credential shortened for display, e.g. ``gho_...abcd``."""
        token = self.token
        if not token:
            return ""
        if len(token) <= 8:
            return "*" * len(token)
        return f"{token[:4]}...{token[-4:]}"

    def with_remote_user(self, user: RemoteUser) -> "Identity":
        """Copy of this identity carrying the cached remote account details."""
        return self.model_copy(
            update={"remote_username": user.username, "avatar_url": user.avatar_url}
        )

    def with_credential(self, credential: str) -> "Identity":
        return self.model_copy(update={"credential": SecretStr(credential)})

"""
Submitter identity passed explicitly into the submission pipeline.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class SessionIdentity:
    """
    Identity of the person filling in the form.

    Supplied by the identity provider on an 'authenticated' session event,
    or built from configuration for anonymous use.
    """
    user_id: str
    display_name: str
    authenticated: bool = False

    @classmethod
    def anonymous(cls, user_id: str = 'anonymous', display_name: str = 'Anonymous') -> 'SessionIdentity':
        return cls(user_id=user_id, display_name=display_name, authenticated=False)

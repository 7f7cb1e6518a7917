from .freelancer_profile import FreelancerProfile
from .gig import Gig
from .gig_application import GigApplication
from .message import Message
from .user import USER_ROLES, User

__all__ = [
    "FreelancerProfile",
    "Gig",
    "GigApplication",
    "Message",
    "USER_ROLES",
    "User",
]

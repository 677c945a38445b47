from .dao import Dao
from .member import Member, ROLE_ADMIN, ROLE_MEMBER
from .proposal import Proposal
from .vote import Vote, VOTE_YES, VOTE_NO, VOTE_CHOICES
from .activity import Activity

__all__ = [
    "Dao",
    "Member",
    "Proposal",
    "Vote",
    "Activity",
    "ROLE_ADMIN",
    "ROLE_MEMBER",
    "VOTE_YES",
    "VOTE_NO",
    "VOTE_CHOICES",
]

from gigboard.models.user import User
from gigboard.models.gig import Gig
from gigboard.models.bid import Bid

__all__ = ["User", "Gig", "Bid"]

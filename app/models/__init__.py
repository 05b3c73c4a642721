from app.models.category import Category
from app.models.client import Client, ListingClient
from app.models.feedback import Comment, Vote
from app.models.skill import Skill, SkillTag
from app.models.user import User

__all__ = ["Category", "Client", "Comment", "ListingClient", "Skill", "SkillTag", "User", "Vote"]

# Import all models here so metadata.create_all() sees every table
from be4real.db.session import Base

# Import all models below
from be4real.modules.user_management.models.user import User
from be4real.modules.posts.models.post import Post, PostReactionCount
from be4real.modules.posts.reactions.models.reaction import Reaction
from be4real.modules.follows.models.follow import Follow

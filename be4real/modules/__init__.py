"""
Modules package initialization.
This package contains all the functional modules of the application.
"""

from be4real.modules import auth
from be4real.modules import user_management
from be4real.modules import posts
from be4real.modules import follows
from be4real.modules import home_feed

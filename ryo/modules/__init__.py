"""
Modules package initialization.
This package contains the feature modules of the API: sign-in sessions,
profiles, posts with likes, and generic file storage.
"""

from ryo.modules import auth
from ryo.modules import user_management
from ryo.modules import posts
from ryo.modules import media

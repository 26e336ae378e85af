"""Models package."""

from .research_file import ResearchFile
from .research_item import ResearchItem
from .media_job import MediaJob
from .swipe import Swipe

# Importing the package registers every mapped class on Base.metadata.
from roadworks.models.user import User
from roadworks.models.ward import Ward
from roadworks.models.project import Project
from roadworks.models.project_member import ProjectMember
from roadworks.models.road_segment import RoadSegment
from roadworks.models.assignment import Assignment
from roadworks.models.milestone import Milestone
from roadworks.models.activity_entry import ActivityEntry
from roadworks.models.notification import Notification

__all__ = [
    "User",
    "Ward",
    "Project",
    "ProjectMember",
    "RoadSegment",
    "Assignment",
    "Milestone",
    "ActivityEntry",
    "Notification",
]

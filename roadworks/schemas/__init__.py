from roadworks.schemas.activity import ActivityEntryResponse, ActivityPollResponse, ActivityHistoryResponse
from roadworks.schemas.segments import SegmentStatusResponse, SegmentStatusListResponse
from roadworks.schemas.assignments import AssignmentResponse, ConflictCheckResponse
from roadworks.schemas.projects import ProjectResponse, MemberResponse, MilestoneResponse

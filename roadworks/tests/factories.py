"""Row builders shared by the test modules."""
import uuid
from datetime import datetime, timezone

from roadworks.core.geometry import polyline_length_meters, to_geojson
from roadworks.core.security import create_access_token
from roadworks.models.assignment import Assignment
from roadworks.models.enums import AssignmentStatus, NotificationType, UserRole
from roadworks.models.notification import Notification
from roadworks.models.project import Project
from roadworks.models.project_member import ProjectMember
from roadworks.models.road_segment import RoadSegment
from roadworks.models.user import User
from roadworks.policies.rbac import Caller


def create_user(db, role=UserRole.contractor, name=None):
    u = User(
        id=uuid.uuid4(),
        name=name or f"{role.value} user",
        email=f"{uuid.uuid4().hex[:10]}@roadworks.test",
        role=role.value,
    )
    db.add(u)
    db.commit()
    return u


def create_project(db, name="Test Project"):
    p = Project(id=uuid.uuid4(), name=name, status="planning")
    db.add(p)
    db.commit()
    return p


def add_member(db, project, user):
    m = ProjectMember(project_id=project.id, user_id=user.id)
    db.add(m)
    db.commit()
    return m


def create_segment(db, project, name="Road 1", coords=None):
    coords = coords or [(76.7794, 30.3782), (76.7821, 30.3790)]
    seg = RoadSegment(
        id=uuid.uuid4(),
        project_id=project.id,
        name=name,
        geometry_json=to_geojson(coords),
        length_meters=polyline_length_meters(coords),
    )
    db.add(seg)
    db.commit()
    return seg


def create_assignment(db, segment, contractor, start_at, end_at, status=AssignmentStatus.active):
    a = Assignment(
        id=uuid.uuid4(),
        road_segment_id=segment.id,
        contractor_id=contractor.id,
        status=status.value,
        start_at=start_at,
        end_at=end_at,
    )
    db.add(a)
    db.commit()
    return a



def create_notification(db, user, title="Heads up", created_at=None, is_read=False, project=None):
    n = Notification(
        id=uuid.uuid4(),
        user_id=user.id,
        project_id=project.id if project else None,
        type=NotificationType.system.value,
        title=title,
        message=f"{title}.",
        is_read=is_read,
        created_at=created_at or datetime.now(timezone.utc),
    )
    db.add(n)
    db.commit()
    return n

def caller_for(user) -> Caller:
    return Caller(id=user.id, role=UserRole(user.role), name=user.name)


def auth_headers(user) -> dict:
    token = create_access_token(str(user.id), {"role": user.role, "name": user.name})
    return {"Authorization": f"Bearer {token}"}

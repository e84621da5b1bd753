import uuid
from datetime import datetime, timedelta, timezone

from sqlalchemy.orm import Session

from roadworks.core.geometry import polyline_length_meters, to_geojson
from roadworks.db.session import SessionLocal
from roadworks.models.assignment import Assignment
from roadworks.models.enums import ActivityAction, AssignmentStatus, UserRole
from roadworks.models.project import Project
from roadworks.models.project_member import ProjectMember
from roadworks.models.road_segment import RoadSegment
from roadworks.models.user import User
from roadworks.models.ward import Ward
from roadworks.services.activity_store import ActivityDraft, activity_store


def seed():
    db: Session = SessionLocal()
    now = datetime.now(timezone.utc)

    admin = User(name="Ward Engineer", email="admin@roadworks.local", role=UserRole.admin.value)
    contractor = User(name="Contractor One", email="contractor@roadworks.local", role=UserRole.contractor.value)
    ward = Ward(name="Default Ward", number=1, description="Default ward for new projects")
    db.add_all([admin, contractor, ward])
    db.commit()

    pid = uuid.uuid4()
    db.add(Project(id=pid, name="Seed Resurfacing Project", ward_id=ward.id, created_at=now, updated_at=now))
    db.add(ProjectMember(project_id=pid, user_id=contractor.id, assigned_at=now))
    db.commit()

    coords = [(76.7794, 30.3782), (76.7821, 30.3790), (76.7850, 30.3801)]
    seg = RoadSegment(
        project_id=pid,
        name="Road 1",
        geometry_json=to_geojson(coords),
        length_meters=polyline_length_meters(coords),
        created_at=now,
    )
    db.add(seg)
    db.commit()

    db.add(
        Assignment(
            road_segment_id=seg.id,
            contractor_id=contractor.id,
            status=AssignmentStatus.active.value,
            start_at=now - timedelta(days=1),
            end_at=now + timedelta(days=9),
            created_at=now,
            updated_at=now,
        )
    )
    db.commit()

    activity_store.append(
        db,
        ActivityDraft(
            project_id=pid,
            actor_id=admin.id,
            action=ActivityAction.ASSIGNMENT_CREATED,
            summary=f"Assigned {contractor.name} to {seg.name}",
        ),
    )
    db.close()


if __name__ == "__main__":
    seed()

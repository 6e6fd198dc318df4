from datetime import datetime, timedelta

import pytest

from app.models.notification import Notification
from app.models.personal_todo import PersonalTodo
from app.models.project import Project
from app.models.project_member import ProjectMember, ROLE_ADMIN
from app.models.task import Task
from app.services import profile_service

NOW = datetime(2024, 3, 13, 12, 0, 0)


def seed_project(db, owner, name="Projet"):
    project = Project(name=name, created_by=owner.id)
    project.members.append(ProjectMember(user_id=owner.id, role=ROLE_ADMIN))
    db.add(project)
    db.commit()
    return project


def add_task(db, project, user, status, created_at, updated_at=None, title="Tâche"):
    db.add(Task(
        project_id=project.id,
        assignee_id=user.id,
        title=title,
        status=status,
        created_at=created_at,
        updated_at=updated_at or created_at
    ))
    db.commit()


def add_todo(db, user, created_at, priority="Medium", completed=False, title="Todo"):
    db.add(PersonalTodo(
        user_id=user.id,
        title=title,
        priority=priority,
        completed=completed,
        created_at=created_at,
        updated_at=created_at
    ))
    db.commit()


def add_notification(db, user, created_at, content="Notif", read=False):
    db.add(Notification(user_id=user.id, content=content, read=read, created_at=created_at))
    db.commit()


# ============ FENÊTRE DU RAPPORT ============

def test_report_window_trailing_types():
    assert profile_service.resolve_report_window("weekly", None, None, NOW) == (NOW - timedelta(days=7), NOW, "weekly")
    assert profile_service.resolve_report_window("monthly", None, None, NOW) == (datetime(2024, 2, 13, 12), NOW, "monthly")
    assert profile_service.resolve_report_window("yearly", None, None, NOW) == (datetime(2023, 3, 13, 12), NOW, "yearly")


def test_report_window_month_end_clamped():
    end_of_march = datetime(2024, 3, 31, 8, 0, 0)
    start, _, _ = profile_service.resolve_report_window("monthly", None, None, end_of_march)
    assert start == datetime(2024, 2, 29, 8, 0, 0)


def test_report_window_explicit_range():
    start, end = datetime(2024, 1, 1), datetime(2024, 1, 31)
    assert profile_service.resolve_report_window("custom", start, end, NOW) == (start, end, "custom")


def test_report_window_unknown_type_falls_back_to_monthly():
    """Type inconnu sans dates -> mensuel"""
    _, _, resolved = profile_service.resolve_report_window("quarterly", None, None, NOW)
    assert resolved == "monthly"
    _, _, resolved = profile_service.resolve_report_window("custom", datetime(2024, 1, 1), None, NOW)
    assert resolved == "monthly"


def test_report_window_inverted_range():
    with pytest.raises(ValueError):
        profile_service.resolve_report_window("custom", datetime(2024, 2, 1), datetime(2024, 1, 1), NOW)


# ============ RAPPORT ============

def test_compute_report(db, alice):
    project = seed_project(db, alice)
    add_task(db, project, alice, "Done", NOW - timedelta(days=3), NOW - timedelta(days=1))
    add_task(db, project, alice, "In Progress", NOW - timedelta(days=10))
    # hors fenêtre mensuelle
    add_task(db, project, alice, "Done", NOW - timedelta(days=60))
    add_todo(db, alice, NOW - timedelta(days=2), priority="High")
    add_todo(db, alice, NOW - timedelta(days=2), priority="High", completed=True)
    add_todo(db, alice, NOW - timedelta(days=90), priority="Low")

    report = profile_service.compute_report(db, alice.id, "monthly", now=NOW)
    stats = report.statistics

    assert report.user.username == "alice"
    assert stats.period.type == "monthly"
    assert stats.tasks.total == 2
    assert stats.tasks.completed == 1
    assert stats.productivity.completion_rate == 50
    assert stats.productivity.average_completion_time == 2.0
    assert stats.productivity.top_project == {"Projet": 2}
    assert stats.personal_todos.total == 2
    assert stats.personal_todos.by_priority == {"Low": 0, "Medium": 0, "High": 2}
    assert [t.project for t in report.tasks] == ["Projet", "Projet"]
    assert report.generated_at == NOW


def test_compute_report_empty(db, alice):
    report = profile_service.compute_report(db, alice.id, "weekly", now=NOW)
    assert report.statistics.productivity.completion_rate == 0
    assert report.statistics.productivity.most_productive_day is None
    assert report.tasks == []


def test_compute_report_unknown_user(db):
    with pytest.raises(LookupError):
        profile_service.compute_report(db, 999, now=NOW)


def test_report_endpoint_inverted_range(client, alice, auth_headers):
    response = client.get(
        "/api/profile/report?reportType=custom&startDate=2024-02-01T00:00:00Z&endDate=2024-01-01T00:00:00Z",
        headers=auth_headers(alice)
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


def test_report_endpoint(client, alice, auth_headers):
    response = client.get("/api/profile/report?reportType=yearly", headers=auth_headers(alice))
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["statistics"]["period"]["type"] == "yearly"
    assert data["statistics"]["personalTodos"]["byPriority"] == {"Low": 0, "Medium": 0, "High": 0}


# ============ JOURNAL D'ACTIVITÉ ============

@pytest.fixture
def activity(db, alice):
    """3 tâches, 2 todos, 2 notifications, horodatages entrelacés"""
    project = seed_project(db, alice)
    add_task(db, project, alice, "Done", NOW - timedelta(hours=10), NOW - timedelta(hours=1), title="T1")
    add_task(db, project, alice, "In Progress", NOW - timedelta(hours=10), NOW - timedelta(hours=4), title="T2")
    add_task(db, project, alice, "To-Do", NOW - timedelta(hours=7), title="T3")
    add_todo(db, alice, NOW - timedelta(hours=2), completed=True, title="D1")
    add_todo(db, alice, NOW - timedelta(hours=6), title="D2")
    add_notification(db, alice, NOW - timedelta(hours=3), content="N1")
    add_notification(db, alice, NOW - timedelta(hours=5), content="N2", read=True)
    return alice


def test_activity_log_merged_newest_first(db, activity):
    log = profile_service.compute_activity_log(db, activity.id, limit=50)

    assert [a.title for a in log.activities] == ["T1", "D1", "N1", "T2", "N2", "D2", "T3"]
    assert log.total == 7
    assert log.has_more is False


def test_activity_log_actions(db, activity):
    by_title = {a.title: a for a in profile_service.compute_activity_log(db, activity.id).activities}

    assert by_title["T1"].action == "completed"
    assert by_title["T2"].action == "started"
    assert by_title["T3"].action == "created"
    assert by_title["D1"].action == "completed"
    assert by_title["D2"].action == "created"
    assert by_title["N1"].action == "received"
    assert by_title["N2"].status == "read"
    assert by_title["T1"].project == "Projet"
    assert by_title["T1"].id.startswith("task-")


def test_activity_log_limit_and_has_more(db, activity):
    """Jamais plus de `limit` entrées ; hasMore si le reste dépasse"""
    log = profile_service.compute_activity_log(db, activity.id, limit=3)
    assert [a.title for a in log.activities] == ["T1", "D1", "N1"]
    assert log.has_more is True


def test_activity_log_single_cursor(db, activity):
    """Les pages successives ne se chevauchent pas et couvrent tout"""
    pages = [profile_service.compute_activity_log(db, activity.id, limit=3, offset=o) for o in (0, 3, 6)]

    titles = [a.title for page in pages for a in page.activities]
    assert titles == ["T1", "D1", "N1", "T2", "N2", "D2", "T3"]
    assert [page.has_more for page in pages] == [True, True, False]


def test_activity_log_one_large_source(db, alice):
    project = seed_project(db, alice)
    for i in range(5):
        add_task(db, project, alice, "To-Do", NOW - timedelta(hours=i), title=f"T{i}")

    log = profile_service.compute_activity_log(db, alice.id, limit=3)
    assert len(log.activities) == 3
    assert log.has_more is True


def test_activity_endpoint_limit_bounds(client, alice, auth_headers):
    assert client.get("/api/profile/activity?limit=0", headers=auth_headers(alice)).status_code == 400
    response = client.get("/api/profile/activity?limit=5", headers=auth_headers(alice))
    assert response.status_code == 200
    assert response.json()["data"] == {"activities": [], "total": 0, "hasMore": False}


# ============ EXPORT ============

def test_export(client, alice, bob, auth_headers, project_factory):
    project_id = project_factory(bob, members=[alice], name="Chez Bob")
    project_factory(alice, name="Chez Alice")
    client.post(f"/api/tasks/projects/{project_id}", headers=auth_headers(bob), json={"title": "T", "assigneeId": alice.id})
    client.post("/api/personal-todos", headers=auth_headers(alice), json={"title": "Todo"})

    response = client.get("/api/profile/export", headers=auth_headers(alice))
    assert response.status_code == 200
    data = response.json()["data"]
    assert [p["name"] for p in data["projects"]["created"]] == ["Chez Alice"]
    roles = {m["projectName"]: m["role"] for m in data["projects"]["memberOf"]}
    assert roles == {"Chez Bob": "member", "Chez Alice": "admin"}
    assert data["totalProjects"] == 2
    assert data["totalTasks"] == 1
    assert data["totalTodos"] == 1
    assert data["totalNotifications"] == 1

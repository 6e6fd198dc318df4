from datetime import datetime, timedelta

import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.models.notification import Notification
from app.models.personal_todo import PersonalTodo
from app.models.project import Project
from app.models.project_member import ProjectMember, ROLE_ADMIN
from app.models.task import Task
from app.schemas.dashboard import ProductivityInsights, ReportProductivity
from app.services import dashboard_service

# mercredi ; la semaine commence le lundi 11
NOW = datetime(2024, 3, 13, 12, 0, 0)


def seed_project(db, owner, name="Projet"):
    project = Project(name=name, created_by=owner.id)
    project.members.append(ProjectMember(user_id=owner.id, role=ROLE_ADMIN))
    db.add(project)
    db.commit()
    db.refresh(project)
    return project


def add_task(db, project, assignee, status="To-Do", created_at=None, updated_at=None, due_date=None, title="Tâche"):
    created_at = created_at or NOW - timedelta(days=20)
    task = Task(
        project_id=project.id,
        assignee_id=assignee.id if assignee else None,
        title=title,
        status=status,
        due_date=due_date,
        created_at=created_at,
        updated_at=updated_at or created_at
    )
    db.add(task)
    db.commit()
    return task


def add_todo(db, user, completed=False, due_date=None, created_at=None):
    todo = PersonalTodo(
        user_id=user.id,
        title="Todo",
        completed=completed,
        due_date=due_date,
        created_at=created_at or NOW - timedelta(days=1),
        updated_at=created_at or NOW - timedelta(days=1)
    )
    db.add(todo)
    db.commit()
    return todo


# ============ STATS ============

def test_dashboard_rollups(db, alice):
    """3 tâches + 1 todo : la tâche Done n'est jamais en retard"""
    project = seed_project(db, alice)
    add_task(db, project, alice, "To-Do")
    add_task(db, project, alice, "In Progress")
    add_task(db, project, alice, "Done", due_date=NOW - timedelta(days=1))
    add_todo(db, alice, due_date=NOW + timedelta(days=1))

    data = dashboard_service.compute_dashboard(db, alice.id, now=NOW)

    assert data.stats.tasks.model_dump() == {
        "total": 3, "todo": 1, "in_progress": 1, "completed": 1, "overdue": 0
    }
    assert data.stats.personal_todos.model_dump() == {
        "total": 1, "pending": 1, "completed": 0, "overdue": 0
    }
    assert data.stats.projects.total == 1
    assert data.stats.projects.total_tasks == 3
    assert data.stats.projects.total_members == 1


def test_overdue_is_strict(db, alice):
    """Échéance = maintenant : pas en retard ; une seconde avant : en retard"""
    project = seed_project(db, alice)
    add_task(db, project, alice, due_date=NOW)
    add_task(db, project, alice, due_date=NOW - timedelta(seconds=1))
    add_todo(db, alice, due_date=NOW - timedelta(seconds=1))
    add_todo(db, alice, completed=True, due_date=NOW - timedelta(days=3))

    data = dashboard_service.compute_dashboard(db, alice.id, now=NOW)
    assert data.stats.tasks.overdue == 1
    assert data.stats.personal_todos.overdue == 1


def test_only_assigned_tasks_are_counted(db, alice, bob):
    project = seed_project(db, alice)
    db.add(ProjectMember(project_id=project.id, user_id=bob.id))
    db.commit()
    add_task(db, project, alice)
    add_task(db, project, bob)
    add_task(db, project, None)

    data = dashboard_service.compute_dashboard(db, alice.id, now=NOW)
    assert data.stats.tasks.total == 1
    # la distribution garde le nombre total de tâches du projet
    assert data.task_distribution[0].task_count == 3
    assert data.task_distribution[0].todo_tasks == 1


def test_task_distribution_per_project(db, alice):
    first = seed_project(db, alice, "Premier")
    second = seed_project(db, alice, "Second")
    add_task(db, first, alice, "Done")
    add_task(db, first, alice, "In Progress")
    add_task(db, second, alice, "To-Do")

    data = dashboard_service.compute_dashboard(db, alice.id, now=NOW)
    by_name = {d.project_name: d for d in data.task_distribution}
    assert by_name["Premier"].completed_tasks == 1
    assert by_name["Premier"].in_progress_tasks == 1
    assert by_name["Second"].todo_tasks == 1


# ============ PROGRESSION HEBDO ============

def test_weekly_progress_always_seven_days(db, alice):
    data = dashboard_service.compute_dashboard(db, alice.id, now=NOW)

    assert [d.day for d in data.weekly_progress] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
    assert data.weekly_progress[0].date == "2024-03-11"
    assert data.weekly_progress[6].date == "2024-03-17"
    assert all(d.completed == 0 and d.created == 0 for d in data.weekly_progress)


def test_weekly_progress_buckets(db, alice):
    project = seed_project(db, alice)
    monday = datetime(2024, 3, 11, 9, 0, 0)
    wednesday = datetime(2024, 3, 13, 8, 0, 0)
    add_task(db, project, alice, "Done", created_at=monday, updated_at=wednesday)
    add_task(db, project, alice, "To-Do", created_at=monday)
    # semaine précédente : ignorée
    add_task(db, project, alice, "Done", created_at=monday - timedelta(days=7), updated_at=monday - timedelta(days=6))

    progress = dashboard_service.compute_dashboard(db, alice.id, now=NOW).weekly_progress
    assert progress[0].created == 2
    assert progress[2].completed == 1
    assert sum(d.completed for d in progress) == 1


def test_week_start_on_sunday():
    assert dashboard_service.week_start(datetime(2024, 3, 17, 23, 59)).isoformat() == "2024-03-11"
    assert dashboard_service.week_start(datetime(2024, 3, 11, 0, 0)).isoformat() == "2024-03-11"


# ============ ACTIVITÉ / NOTIFICATIONS ============

def test_recent_activity_last_seven_days(db, alice):
    project = seed_project(db, alice)
    add_task(db, project, alice, title="Récente", created_at=NOW - timedelta(days=2))
    add_task(db, project, alice, title="Ancienne", created_at=NOW - timedelta(days=8))

    data = dashboard_service.compute_dashboard(db, alice.id, now=NOW)
    assert [t.title for t in data.recent_activity] == ["Récente"]


def test_notification_stats_use_last_ten(db, alice):
    """Les non lues sont comptées parmi les 10 plus récentes seulement"""
    for i in range(12):
        db.add(Notification(
            user_id=alice.id,
            content=f"N{i}",
            read=i >= 10,
            created_at=NOW - timedelta(hours=12 - i)
        ))
    db.commit()

    data = dashboard_service.compute_dashboard(db, alice.id, now=NOW)
    assert data.stats.notifications.total == 10
    assert data.stats.notifications.unread_among_recent == 8
    assert len(data.notifications) == 10


def test_dashboard_is_idempotent(db, alice):
    project = seed_project(db, alice)
    add_task(db, project, alice, "Done", due_date=NOW)
    add_todo(db, alice)

    first = dashboard_service.compute_dashboard(db, alice.id, now=NOW)
    second = dashboard_service.compute_dashboard(db, alice.id, now=NOW)
    assert first.model_dump() == second.model_dump()


# ============ INSIGHTS ============

@pytest.mark.parametrize("done_count, expected_score", [(20, 100), (10, 50), (25, 100), (0, 0)])
def test_productivity_score(db, alice, done_count, expected_score):
    project = seed_project(db, alice)
    for i in range(done_count):
        add_task(db, project, alice, "Done", created_at=NOW - timedelta(days=5), updated_at=NOW - timedelta(days=1))

    insights = dashboard_service.compute_productivity_insights(db, alice.id, now=NOW)
    assert insights.tasks_completed_this_month == done_count
    assert insights.productivity_score == expected_score


def test_insights_window_is_thirty_days(db, alice):
    project = seed_project(db, alice)
    add_task(db, project, alice, "Done", updated_at=NOW - timedelta(days=10))
    add_task(db, project, alice, "Done", created_at=NOW - timedelta(days=60), updated_at=NOW - timedelta(days=40))
    add_task(db, project, alice, "In Progress", updated_at=NOW - timedelta(days=1))

    insights = dashboard_service.compute_productivity_insights(db, alice.id, now=NOW)
    assert insights.tasks_completed_this_month == 1
    assert insights.top_project == {"Projet": 1}


def test_completion_analytics(db, alice):
    project = seed_project(db, alice)
    tuesday = datetime(2024, 3, 12, 10, 0, 0)
    monday = datetime(2024, 3, 11, 10, 0, 0)
    add_task(db, project, alice, "Done", created_at=tuesday - timedelta(days=2), updated_at=tuesday)
    add_task(db, project, alice, "Done", created_at=monday - timedelta(days=1), updated_at=monday)

    insights = dashboard_service.compute_productivity_insights(db, alice.id, now=NOW)
    assert insights.average_completion_time == 1.5
    # égalité lundi/mardi : le lundi l'emporte
    assert insights.most_productive_day == "Monday"


def test_completion_analytics_empty(db, alice):
    insights = dashboard_service.compute_productivity_insights(db, alice.id, now=NOW)
    assert insights.average_completion_time is None
    assert insights.most_productive_day is None
    assert insights.top_project == {}


# ============ API ============

def test_dashboard_endpoint_camel_case(client, alice, auth_headers, project_factory):
    project_id = project_factory(alice)
    client.post(
        f"/api/tasks/projects/{project_id}",
        headers=auth_headers(alice),
        json={"title": "T", "assigneeId": alice.id}
    )

    response = client.get("/api/dashboard/stats", headers=auth_headers(alice))
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["stats"]["tasks"]["inProgress"] == 0
    assert data["stats"]["notifications"]["unreadAmongRecent"] == 1
    assert len(data["weeklyProgress"]) == 7
    assert data["taskDistribution"][0]["projectId"] == project_id


def test_insights_endpoint(client, alice, auth_headers):
    response = client.get("/api/dashboard/insights", headers=auth_headers(alice))
    assert response.status_code == 200
    assert response.json()["insights"]["productivityScore"] == 0


def test_dashboard_endpoint_requires_token(client):
    assert client.get("/api/dashboard/stats").status_code == 401


def test_dashboard_database_failure(client, alice, auth_headers, monkeypatch):
    """Une erreur BD pendant l'agrégation renvoie 500 avec l'enveloppe d'erreur"""
    def broken(*args, **kwargs):
        raise SQLAlchemyError("connection lost")

    monkeypatch.setattr(dashboard_service, "compute_dashboard", broken)

    response = client.get("/api/dashboard/stats", headers=auth_headers(alice))
    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Failed to load dashboard statistics"}


def test_average_completion_time_unit_is_documented():
    """L'unité (jours) figure dans le schéma de réponse"""
    for model in (ProductivityInsights, ReportProductivity):
        prop = model.model_json_schema(by_alias=True)["properties"]["averageCompletionTime"]
        assert prop["unit"] == "days"
        assert "in days" in prop["description"]


def test_insights_endpoint_sends_days(client, alice, auth_headers, project_factory, db):
    project_id = project_factory(alice)
    db.add(Task(
        project_id=project_id,
        assignee_id=alice.id,
        title="T",
        status="Done",
        created_at=datetime.utcnow() - timedelta(days=3),
        updated_at=datetime.utcnow() - timedelta(hours=12)
    ))
    db.commit()

    response = client.get("/api/dashboard/insights", headers=auth_headers(alice))
    assert response.json()["insights"]["averageCompletionTime"] == 2.5

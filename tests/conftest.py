import sys
from pathlib import Path

# Ajoute la racine du projet au PYTHONPATH EN PREMIER
sys.path.insert(0, str(Path(__file__).parent.parent))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Créer engine SQLite pour tests AVANT d'importer app
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///./test.db"
test_engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

# PATCH: remplacer le engine et SessionLocal du core.database AVANT d'importer app
import app.core.database
app.core.database.engine = test_engine
app.core.database.SessionLocal = TestingSessionLocal

# Maintenant importer app (qui utilisera notre engine SQLite)
from app.core.database import Base, get_db
from app.core.security import create_access_token
from app.main import app
from app.models.user import User


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def setup_teardown():
    """Crée et nettoie la DB avant/après chaque test"""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


# Override la dépendance
app.dependency_overrides[get_db] = override_get_db


@pytest.fixture
def client():
    """Client de test FastAPI"""
    from fastapi.testclient import TestClient
    return TestClient(app)


@pytest.fixture
def db():
    """Session DB pour les tests"""
    db = TestingSessionLocal()
    yield db
    db.close()


@pytest.fixture
def make_user(db):
    """Fabrique d'utilisateurs insérés directement en base"""
    def _make(username, password="password123", name=None):
        user = User(
            email=f"{username}@example.com",
            username=username,
            name=name or username.capitalize()
        )
        user.set_password(password)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user
    return _make


@pytest.fixture
def auth_headers():
    """Retourne les headers Authorization d'un utilisateur"""
    def _headers(user):
        token = create_access_token(user.id, user.email, user.username)
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def alice(make_user):
    return make_user("alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob")


@pytest.fixture
def carol(make_user):
    return make_user("carol")


@pytest.fixture
def project_factory(client, auth_headers):
    """Crée un projet via l'API puis y ajoute les membres donnés"""
    def _create(owner, members=(), name="Projet Test"):
        response = client.post("/api/projects", headers=auth_headers(owner), json={"name": name})
        project_id = response.json()["project"]["id"]
        for member in members:
            client.post(
                f"/api/projects/{project_id}/members",
                headers=auth_headers(owner),
                json={"email": member.email}
            )
        return project_id
    return _create

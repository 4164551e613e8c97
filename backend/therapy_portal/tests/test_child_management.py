"""Tests for child management and care-team sharing."""

import asyncio
import pathlib
import sys
from datetime import date

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlmodel import SQLModel, select

# Allow importing the therapy_portal package
sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from therapy_portal.main import app
from therapy_portal.database import get_session
from therapy_portal.models import (
    User,
    Child,
    ChildUserLink,
    ChildBadge,
    DailyLog,
    Goal,
    Screening,
    ShareCode,
)
from therapy_portal.auth import get_password_hash
from therapy_portal.crud import ensure_permissions_exist
from therapy_portal.acl import ALL_PERMISSIONS, THERAPIST_LINK_PERMISSIONS


async def _setup_test_db():
    engine = create_async_engine("sqlite+aiosqlite:///:memory:")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    TestSession = async_sessionmaker(engine, expire_on_commit=False)

    async def override_get_session():
        async with TestSession() as session:
            yield session

    app.dependency_overrides[get_session] = override_get_session

    async with TestSession() as session:
        await ensure_permissions_exist(session, ALL_PERMISSIONS)
        session.add(
            User(
                name="Admin",
                email="admin@example.com",
                password_hash=get_password_hash("adminpass"),
                role="admin",
            )
        )
        await session.commit()

    return TestSession


async def _register_and_login(client, name, email, role="parent"):
    resp = await client.post(
        "/register",
        json={"name": name, "email": email, "password": "pass", "role": role},
    )
    assert resp.status_code == 200
    assert resp.json()["role"] == role
    user_id = resp.json()["id"]
    resp = await client.post("/login", json={"email": email, "password": "pass"})
    assert resp.status_code == 200
    return user_id, {"Authorization": f"Bearer {resp.json()['access_token']}"}


def test_child_management_endpoints():
    async def run():
        TestSession = await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            parent_id, parent = await _register_and_login(
                client, "Parent", "p@example.com"
            )
            therapist_id, therapist = await _register_and_login(
                client, "Therapist", "t@example.com", role="therapist"
            )

            # Therapists cannot create children
            resp = await client.post(
                "/children/",
                headers=therapist,
                json={"first_name": "Kid", "birth_date": "2022-05-01"},
            )
            assert resp.status_code == 403

            resp = await client.post(
                "/children/",
                headers=parent,
                json={"first_name": "Kid", "birth_date": "2022-05-01", "gender": "f"},
            )
            assert resp.status_code == 200
            child = resp.json()
            assert child["total_stars"] == 0
            child_id = child["id"]

            # Owner link carries every permission
            async with TestSession() as session:
                result = await session.execute(
                    select(ChildUserLink).where(
                        (ChildUserLink.child_id == child_id)
                        & (ChildUserLink.user_id == parent_id)
                    )
                )
                link = result.scalar_one()
                assert set(link.permissions) == set(ALL_PERMISSIONS)
                assert link.is_owner is True

            resp = await client.get("/children/", headers=parent)
            assert [c["id"] for c in resp.json()] == [child_id]

            resp = await client.put(
                f"/children/{child_id}",
                headers=parent,
                json={"first_name": "Kiddo"},
            )
            assert resp.status_code == 200
            assert resp.json()["first_name"] == "Kiddo"

            # Not on the care team yet
            resp = await client.get(f"/children/{child_id}", headers=therapist)
            assert resp.status_code == 404

            # Parent invites the therapist with default permissions
            resp = await client.post(
                f"/children/{child_id}/sharecode", headers=parent, json={}
            )
            assert resp.status_code == 200
            code = resp.json()["code"]

            resp = await client.post(
                f"/children/{child_id}/sharecode",
                headers=parent,
                json={"permissions": ["fly_plane"]},
            )
            assert resp.status_code == 400

            resp = await client.post(f"/children/sharecode/{code}", headers=therapist)
            assert resp.status_code == 200
            assert resp.json()["id"] == child_id

            # Codes are single use
            resp = await client.post(f"/children/sharecode/{code}", headers=therapist)
            assert resp.status_code == 404

            resp = await client.get(f"/children/{child_id}", headers=therapist)
            assert resp.status_code == 200

            resp = await client.get(f"/children/{child_id}/team", headers=parent)
            assert resp.status_code == 200
            team = {m["user_id"]: m for m in resp.json()}
            assert team[parent_id]["is_owner"] is True
            assert team[therapist_id]["role"] == "therapist"
            assert set(team[therapist_id]["permissions"]) == set(
                THERAPIST_LINK_PERMISSIONS
            )

            # Therapist lacks edit and delete rights
            resp = await client.put(
                f"/children/{child_id}",
                headers=therapist,
                json={"first_name": "Nope"},
            )
            assert resp.status_code == 403
            resp = await client.delete(f"/children/{child_id}", headers=therapist)
            assert resp.status_code == 403

            # Only the owner manages the team
            resp = await client.delete(
                f"/children/{child_id}/team/{parent_id}", headers=therapist
            )
            assert resp.status_code == 403
            resp = await client.delete(
                f"/children/{child_id}/team/{parent_id}", headers=parent
            )
            assert resp.status_code == 404
            resp = await client.delete(
                f"/children/{child_id}/team/{therapist_id}", headers=parent
            )
            assert resp.status_code == 204
            resp = await client.get(f"/children/{child_id}", headers=therapist)
            assert resp.status_code == 404

            resp = await client.delete(f"/children/{child_id}", headers=parent)
            assert resp.status_code == 204
            resp = await client.get(f"/children/{child_id}", headers=parent)
            assert resp.status_code == 404

    asyncio.run(run())


def test_updates_reject_null_for_required_fields():
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            _, parent = await _register_and_login(client, "Parent", "p@example.com")
            resp = await client.post(
                "/children/",
                headers=parent,
                json={"first_name": "Kid", "birth_date": "2022-05-01"},
            )
            child_id = resp.json()["id"]

            resp = await client.put(
                f"/children/{child_id}",
                headers=parent,
                json={"first_name": None},
            )
            assert resp.status_code == 422

            # Optional fields can still be cleared
            resp = await client.put(
                f"/children/{child_id}",
                headers=parent,
                json={"gender": None},
            )
            assert resp.status_code == 200
            assert resp.json()["first_name"] == "Kid"

            resp = await client.post(
                f"/goals/child/{child_id}",
                headers=parent,
                json={"title": "Stack blocks", "description": "Three high"},
            )
            goal_id = resp.json()["id"]

            resp = await client.put(
                f"/goals/{goal_id}", headers=parent, json={"title": None}
            )
            assert resp.status_code == 422

            resp = await client.put(
                f"/goals/{goal_id}", headers=parent, json={"description": None}
            )
            assert resp.status_code == 200
            assert resp.json()["title"] == "Stack blocks"
            assert resp.json()["description"] is None

    asyncio.run(run())


def test_members_cannot_share_more_than_they_hold():
    async def run():
        await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            _, parent = await _register_and_login(client, "Parent", "p@example.com")
            _, coparent = await _register_and_login(
                client, "Co-parent", "c@example.com"
            )
            resp = await client.post(
                "/children/",
                headers=parent,
                json={"first_name": "Kid", "birth_date": "2022-05-01"},
            )
            child_id = resp.json()["id"]

            resp = await client.post(
                f"/children/{child_id}/sharecode",
                headers=parent,
                json={"permissions": ["view_screenings", "share_child"]},
            )
            code = resp.json()["code"]
            resp = await client.post(f"/children/sharecode/{code}", headers=coparent)
            assert resp.status_code == 200

            resp = await client.post(
                f"/children/{child_id}/sharecode",
                headers=coparent,
                json={"permissions": ["edit_child"]},
            )
            assert resp.status_code == 403

            # Defaults include goal permissions the co-parent lacks
            resp = await client.post(
                f"/children/{child_id}/sharecode", headers=coparent, json={}
            )
            assert resp.status_code == 403

            resp = await client.post(
                f"/children/{child_id}/sharecode",
                headers=coparent,
                json={"permissions": ["view_screenings"]},
            )
            assert resp.status_code == 200

            # The owner may grant anything
            resp = await client.post(
                f"/children/{child_id}/sharecode",
                headers=parent,
                json={"permissions": ALL_PERMISSIONS},
            )
            assert resp.status_code == 200

    asyncio.run(run())


def test_timestamps_are_timezone_aware():
    stamps = [
        Child(first_name="Kid", birth_date=date(2022, 5, 1)).created_at,
        ShareCode(code="abc", child_id=1, created_by=1).created_at,
        Screening(child_id=1, total_score=0, risk_level="low").completed_at,
        Goal(child_id=1, title="Wave").created_at,
        DailyLog(goal_id=1, child_id=1).created_at,
        ChildBadge(child_id=1, badge_id=1).earned_at,
    ]
    for stamp in stamps:
        assert stamp.tzinfo is not None

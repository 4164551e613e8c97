"""Tests for admin account management endpoints."""

import asyncio
import pathlib
import sys

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlmodel import SQLModel, select

# Allow importing the therapy_portal package
sys.path.append(str(pathlib.Path(__file__).resolve().parents[2]))

from therapy_portal.main import app
from therapy_portal.database import get_session
from therapy_portal.models import (
    Permission,
    UserPermissionLink,
    ChildUserLink,
    Goal,
    DailyLog,
)
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

    return TestSession


def test_first_user_becomes_admin_and_manages_accounts():
    async def run():
        TestSession = await _setup_test_db()
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            resp = await client.get("/needs-admin")
            assert resp.json() == {"needs_admin": True}

            resp = await client.post(
                "/register",
                json={"name": "Admin", "email": "admin@example.com", "password": "pass"},
            )
            assert resp.status_code == 200
            assert resp.json()["role"] == "admin"
            admin_id = resp.json()["id"]

            resp = await client.get("/needs-admin")
            assert resp.json() == {"needs_admin": False}

            resp = await client.post(
                "/register",
                json={
                    "name": "Therapist",
                    "email": "t@example.com",
                    "password": "pass",
                    "role": "therapist",
                },
            )
            assert resp.status_code == 200
            therapist_id = resp.json()["id"]

            # Duplicate email is rejected
            resp = await client.post(
                "/register",
                json={"name": "Again", "email": "t@example.com", "password": "pass"},
            )
            assert resp.status_code == 400
            assert resp.json()["detail"]["code"] == "auth_email_registered"

            # Therapists receive their role defaults
            async with TestSession() as session:
                result = await session.execute(
                    select(Permission.name)
                    .join(UserPermissionLink)
                    .where(UserPermissionLink.user_id == therapist_id)
                )
                perms = {row[0] for row in result.all()}
            assert perms == set(THERAPIST_LINK_PERMISSIONS)

            resp = await client.post(
                "/login", json={"email": "admin@example.com", "password": "pass"}
            )
            admin_headers = {"Authorization": f"Bearer {resp.json()['access_token']}"}
            resp = await client.post(
                "/login", json={"email": "t@example.com", "password": "wrong"}
            )
            assert resp.status_code == 401
            resp = await client.post(
                "/login", json={"email": "t@example.com", "password": "pass"}
            )
            therapist_headers = {
                "Authorization": f"Bearer {resp.json()['access_token']}"
            }

            resp = await client.get("/users/me", headers=therapist_headers)
            assert resp.status_code == 200
            assert resp.json()["role"] == "therapist"

            resp = await client.get("/admin/users", headers=therapist_headers)
            assert resp.status_code == 403

            resp = await client.get("/admin/users", headers=admin_headers)
            assert resp.status_code == 200
            assert len(resp.json()) == 2

            resp = await client.put(
                f"/admin/users/{therapist_id}",
                headers=admin_headers,
                json={"name": "Dr. T"},
            )
            assert resp.status_code == 200
            assert resp.json()["name"] == "Dr. T"

            # Admin bypasses care-team checks
            resp = await client.post(
                "/children/",
                headers=admin_headers,
                json={"first_name": "Kid", "birth_date": "2023-03-03"},
            )
            assert resp.status_code == 200
            child_id = resp.json()["id"]
            resp = await client.post(
                f"/children/{child_id}/sharecode", headers=admin_headers, json={}
            )
            code = resp.json()["code"]
            resp = await client.post(
                f"/children/sharecode/{code}", headers=therapist_headers
            )
            assert resp.status_code == 200

            resp = await client.get("/admin/children", headers=admin_headers)
            assert [c["id"] for c in resp.json()] == [child_id]

            # The therapist records work that must outlive the account
            resp = await client.post(
                f"/goals/child/{child_id}",
                headers=therapist_headers,
                json={"title": "Point to pictures"},
            )
            assert resp.status_code == 200
            goal_id = resp.json()["id"]
            resp = await client.post(
                f"/goals/{goal_id}/logs", headers=therapist_headers, json={"mood": "good"}
            )
            assert resp.status_code == 200

            # Owners cannot be removed while they still have children
            resp = await client.delete(f"/admin/users/{admin_id}", headers=admin_headers)
            assert resp.status_code == 400

            resp = await client.delete(
                f"/admin/users/{therapist_id}", headers=admin_headers
            )
            assert resp.status_code == 204
            resp = await client.get(
                f"/admin/users/{therapist_id}", headers=admin_headers
            )
            assert resp.status_code == 404

            async with TestSession() as session:
                result = await session.execute(
                    select(ChildUserLink).where(ChildUserLink.user_id == therapist_id)
                )
                assert result.scalars().all() == []
                result = await session.execute(
                    select(UserPermissionLink).where(
                        UserPermissionLink.user_id == therapist_id
                    )
                )
                assert result.scalars().all() == []
                goal = await session.get(Goal, goal_id)
                assert goal.created_by is None
                result = await session.execute(
                    select(DailyLog).where(DailyLog.goal_id == goal_id)
                )
                assert [log.logged_by for log in result.scalars().all()] == [None]

    asyncio.run(run())

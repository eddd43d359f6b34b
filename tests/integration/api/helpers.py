"""Request helpers shared by the API integration tests."""

from typing import Any

from httpx import AsyncClient

from infrastructure.auth.provider import TokenUser

API = "/api/v1"


def invite_body(user: TokenUser, role: str = "viewer") -> dict[str, Any]:
    return {
        "user_id": user.id,
        "name": user.display_name,
        "email": user.email,
        "role": role,
    }


async def create_group(
    client: AsyncClient,
    headers: dict[str, str],
    tag: str = "@eng",
    name: str = "Engineering",
    **extra: Any,
) -> dict[str, Any]:
    response = await client.post(
        f"{API}/groups", json={"name": name, "tag": tag, **extra}, headers=headers
    )
    assert response.status_code == 201, response.text
    return response.json()["data"]  # type: ignore[no-any-return]


async def join_group(
    client: AsyncClient,
    group_id: str,
    owner_headers: dict[str, str],
    member: TokenUser,
    member_headers: dict[str, str],
    role: str = "viewer",
) -> dict[str, Any]:
    """Invite ``member`` as the owner, then accept as the member."""
    response = await client.post(
        f"{API}/groups/{group_id}/invite",
        json=invite_body(member, role),
        headers=owner_headers,
    )
    assert response.status_code == 201, response.text
    response = await client.post(f"{API}/groups/{group_id}/accept", headers=member_headers)
    assert response.status_code == 200, response.text
    return response.json()["data"]  # type: ignore[no-any-return]


async def create_task(
    client: AsyncClient,
    headers: dict[str, str],
    title: str = "Write release notes",
    **extra: Any,
) -> dict[str, Any]:
    response = await client.post(f"{API}/tasks", json={"title": title, **extra}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]  # type: ignore[no-any-return]

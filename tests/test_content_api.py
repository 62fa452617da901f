"""
Tests for developers, blog posts, testimonials and the team page.
"""

import pytest
from httpx import AsyncClient

from tests.conftest import DeveloperFactory, PropertyFactory, auth_headers, make_image

POST_FORM = {
    "title": "Buying Off-Plan in 2025",
    "content": "Off-plan projects let buyers pay in instalments. " * 50,
    "excerpt": "What to check before you sign",
    "category": "Guides",
    "tags": "off-plan, investment",
    "status": "published",
}


class TestDevelopers:
    """Test the developer directory and management."""

    @pytest.mark.asyncio
    async def test_list_active_with_property_counts(self, async_client: AsyncClient, db_session):
        """Inactive developers are hidden; active ones are ordered by name."""
        zenith = await DeveloperFactory.create_developer(db_session, name="Zenith Homes", slug="zenith")
        await DeveloperFactory.create_developer(db_session, name="Atlas Estates", slug="atlas")
        await DeveloperFactory.create_developer(db_session, name="Dormant", slug="dormant", is_active=False)
        await PropertyFactory.create_property(db_session, developer_id=zenith.id)
        await PropertyFactory.create_property(db_session, developer_id=zenith.id)

        response = await async_client.get("/api/developers")

        body = response.json()
        assert body["count"] == 2
        assert [d["name"] for d in body["data"]] == ["Atlas Estates", "Zenith Homes"]
        assert [d["propertyCount"] for d in body["data"]] == [0, 2]
        assert "backgroundImage" in body["data"][0]

    @pytest.mark.asyncio
    async def test_detail_by_id_and_slug(self, async_client: AsyncClient, db_session):
        developer = await DeveloperFactory.create_developer(db_session, name="Atlas Estates", slug="atlas")
        await PropertyFactory.create_property(db_session, developer_id=developer.id, title="Atlas Tower 1")

        by_id = await async_client.get(f"/api/developers/{developer.id}")
        by_slug = await async_client.get("/api/developers/slug/atlas")

        assert by_id.json()["data"]["id"] == by_slug.json()["data"]["id"] == developer.id
        properties = by_id.json()["data"]["properties"]
        assert [p["title"] for p in properties] == ["Atlas Tower 1"]
        assert properties[0]["developer"]["slug"] == "atlas"

    @pytest.mark.asyncio
    async def test_unknown_slug(self, async_client: AsyncClient):
        response = await async_client.get("/api/developers/slug/nobody")

        assert response.status_code == 404
        assert response.json()["message"] == "Developer not found"

    @pytest.mark.asyncio
    async def test_create_generates_slug_and_stores_logo(self, async_client: AsyncClient):
        response = await async_client.post(
            "/api/developers",
            data={"name": "Harbour & Sons Developments", "established": "1998", "featured": "true"},
            files=[("logo", ("logo.png", make_image("PNG"), "image/png"))],
        )

        assert response.status_code == 201
        created = response.json()["data"]
        assert created["slug"] == "harbour-sons-developments"
        assert created["established"] == 1998
        assert created["featured"] is True
        assert created["logo"].startswith("http://test/uploads/developers/logos/")

    @pytest.mark.asyncio
    async def test_create_requires_name(self, async_client: AsyncClient):
        response = await async_client.post("/api/developers", data={"website": "https://example.com"})

        assert response.status_code == 400
        assert response.json()["missingFields"] == ["name"]

    @pytest.mark.asyncio
    async def test_duplicate_slug(self, async_client: AsyncClient, db_session):
        await DeveloperFactory.create_developer(db_session, name="Atlas", slug="atlas")

        response = await async_client.post("/api/developers", data={"name": "ATLAS"})

        assert response.status_code == 409
        assert response.json()["message"] == "Developer with this slug already exists"

    @pytest.mark.asyncio
    async def test_update_keeps_own_slug(self, async_client: AsyncClient, db_session):
        developer = await DeveloperFactory.create_developer(db_session, name="Atlas", slug="atlas")

        response = await async_client.put(
            f"/api/developers/{developer.id}", data={"slug": "atlas", "description": "Since 1990"}
        )

        assert response.status_code == 200
        assert response.json()["data"]["description"] == "Since 1990"

    @pytest.mark.asyncio
    async def test_delete_with_properties_is_refused(self, async_client: AsyncClient, db_session):
        developer = await DeveloperFactory.create_developer(db_session, name="Atlas", slug="atlas")
        await PropertyFactory.create_property(db_session, developer_id=developer.id)

        response = await async_client.delete(f"/api/developers/{developer.id}")

        assert response.status_code == 409
        assert "related properties" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_write_invalidates_property_cache(self, async_client: AsyncClient, db_session, cache_backend):
        """Property pages embed developer data, so developer writes clear them."""
        developer = await DeveloperFactory.create_developer(db_session, name="Atlas", slug="atlas")
        await async_client.get("/api/properties")
        assert cache_backend.size("properties") == 1

        await async_client.put(f"/api/developers/{developer.id}", data={"name": "Atlas Group"})

        assert cache_backend.size("properties") == 0


class TestBlog:
    """Test public blog reads and post management."""

    @pytest.fixture
    async def posts(self, async_client: AsyncClient, admin_headers):
        created = []
        for form in (
            POST_FORM,
            {**POST_FORM, "title": "Renting in Dubai Marina", "tags": "rent, investment", "category": "Areas",
             "featured": "true"},
            {**POST_FORM, "title": "Draft Notes", "status": "draft", "tags": "internal", "category": "Internal"},
        ):
            response = await async_client.post("/api/blog", data=form, headers=admin_headers)
            assert response.status_code == 201
            created.append(response.json()["data"])
        return created

    @pytest.mark.asyncio
    async def test_create_post_fields(self, posts, admin_user):
        post = posts[0]

        assert post["slug"] == "buying-off-plan-in-2025"
        assert post["tags"] == ["off-plan", "investment"]
        assert post["readingTime"] == "2 min read"
        assert post["publishedAt"] is not None
        assert post["publishedAtFormatted"]
        assert post["author"] == {"id": admin_user.id, "name": "Site Admin", "email": "admin@example.com"}

    @pytest.mark.asyncio
    async def test_drafts_are_not_listed(self, async_client: AsyncClient, posts):
        response = await async_client.get("/api/blog")

        titles = {p["title"] for p in response.json()["data"]}
        assert titles == {"Buying Off-Plan in 2025", "Renting in Dubai Marina"}
        assert posts[2]["publishedAt"] is None

    @pytest.mark.asyncio
    async def test_featured_filter_and_route(self, async_client: AsyncClient, posts):
        listed = await async_client.get("/api/blog", params={"featured": "true"})
        featured = await async_client.get("/api/blog/featured")

        assert [p["title"] for p in listed.json()["data"]] == ["Renting in Dubai Marina"]
        assert featured.json()["count"] == 1

    @pytest.mark.asyncio
    async def test_tags_and_categories(self, async_client: AsyncClient, posts):
        tags = await async_client.get("/api/blog/tags")
        categories = await async_client.get("/api/blog/categories")

        assert tags.json()["data"] == [
            {"name": "investment", "count": 2},
            {"name": "off-plan", "count": 1},
            {"name": "rent", "count": 1},
        ]
        assert categories.json()["data"] == [
            {"name": "Areas", "count": 1},
            {"name": "Guides", "count": 1},
        ]

    @pytest.mark.asyncio
    async def test_recent_posts(self, async_client: AsyncClient, posts):
        response = await async_client.get("/api/blog/recent", params={"limit": "1"})

        assert len(response.json()["data"]) == 1

    @pytest.mark.asyncio
    async def test_duplicate_title(self, async_client: AsyncClient, posts):
        response = await async_client.post("/api/blog", data={**POST_FORM, "title": "buying off-plan in 2025!"})

        assert response.status_code == 409
        assert response.json()["message"] == "A blog post with this title already exists"

    @pytest.mark.asyncio
    async def test_missing_fields(self, async_client: AsyncClient):
        response = await async_client.post("/api/blog", data={"title": "Only a title"})

        assert response.status_code == 400
        assert response.json()["missingFields"] == ["content", "excerpt"]

    @pytest.mark.asyncio
    async def test_publishing_a_draft_stamps_published_at(self, async_client: AsyncClient, posts):
        draft = posts[2]

        response = await async_client.put(
            f"/api/blog/{draft['id']}",
            data={"title": "Draft Notes Revised", "content": "Now public", "excerpt": "Short", "status": "published"},
        )

        updated = response.json()["data"]
        assert updated["slug"] == "draft-notes-revised"
        assert updated["status"] == "published"
        assert updated["publishedAt"] is not None

    @pytest.mark.asyncio
    async def test_write_invalidates_blog_cache(self, async_client: AsyncClient, posts):
        await async_client.get("/api/blog")
        assert (await async_client.get("/api/blog")).json()["fromCache"] is True

        await async_client.delete(f"/api/blog/{posts[0]['id']}")

        response = await async_client.get("/api/blog")
        assert "fromCache" not in response.json()
        assert len(response.json()["data"]) == 1

    @pytest.mark.asyncio
    async def test_unknown_post(self, async_client: AsyncClient):
        response = await async_client.get("/api/blog/424242")

        assert response.status_code == 404
        assert response.json()["message"] == "Blog post not found"


class TestTestimonials:
    """Test testimonial submission and moderation."""

    @pytest.mark.asyncio
    async def test_submission_starts_pending(self, async_client: AsyncClient):
        """The site form sends quote and role; both map onto stored fields."""
        response = await async_client.post("/api/testimonials", data={
            "name": "Hana",
            "quote": "Smooth purchase from start to finish",
            "role": "Home owner",
            "rating": "5",
            "status": "approved",
        })

        assert response.status_code == 201
        created = response.json()["data"]
        assert created["status"] == "pending"
        assert created["content"] == created["quote"] == "Smooth purchase from start to finish"
        assert created["role"] == "Home owner"
        assert created["order"] == 2

    @pytest.mark.asyncio
    async def test_missing_rating(self, async_client: AsyncClient):
        response = await async_client.post("/api/testimonials", data={"name": "Hana", "content": "Great"})

        assert response.status_code == 400
        assert response.json()["missingFields"] == ["rating"]

    @pytest.mark.asyncio
    async def test_rating_bounds(self, async_client: AsyncClient):
        response = await async_client.post("/api/testimonials", data={"name": "Hana", "content": "Great", "rating": "9"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_approve_and_feature(self, async_client: AsyncClient):
        created = (await async_client.post("/api/testimonials", data={
            "name": "Hana", "content": "Great", "rating": "4",
        })).json()["data"]

        response = await async_client.put(
            f"/api/testimonials/{created['id']}", data={"status": "approved", "featured": "true"}
        )

        updated = response.json()["data"]
        assert updated["status"] == "approved"
        assert updated["order"] == 1
        assert updated["role"] == "Customer"

    @pytest.mark.asyncio
    async def test_list_and_delete(self, async_client: AsyncClient):
        created = (await async_client.post("/api/testimonials", data={
            "name": "Hana", "content": "Great", "rating": "4",
        })).json()["data"]

        listed = await async_client.get("/api/testimonials")
        deleted = await async_client.delete(f"/api/testimonials/{created['id']}")
        missing = await async_client.get(f"/api/testimonials/{created['id']}")

        assert listed.json()["count"] == 1
        assert deleted.status_code == 200
        assert missing.status_code == 404
        assert missing.json()["message"] == "Testimonial not found"


class TestTeam:
    """Test the team page."""

    @pytest.mark.asyncio
    async def test_create_with_social_links(self, async_client: AsyncClient):
        response = await async_client.post("/api/team", data={
            "name": "Yusuf Malik",
            "position": "Head of Sales",
            "socialLinks": '{"linkedin": "https://linkedin.example.com/yusuf"}',
            "isLeadership": "true",
        })

        assert response.status_code == 201
        member = response.json()["data"]
        assert member["socialLinks"] == {"linkedin": "https://linkedin.example.com/yusuf"}
        assert member["isLeadership"] is True
        assert member["isActive"] is True
        assert member["sortOrder"] == 0

    @pytest.mark.asyncio
    async def test_invalid_social_links(self, async_client: AsyncClient):
        response = await async_client.post("/api/team", data={
            "name": "Yusuf Malik",
            "position": "Head of Sales",
            "socialLinks": "[1, 2]",
        })

        assert response.status_code == 400
        assert response.json()["message"] == "socialLinks must be a JSON object"

    @pytest.mark.asyncio
    async def test_list_active_members_by_name(self, async_client: AsyncClient):
        for name, active in (("Zara", "true"), ("Adam", "true"), ("Former", "false")):
            await async_client.post("/api/team", data={"name": name, "position": "Agent", "isActive": active})

        response = await async_client.get("/api/team")

        assert [m["name"] for m in response.json()["data"]] == ["Adam", "Zara"]

    @pytest.mark.asyncio
    async def test_missing_position(self, async_client: AsyncClient):
        response = await async_client.post("/api/team", data={"name": "Adam"})

        assert response.status_code == 400
        assert response.json()["missingFields"] == ["position"]

    @pytest.mark.asyncio
    async def test_replacing_image_removes_old_file(self, async_client: AsyncClient, storage):
        created = (await async_client.post(
            "/api/team",
            data={"name": "Adam", "position": "Agent"},
            files=[("image", ("adam.png", make_image("PNG"), "image/png"))],
        )).json()["data"]

        updated = (await async_client.put(
            f"/api/team/{created['id']}",
            data={"position": "Senior Agent"},
            files=[("image", ("adam2.png", make_image("PNG"), "image/png"))],
        )).json()["data"]

        assert updated["image"] != created["image"]
        files = [p for p in (storage.root / "team").iterdir() if p.is_file()]
        assert len(files) == 1
        assert updated["image"].endswith(files[0].name)

    @pytest.mark.asyncio
    async def test_team_member_not_found(self, async_client: AsyncClient, admin_user):
        response = await async_client.get("/api/team/999", headers=auth_headers(admin_user))

        assert response.status_code == 404
        assert response.json()["message"] == "Team member not found"

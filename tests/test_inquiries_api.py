"""
Tests for lead capture: property inquiries, off-plan inquiries, document requests
and the contact form.
"""

import pytest
from httpx import AsyncClient

from tests.conftest import PropertyFactory, auth_headers

INQUIRY = {
    "name": "Omar Saleh",
    "email": "Omar@Example.com",
    "phone": "+971501112233",
    "message": "Is the apartment still available?",
}

DOCUMENT_REQUEST = {
    "name": "Hana Yusuf",
    "email": "Hana@Example.com",
    "phone": "+971504445566",
    "documentType": "Floor plan",
    "propertyReference": "PH-1042",
}

CONTACT = {
    "name": "Leila",
    "email": "leila@example.com",
    "subject": "Valuation",
    "message": "Could someone value my villa?",
}


class TestContactForm:
    """Test the public contact form and the admin inbox."""

    @pytest.mark.asyncio
    async def test_submit(self, async_client: AsyncClient):
        response = await async_client.post("/api/contact", json=CONTACT)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Thank you for your message! We will get back to you soon."
        assert set(body["data"]) == {"id"}

    @pytest.mark.asyncio
    async def test_blank_subject_is_missing(self, async_client: AsyncClient):
        response = await async_client.post("/api/contact", json={**CONTACT, "subject": "   "})

        assert response.status_code == 400
        assert response.json()["missingFields"] == ["subject"]

    @pytest.mark.asyncio
    async def test_inbox_lists_and_marks_read(self, async_client: AsyncClient, admin_headers):
        created = (await async_client.post("/api/contact", json=CONTACT)).json()["data"]

        inbox = await async_client.get("/api/messages", headers=admin_headers)
        updated = await async_client.put(
            f"/api/messages/{created['id']}", json={"status": "read"}, headers=admin_headers
        )

        message = inbox.json()["data"][0]
        assert message["status"] == "new"
        assert message["source"] == "contact_form"
        assert inbox.json()["pagination"]["totalItems"] == 1
        assert updated.json()["data"]["status"] == "read"

    @pytest.mark.asyncio
    async def test_inbox_search(self, async_client: AsyncClient, admin_headers):
        await async_client.post("/api/contact", json=CONTACT)
        await async_client.post("/api/contact", json={**CONTACT, "name": "Karim", "subject": "Renting"})

        response = await async_client.get("/api/messages", params={"search": "rent"}, headers=admin_headers)

        assert [m["name"] for m in response.json()["data"]] == ["Karim"]

    @pytest.mark.asyncio
    async def test_inbox_requires_admin(self, async_client: AsyncClient, agent_user):
        anonymous = await async_client.get("/api/messages")
        agent = await async_client.get("/api/messages", headers=auth_headers(agent_user))

        assert anonymous.status_code == 401
        assert agent.status_code == 403


class TestSubmitInquiry:
    """Test public inquiry submission."""

    @pytest.mark.asyncio
    async def test_inquiry_for_property(self, async_client: AsyncClient, db_session):
        prop = await PropertyFactory.create_property(db_session)

        response = await async_client.post("/api/inquiries", json={**INQUIRY, "propertyId": prop.id})

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Inquiry submitted successfully. We will contact you soon."
        inquiry = body["data"]
        assert inquiry["propertyId"] == prop.id
        assert inquiry["email"] == "omar@example.com"
        assert inquiry["status"] == "new"
        assert inquiry["source"] == "website"
        assert inquiry["userId"] is None

    @pytest.mark.asyncio
    async def test_unknown_property(self, async_client: AsyncClient):
        response = await async_client.post("/api/inquiries", json={**INQUIRY, "propertyId": 4040})

        assert response.status_code == 400
        assert response.json()["message"] == "Property 4040 does not exist"

    @pytest.mark.asyncio
    async def test_signed_in_visitor_is_recorded(self, async_client: AsyncClient, agent_user):
        response = await async_client.post(
            "/api/inquiries", json={**INQUIRY, "source": "whatsapp"}, headers=auth_headers(agent_user)
        )

        inquiry = response.json()["data"]
        assert inquiry["userId"] == agent_user.id
        assert inquiry["source"] == "whatsapp"

    @pytest.mark.asyncio
    async def test_missing_fields(self, async_client: AsyncClient):
        response = await async_client.post("/api/inquiries", json={"name": "Omar", "email": "omar@example.com"})

        assert response.status_code == 400
        assert sorted(response.json()["missingFields"]) == ["message", "phone"]

    @pytest.mark.asyncio
    async def test_invalid_email(self, async_client: AsyncClient):
        response = await async_client.post("/api/inquiries", json={**INQUIRY, "email": "not-an-email"})

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_offplan_defaults(self, async_client: AsyncClient):
        response = await async_client.post("/api/offplan-inquiries", json=INQUIRY)

        assert response.status_code == 201
        inquiry = response.json()["data"]
        assert inquiry["preferredLanguage"] == "english"
        assert inquiry["interestedInMortgage"] is False
        assert "userId" not in inquiry

    @pytest.mark.asyncio
    async def test_offplan_preferences(self, async_client: AsyncClient):
        response = await async_client.post("/api/offplan-inquiries", json={
            **INQUIRY,
            "preferredLanguage": "arabic",
            "interestedInMortgage": True,
        })

        inquiry = response.json()["data"]
        assert inquiry["preferredLanguage"] == "arabic"
        assert inquiry["interestedInMortgage"] is True


class TestInquiryWorkflow:
    """Test the back-office inquiry workflow."""

    @pytest.fixture
    async def inquiry_ids(self, async_client: AsyncClient):
        ids = []
        for name in ("First Lead", "Second Lead", "Third Lead"):
            response = await async_client.post("/api/inquiries", json={**INQUIRY, "name": name})
            ids.append(response.json()["data"]["id"])
        return ids

    @pytest.mark.asyncio
    async def test_list_newest_first(self, async_client: AsyncClient, admin_headers, inquiry_ids):
        response = await async_client.get("/api/inquiries", params={"limit": "2"}, headers=admin_headers)

        body = response.json()
        assert [i["id"] for i in body["data"]] == [inquiry_ids[2], inquiry_ids[1]]
        assert body["pagination"] == {"currentPage": 1, "totalPages": 2, "totalItems": 3, "itemsPerPage": 2}

    @pytest.mark.asyncio
    async def test_status_filter(self, async_client: AsyncClient, admin_headers, inquiry_ids):
        await async_client.put(
            f"/api/inquiries/{inquiry_ids[0]}", json={"status": "resolved"}, headers=admin_headers
        )

        resolved = await async_client.get("/api/inquiries", params={"status": "resolved"}, headers=admin_headers)
        new = await async_client.get("/api/inquiries", params={"status": "new"}, headers=admin_headers)

        assert [i["id"] for i in resolved.json()["data"]] == [inquiry_ids[0]]
        assert new.json()["pagination"]["totalItems"] == 2

    @pytest.mark.asyncio
    async def test_invalid_status_filter(self, async_client: AsyncClient, admin_headers, inquiry_ids):
        response = await async_client.get("/api/inquiries", params={"status": "closed"}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["message"].startswith("Invalid status 'closed'")

    @pytest.mark.asyncio
    async def test_assign_to_agent(self, async_client: AsyncClient, admin_headers, agent_user, inquiry_ids):
        response = await async_client.put(
            f"/api/inquiries/{inquiry_ids[0]}",
            json={"status": "in-progress", "notes": "Called back", "assignedTo": agent_user.id},
            headers=admin_headers,
        )

        inquiry = response.json()["data"]
        assert inquiry["status"] == "in-progress"
        assert inquiry["notes"] == "Called back"
        assert inquiry["assignedTo"] == agent_user.id

    @pytest.mark.asyncio
    async def test_assign_to_unknown_user(self, async_client: AsyncClient, admin_headers, inquiry_ids):
        response = await async_client.put(
            f"/api/inquiries/{inquiry_ids[0]}", json={"assignedTo": 9999}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "User 9999 does not exist"

    @pytest.mark.asyncio
    async def test_empty_update(self, async_client: AsyncClient, admin_headers, inquiry_ids):
        response = await async_client.put(f"/api/inquiries/{inquiry_ids[0]}", json={}, headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["message"] == "No valid fields to update"

    @pytest.mark.asyncio
    async def test_delete(self, async_client: AsyncClient, admin_headers, inquiry_ids):
        deleted = await async_client.delete(f"/api/inquiries/{inquiry_ids[0]}", headers=admin_headers)
        missing = await async_client.get(f"/api/inquiries/{inquiry_ids[0]}", headers=admin_headers)

        assert deleted.status_code == 200
        assert missing.status_code == 404
        assert missing.json()["message"] == "Inquiry not found"

    @pytest.mark.asyncio
    async def test_agents_cannot_read_leads(self, async_client: AsyncClient, agent_user, inquiry_ids):
        response = await async_client.get("/api/inquiries", headers=auth_headers(agent_user))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_offplan_inbox_is_separate(self, async_client: AsyncClient, admin_headers, inquiry_ids):
        await async_client.post("/api/offplan-inquiries", json=INQUIRY)

        response = await async_client.get("/api/offplan-inquiries", headers=admin_headers)

        assert response.json()["pagination"]["totalItems"] == 1


class TestDocumentRequests:
    """Test document request submission and the back-office workflow."""

    @pytest.mark.asyncio
    async def test_submit(self, async_client: AsyncClient):
        response = await async_client.post("/api/document-requests", json=DOCUMENT_REQUEST)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Document request submitted successfully"
        request = body["data"]
        assert request["email"] == "hana@example.com"
        assert request["documentType"] == "Floor plan"
        assert request["propertyReference"] == "PH-1042"
        assert request["additionalInfo"] is None
        assert request["status"] == "pending"
        assert request["source"] == "website"
        assert request["completedAt"] is None

    @pytest.mark.asyncio
    async def test_missing_fields(self, async_client: AsyncClient):
        response = await async_client.post("/api/document-requests", json={
            "name": "Hana",
            "email": "hana@example.com",
            "documentType": "  ",
        })

        assert response.status_code == 400
        assert sorted(response.json()["missingFields"]) == ["documentType", "phone"]

    @pytest.mark.asyncio
    async def test_submission_is_rate_limited(self, async_client: AsyncClient):
        for _ in range(5):
            assert (await async_client.post("/api/document-requests", json=DOCUMENT_REQUEST)).status_code == 201

        response = await async_client.post("/api/document-requests", json=DOCUMENT_REQUEST)

        assert response.status_code == 429

    @pytest.mark.asyncio
    async def test_list_search_and_status_filter(self, async_client: AsyncClient, admin_headers):
        await async_client.post("/api/document-requests", json=DOCUMENT_REQUEST)
        await async_client.post(
            "/api/document-requests", json={**DOCUMENT_REQUEST, "name": "Rami", "phone": "+971509990000"}
        )

        searched = await async_client.get(
            "/api/document-requests", params={"search": "9990000"}, headers=admin_headers
        )
        pending = await async_client.get(
            "/api/document-requests", params={"status": "pending"}, headers=admin_headers
        )
        invalid = await async_client.get(
            "/api/document-requests", params={"status": "new"}, headers=admin_headers
        )

        assert [r["name"] for r in searched.json()["data"]] == ["Rami"]
        assert pending.json()["pagination"]["totalItems"] == 2
        assert invalid.status_code == 400
        assert invalid.json()["message"].startswith("Invalid status 'new'")

    @pytest.mark.asyncio
    async def test_completing_stamps_completed_at(self, async_client: AsyncClient, admin_headers, agent_user):
        created = (await async_client.post("/api/document-requests", json=DOCUMENT_REQUEST)).json()["data"]

        response = await async_client.put(
            f"/api/document-requests/{created['id']}",
            json={"status": "completed", "notes": "Sent by email", "assignedTo": agent_user.id},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["message"] == "Document request updated successfully"
        request = response.json()["data"]
        assert request["status"] == "completed"
        assert request["notes"] == "Sent by email"
        assert request["assignedTo"] == agent_user.id
        assert request["completedAt"] is not None

    @pytest.mark.asyncio
    async def test_sent_does_not_stamp_completed_at(self, async_client: AsyncClient, admin_headers):
        created = (await async_client.post("/api/document-requests", json=DOCUMENT_REQUEST)).json()["data"]

        response = await async_client.put(
            f"/api/document-requests/{created['id']}", json={"status": "sent"}, headers=admin_headers
        )

        assert response.json()["data"]["completedAt"] is None

    @pytest.mark.asyncio
    async def test_empty_update(self, async_client: AsyncClient, admin_headers):
        created = (await async_client.post("/api/document-requests", json=DOCUMENT_REQUEST)).json()["data"]

        response = await async_client.put(
            f"/api/document-requests/{created['id']}", json={}, headers=admin_headers
        )

        assert response.status_code == 400
        assert response.json()["message"] == "No valid fields to update"

    @pytest.mark.asyncio
    async def test_delete(self, async_client: AsyncClient, admin_headers):
        created = (await async_client.post("/api/document-requests", json=DOCUMENT_REQUEST)).json()["data"]

        deleted = await async_client.delete(f"/api/document-requests/{created['id']}", headers=admin_headers)
        missing = await async_client.get(f"/api/document-requests/{created['id']}", headers=admin_headers)

        assert deleted.json() == {"success": True, "message": "Document request deleted successfully"}
        assert missing.status_code == 404
        assert missing.json()["message"] == "Document request not found"

    @pytest.mark.asyncio
    async def test_workflow_requires_admin(self, async_client: AsyncClient, agent_user):
        anonymous = await async_client.get("/api/document-requests")
        agent = await async_client.get("/api/document-requests", headers=auth_headers(agent_user))

        assert anonymous.status_code == 401
        assert agent.status_code == 403

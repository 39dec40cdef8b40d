"""
KYC Routes Tests

Ordered section submission, validation codes and admin review.
"""

from datetime import date

import pytest
from httpx import AsyncClient

from conftest import auth_headers

BASIC_DETAILS = {
    "fullName": "Asha Verma",
    "dob": "1990-04-15",
    "gender": "Female",
    "pan": "abcde1234f",
    "aadharNumber": "123412341234",
}

ANSWERS = {
    "questionsAndAnswers": [
        {"question": "How would you react to a 20% drawdown?", "answer": "Hold"},
        {"question": "Investment horizon?", "answer": "3-5 years"},
    ]
}


async def _complete_all_sections(client: AsyncClient, headers: dict) -> None:
    await client.post("/api/kyc/basic-details", json=BASIC_DETAILS, headers=headers)
    for section in ("risk-profiling", "capital-management", "experience"):
        response = await client.post(f"/api/kyc/{section}", json=ANSWERS, headers=headers)
        assert response.status_code == 200


@pytest.mark.asyncio
async def test_kyc_requires_verified_email(client: AsyncClient, create_user):
    user = await create_user(email="pending@zyrotech.io", is_email_verified=False)

    response = await client.post("/api/kyc/basic-details", json=BASIC_DETAILS, headers=auth_headers(user))

    assert response.status_code == 403
    assert response.json()["code"] == "email-not-verified"


@pytest.mark.asyncio
async def test_submit_basic_details(client: AsyncClient, user_headers):
    response = await client.post("/api/kyc/basic-details", json=BASIC_DETAILS, headers=user_headers)

    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "KYC basic details submitted successfully"
    assert body["data"]["status"] == "in_progress"
    assert body["data"]["verificationStatus"] == "pending"

    response = await client.post("/api/kyc/basic-details", json=BASIC_DETAILS, headers=user_headers)
    assert response.status_code == 201
    assert response.json()["message"] == "KYC basic details updated successfully"

    status = (await client.get("/api/kyc/status", headers=user_headers)).json()["data"]
    assert status["basicDetails"]["pan"] == "ABCDE1234F"
    assert status["basicDetails"]["gender"] == "female"
    assert status["basicDetails"]["dob"] == "1990-04-15"
    assert status["riskProfiling"] is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "override, code",
    [
        ({"pan": None}, "missing-required-fields"),
        ({"fullName": "R2D2"}, "invalid-full-name"),
        ({"dob": "not-a-date"}, "invalid-dob"),
        ({"gender": "unknown"}, "invalid-gender"),
        ({"pan": "1234567890"}, "invalid-pan"),
        ({"aadharNumber": "12345"}, "invalid-aadhar"),
    ]
)
async def test_basic_details_validation(client: AsyncClient, user_headers, override, code):
    response = await client.post(
        "/api/kyc/basic-details",
        json={**BASIC_DETAILS, **override},
        headers=user_headers
    )

    assert response.status_code == 400
    assert response.json()["code"] == code


@pytest.mark.asyncio
async def test_basic_details_rejects_minors_and_future_dates(client: AsyncClient, user_headers):
    today = date.today()
    minor = today.replace(year=today.year - 17, day=1).isoformat()
    future = today.replace(year=today.year + 1, day=1).isoformat()

    for dob in (minor, future):
        response = await client.post(
            "/api/kyc/basic-details",
            json={**BASIC_DETAILS, "dob": dob},
            headers=user_headers
        )
        assert response.status_code == 400
        assert response.json()["code"] == "invalid-dob"


@pytest.mark.asyncio
async def test_pan_used_by_another_user(client: AsyncClient, user_headers, create_user):
    other = await create_user(email="other@zyrotech.io")
    await client.post("/api/kyc/basic-details", json=BASIC_DETAILS, headers=auth_headers(other))

    response = await client.post("/api/kyc/basic-details", json=BASIC_DETAILS, headers=user_headers)

    assert response.status_code == 409
    assert response.json()["code"] == "duplicate-kyc-details"


@pytest.mark.asyncio
async def test_sections_must_be_submitted_in_order(client: AsyncClient, user_headers):
    response = await client.post("/api/kyc/risk-profiling", json=ANSWERS, headers=user_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "basic-kyc-required"

    await client.post("/api/kyc/basic-details", json=BASIC_DETAILS, headers=user_headers)

    response = await client.post("/api/kyc/capital-management", json=ANSWERS, headers=user_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "risk-profiling-required"

    await client.post("/api/kyc/risk-profiling", json=ANSWERS, headers=user_headers)

    response = await client.post("/api/kyc/experience", json=ANSWERS, headers=user_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "capital-management-required"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload, code",
    [
        ({}, "missing-required-fields"),
        ({"questionsAndAnswers": []}, "missing-required-fields"),
        ({"questionsAndAnswers": [{"question": " ", "answer": "Yes"}]}, "invalid-question"),
        ({"questionsAndAnswers": [{"question": "Why?", "answer": ""}]}, "invalid-answer"),
    ]
)
async def test_questionnaire_validation(client: AsyncClient, user_headers, payload, code):
    await client.post("/api/kyc/basic-details", json=BASIC_DETAILS, headers=user_headers)

    response = await client.post("/api/kyc/risk-profiling", json=payload, headers=user_headers)

    assert response.status_code == 400
    assert response.json()["code"] == code


@pytest.mark.asyncio
async def test_status_not_found(client: AsyncClient, user_headers):
    response = await client.get("/api/kyc/status", headers=user_headers)

    assert response.status_code == 404
    assert response.json()["code"] == "kyc-not-found"


@pytest.mark.asyncio
async def test_full_status_after_all_sections(client: AsyncClient, user_headers):
    await _complete_all_sections(client, user_headers)

    data = (await client.get("/api/kyc/status", headers=user_headers)).json()["data"]

    assert data["status"] == "in_progress"
    for key in ("riskProfiling", "capitalManagement", "experience"):
        assert data[key]["verificationStatus"] == "pending"
        assert data[key]["questionsAndAnswers"][1]["answer"] == "3-5 years"
        assert data[key]["completedAt"]


@pytest.mark.asyncio
async def test_review_requires_admin(client: AsyncClient, test_user, user_headers):
    await client.post("/api/kyc/basic-details", json=BASIC_DETAILS, headers=user_headers)

    response = await client.patch(
        f"/api/kyc/{test_user.id}/sections/basic-details",
        json={"status": "verified"},
        headers=user_headers
    )

    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"


@pytest.mark.asyncio
async def test_admin_review_completes_kyc(client: AsyncClient, test_user, user_headers, admin_headers):
    await _complete_all_sections(client, user_headers)

    for section in ("basic-details", "risk-profiling", "capital-management"):
        response = await client.patch(
            f"/api/kyc/{test_user.id}/sections/{section}",
            json={"status": "verified"},
            headers=admin_headers
        )
        assert response.status_code == 200
        assert response.json()["data"]["status"] == "in_progress"

    response = await client.patch(
        f"/api/kyc/{test_user.id}/sections/experience",
        json={"status": "verified"},
        headers=admin_headers
    )
    data = response.json()["data"]
    assert data["status"] == "completed"
    assert data["basicDetails"]["isVerified"] is True
    assert data["experience"]["verificationDate"]


@pytest.mark.asyncio
async def test_rejection_and_resubmission(client: AsyncClient, test_user, user_headers, admin_headers):
    await _complete_all_sections(client, user_headers)
    url = f"/api/kyc/{test_user.id}/sections/risk-profiling"

    response = await client.patch(url, json={"status": "rejected"}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["code"] == "missing-required-fields"

    response = await client.patch(
        url,
        json={"status": "rejected", "rejectionReason": "Answers are inconsistent"},
        headers=admin_headers
    )
    data = response.json()["data"]
    assert data["status"] == "rejected"
    assert data["riskProfiling"]["rejectionReason"] == "Answers are inconsistent"

    # Resubmitting resets the section to pending
    await client.post("/api/kyc/risk-profiling", json=ANSWERS, headers=user_headers)
    data = (await client.get("/api/kyc/status", headers=user_headers)).json()["data"]
    assert data["status"] == "in_progress"
    assert data["riskProfiling"]["verificationStatus"] == "pending"
    assert data["riskProfiling"]["rejectionReason"] is None


@pytest.mark.asyncio
async def test_any_submission_moves_rejected_kyc_back_in_progress(
    client: AsyncClient, test_user, user_headers, admin_headers
):
    await client.post("/api/kyc/basic-details", json=BASIC_DETAILS, headers=user_headers)
    response = await client.patch(
        f"/api/kyc/{test_user.id}/sections/basic-details",
        json={"status": "rejected", "rejectionReason": "PAN does not match the name"},
        headers=admin_headers
    )
    assert response.json()["data"]["status"] == "rejected"

    # A different section is submitted while basic details stay rejected
    response = await client.post("/api/kyc/risk-profiling", json=ANSWERS, headers=user_headers)

    data = response.json()["data"]
    assert data["status"] == "in_progress"
    data = (await client.get("/api/kyc/status", headers=user_headers)).json()["data"]
    assert data["status"] == "in_progress"
    assert data["basicDetails"]["verificationStatus"] == "rejected"


@pytest.mark.asyncio
async def test_review_errors(client: AsyncClient, test_user, user_headers, admin_headers):
    response = await client.patch(
        f"/api/kyc/{test_user.id}/sections/basic-details",
        json={"status": "verified"},
        headers=admin_headers
    )
    assert response.status_code == 404
    assert response.json()["code"] == "kyc-not-found"

    await client.post("/api/kyc/basic-details", json=BASIC_DETAILS, headers=user_headers)

    response = await client.patch(
        f"/api/kyc/{test_user.id}/sections/income",
        json={"status": "verified"},
        headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["code"] == "invalid-kyc-section"

    response = await client.patch(
        f"/api/kyc/{test_user.id}/sections/experience",
        json={"status": "verified"},
        headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["code"] == "kyc-section-missing"

import json

from unittest.mock import AsyncMock, patch

from vehicle_valuation_service.app.service.exceptions import ConcurrencyConflictError

VALUATION_ID = "val-wf-1"
IDENTITY = {"vehicle_number": "AP09QR1212", "applicant_contact": "9701234567"}
PARTITION = ("val-wf-1", "AP09QR1212|9701234567")
BASE = f"/api/v1/valuations/{VALUATION_ID}/workflow"


def _create_case(api_client):
    response = api_client.put(
        f"/api/v1/valuations/{VALUATION_ID}/stakeholder",
        params=IDENTITY,
        data={"details": json.dumps({"name": "Bajaj Finance", "executive_name": "Sana", "executive_contact": "9000000000"})},
    )
    assert response.status_code == 204


def _statuses(repository):
    return [s["status"] for s in repository.documents[PARTITION]["workflow"]]


def test_get_workflow_missing_case(api_client):
    assert api_client.get(BASE, params=IDENTITY).status_code == 404


def test_get_workflow(api_client):
    _create_case(api_client)

    response = api_client.get(BASE, params=IDENTITY)

    assert response.status_code == 200
    steps = response.json()
    assert [s["step_order"] for s in steps] == [1, 2, 3, 4, 5]
    assert [s["assigned_to_role"] for s in steps] == ["Stakeholder", "BackEnd", "AVO", "QC", "FinalReport"]


def test_start_out_of_order_is_400(api_client, repository):
    _create_case(api_client)

    response = api_client.post(f"{BASE}/2/start", params=IDENTITY)

    assert response.status_code == 400
    assert "step 1 is not completed" in response.json()["detail"]
    assert _statuses(repository)[1] == "Pending"


def test_complete_then_start_next(api_client, repository, mock_workflow_mirror):
    _create_case(api_client)
    mock_workflow_mirror.reset_mock()

    assert api_client.post(f"{BASE}/1/complete", params=IDENTITY).status_code == 204
    assert api_client.post(f"{BASE}/2/start", params=IDENTITY).status_code == 204

    assert _statuses(repository) == ["Completed", "InProgress", "Pending", "Pending", "Pending"]
    assert mock_workflow_mirror.submit_step.call_count == 2


def test_complete_pending_step_is_400(api_client):
    _create_case(api_client)

    response = api_client.post(f"{BASE}/3/complete", params=IDENTITY)

    assert response.status_code == 400
    assert "Pending" in response.json()["detail"]


def test_transition_on_missing_case_is_404(api_client):
    assert api_client.post(f"{BASE}/1/start", params=IDENTITY).status_code == 404
    assert api_client.post(f"{BASE}/1/complete", params=IDENTITY).status_code == 404


def test_completing_every_step_completes_case(api_client, repository):
    _create_case(api_client)
    for step_order in range(1, 6):
        if step_order > 1:
            assert api_client.post(f"{BASE}/{step_order}/start", params=IDENTITY).status_code == 204
        assert api_client.post(f"{BASE}/{step_order}/complete", params=IDENTITY).status_code == 204

    assert repository.documents[PARTITION]["status"] == "Completed"
    assert api_client.get("/api/v1/valuations/open").json() == []


def test_annotate_step(api_client, repository):
    _create_case(api_client)

    response = api_client.patch(f"{BASE}/3/annotation", params=IDENTITY, json={"red_flag": "Engine number mismatch"})

    assert response.status_code == 204
    step = repository.documents[PARTITION]["workflow"][2]
    assert step["red_flag"] == "Engine number mismatch"
    assert step["remarks"] is None


def test_annotate_unknown_step_is_404(api_client):
    _create_case(api_client)
    assert api_client.patch(f"{BASE}/8/annotation", params=IDENTITY, json={"remarks": "x"}).status_code == 404


def test_delete_workflow(api_client, repository):
    _create_case(api_client)

    assert api_client.delete(BASE, params=IDENTITY).status_code == 204

    assert repository.documents[PARTITION]["workflow"] is None
    assert api_client.get(BASE, params=IDENTITY).json() == []


def test_delete_workflow_missing_case(api_client):
    assert api_client.delete(BASE, params=IDENTITY).status_code == 404


def test_transition_conflict_is_409(api_client):
    with patch(
        'vehicle_valuation_service.app.service.workflow.handlers.handle_start_step',
        new_callable=AsyncMock
    ) as mock_handler:
        mock_handler.side_effect = ConcurrencyConflictError(VALUATION_ID, 4, 5)

        response = api_client.post(f"{BASE}/2/start", params=IDENTITY)

    assert response.status_code == 409


def test_step_transitions_work_when_mirror_was_never_initialized(api_client, repository, monkeypatch):
    from vehicle_valuation_service.app.dependencies.app_state import get_workflow_mirror

    api_client.app.dependency_overrides.pop(get_workflow_mirror)
    monkeypatch.delattr(api_client.app.state, "workflow_mirror", raising=False)
    _create_case(api_client)

    assert api_client.post(f"{BASE}/1/complete", params=IDENTITY).status_code == 204
    assert api_client.post(f"{BASE}/2/start", params=IDENTITY).status_code == 204
    assert _statuses(repository)[:2] == ["Completed", "InProgress"]


def test_start_step_zero_is_404(api_client):
    _create_case(api_client)

    assert api_client.post(f"{BASE}/0/start", params=IDENTITY).status_code == 404

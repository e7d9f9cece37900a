"""HTTP surface"""

from fastapi.testclient import TestClient

from azarch.main import app

client = TestClient(app)

ASSESSMENT = {
    "totalServers": 3,
    "targetRegion": "West Europe",
    "totalStorageTB": 1,
    "vms": [
        {"vmName": "web-01", "cores": 2, "memoryGB": 8, "recommendedSize": "Standard_D2s_v5"},
        {"vmName": "app-01", "cores": 4, "memoryGB": 16},
        {"vmName": "db-01", "cores": 8, "memoryGB": 32},
    ],
}


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_assessment_diagram():
    response = client.post("/diagram/assessment", json={"assessment": ASSESSMENT})
    body = response.json()

    assert response.status_code == 200
    assert body["status"] == "success"
    assert body["diagram"]["type"] == "drawio"
    assert body["diagram"]["source"].startswith("<?xml")
    ids = {n["id"] for n in body["model"]["nodes"]}
    assert {"main-vnet", "vm-web-1", "vm-app-1", "vm-database-1", "sql-db"} <= ids
    assert body["validation"]["is_valid"]


def test_landing_zone_diagram_as_plantuml():
    response = client.post("/diagram/assessment", json={
        "assessment": ASSESSMENT,
        "builder": "landing-zone",
        "layout": {"profile": "caf"},
        "export": {"format": "plantuml"},
    })
    body = response.json()
    assert body["status"] == "success"
    assert body["diagram"]["source"].startswith("@startuml")


def test_caf_diagram_defaults_to_hub_spoke():
    response = client.post("/diagram/caf", json={})
    body = response.json()

    assert body["status"] == "success"
    assert body["validation_errors"] == []
    assert body["meta"]["complexity"] == "low"
    assert "estimatedCost" in body["meta"]
    peering = [e for e in body["model"]["edges"] if e["edgeType"] == "peering"]
    assert [(e["from"], e["to"]) for e in peering] == [("vnet-hub", "vnet-spoke")]


def test_caf_diagram_reports_cidr_problems():
    architecture = {
        "subscriptions": [{
            "id": "sub-a",
            "name": "Workload",
            "type": "landingzone-prod",
            "vnets": [{
                "id": "vnet-a",
                "name": "VNet A",
                "addressSpace": "10.0.0.0/16",
                "subnets": [{"id": "subnet-a", "name": "Subnet A", "addressPrefix": "192.168.1.0/24"}],
            }],
        }],
    }
    body = client.post("/diagram/caf", json={"architecture": architecture}).json()
    assert body["status"] == "success"
    assert body["validation_errors"] == ["Subnet 192.168.1.0/24 is not contained in VNet 10.0.0.0/16"]
    assert len(body["model"]["nodes"]) == 3


def test_validate_cidr():
    architecture = {
        "subscriptions": [{
            "id": "sub-a",
            "name": "Workload",
            "type": "landingzone-prod",
            "vnets": [{
                "id": "vnet-a",
                "name": "VNet A",
                "addressSpace": "10.0.0.0/16",
                "subnets": [{"id": "subnet-a", "name": "Subnet A", "addressPrefix": "10.0.1.0/24"}],
            }],
        }],
    }
    body = client.post("/validate/cidr", json={"architecture": architecture}).json()
    assert body == {"is_valid": True, "errors": []}


def test_invalid_body_is_rejected():
    response = client.post("/diagram/assessment", json={"assessment": {"totalServers": -1}})
    assert response.status_code == 422
    body = response.json()
    assert body["status"] == "error"
    assert body["errors"]


def test_malformed_cidr_is_rejected():
    architecture = {
        "subscriptions": [{
            "id": "sub-a",
            "name": "Workload",
            "type": "landingzone-prod",
            "vnets": [{"id": "vnet-a", "name": "VNet A", "addressSpace": "not-a-cidr"}],
        }],
    }
    response = client.post("/validate/cidr", json={"architecture": architecture})
    assert response.status_code == 422

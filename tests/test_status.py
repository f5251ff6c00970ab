def test_liveness(api):
    response = api.get("/status")

    assert response.status_code == 200
    assert response.json() == {"status": "OK"}


def test_readiness(api):
    response = api.get("/deepstatus")

    assert response.status_code == 200
    assert response.json() == {"db": True}


def test_landing_page(api):
    assert api.get("/").json() == "Welcome to the Shipsarthi Shipping Service"

import pytest
from httpx import ASGITransport, AsyncClient

from nicotine_lab import __version__
from nicotine_lab.main import app
from nicotine_lab.simulation import SimulationDriver


def _client() -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.mark.anyio("asyncio")
async def test_health_endpoints_report_version() -> None:
    async with _client() as client:
        root = await client.get("/")
        health = await client.get("/health")

    assert root.status_code == 200
    assert root.json() == {"status": "ok", "version": __version__}
    assert health.json() == root.json()


@pytest.mark.anyio("asyncio")
async def test_session_snapshot_starts_at_rest(api_driver: SimulationDriver) -> None:
    async with _client() as client:
        response = await client.get("/session")

    assert response.status_code == 200
    data = response.json()
    assert data["preset"] == "single-puff"
    assert data["sim_min"] == 0.0
    assert data["running"] is True
    assert data["state"]["nicotine"] == 0.0
    assert data["state"]["pool_da"]["dominant_state"] == "basal"
    assert data["desens_start"] == {"da": None, "gaba": None}
    assert data["params"]["desens_window_min"] == 45.0


@pytest.mark.anyio("asyncio")
async def test_puff_and_tick_flow(api_driver: SimulationDriver) -> None:
    async with _client() as client:
        puff = await client.post("/session/puff")
        tick = await client.post("/session/tick", json={"dt_min": 2.0, "puff_occurred": False})
        trace = await client.get("/session/trace")

    assert puff.status_code == 200
    assert puff.json()["nicotine"] == 0.25
    assert puff.json()["alpha7_ach_on"] is True

    assert tick.status_code == 200
    tick_data = tick.json()
    assert tick_data["sim_min"] == 2.0
    assert tick_data["point"]["t"] == 2.0
    assert tick_data["point"]["puff_occurred"] is False
    assert tick_data["state"]["nicotine"] < 0.25

    trace_data = trace.json()
    assert len(trace_data["points"]) == 1
    assert trace_data["bands"] == []
    assert (trace_data["value_min"], trace_data["value_max"]) == (0.0, 1.0)
    assert api_driver.sim_min == 2.0


@pytest.mark.anyio("asyncio")
async def test_tick_rejects_negative_delta(api_driver: SimulationDriver) -> None:
    async with _client() as client:
        response = await client.post("/session/tick", json={"dt_min": -1.0, "puff_occurred": False})

    assert response.status_code == 422
    assert api_driver.sim_min == 0.0


@pytest.mark.anyio("asyncio")
async def test_paused_session_refuses_sampled_ticks(api_driver: SimulationDriver) -> None:
    async with _client() as client:
        paused = await client.post("/session/pause")
        refused = await client.post("/session/tick", json={"dt_min": 1.0})
        explicit = await client.post("/session/tick", json={"dt_min": 1.0, "puff_occurred": True})
        resumed = await client.post("/session/resume")
        sampled = await client.post("/session/tick", json={"dt_min": 1.0})

    assert paused.json()["running"] is False
    assert refused.status_code == 409
    assert refused.json()["detail"]["code"] == "session_paused"
    assert explicit.status_code == 200
    assert explicit.json()["point"]["puff_occurred"] is True
    assert resumed.json()["running"] is True
    assert sampled.status_code == 200
    assert sampled.json()["sim_min"] == 2.0


@pytest.mark.anyio("asyncio")
async def test_advance_returns_sixty_points(api_driver: SimulationDriver) -> None:
    async with _client() as client:
        response = await client.post("/session/advance")
        trace = await client.get("/session/trace", params={"bins": 10})

    assert response.status_code == 200
    data = response.json()
    assert len(data["new_points"]) == 60
    assert data["new_points"][0]["t"] == 1.0
    assert data["new_points"][-1]["t"] == 60.0
    assert data["sim_min"] == 60.0
    assert len(trace.json()["bands"]) == 10


@pytest.mark.anyio("asyncio")
async def test_trace_rejects_degenerate_bins(api_driver: SimulationDriver) -> None:
    async with _client() as client:
        response = await client.get("/session/trace", params={"bins": 1})

    assert response.status_code == 422
    assert response.json()["detail"]["code"] == "invalid_bins"


@pytest.mark.anyio("asyncio")
async def test_preset_and_reset(api_driver: SimulationDriver) -> None:
    async with _client() as client:
        preset = await client.post("/session/preset", json={"preset": "abstinence"})
        recovery = await client.get("/session/recovery/gaba")
        unknown = await client.post("/session/preset", json={"preset": "binge"})
        reset = await client.post("/session/reset")

    assert preset.status_code == 200
    preset_data = preset.json()
    assert preset_data["preset"] == "abstinence"
    assert preset_data["state"]["nicotine"] == 0.02
    assert preset_data["dominant_states"] == {"da": "desensitized", "gaba": "desensitized"}
    assert preset_data["desens_start"] == {"da": 0.0, "gaba": 0.0}

    recovery_data = recovery.json()
    assert recovery_data["active"] is True
    assert recovery_data["pathway"] == "gaba"
    assert recovery_data["remaining_min"] == 45

    assert unknown.status_code == 422

    assert reset.json()["preset"] == "single-puff"
    assert reset.json()["state"]["nicotine"] == 0.0


@pytest.mark.anyio("asyncio")
async def test_recovery_clock_inactive_and_unknown(api_driver: SimulationDriver) -> None:
    async with _client() as client:
        inactive = await client.get("/session/recovery/da")
        unknown = await client.get("/session/recovery/serotonin")

    assert inactive.status_code == 200
    assert inactive.json()["active"] is False
    assert inactive.json()["progress"] is None
    assert unknown.status_code == 404
    assert unknown.json()["detail"]["code"] == "unknown_pathway"


@pytest.mark.anyio("asyncio")
async def test_parameter_update_accepts_aliases(api_driver: SimulationDriver) -> None:
    async with _client() as client:
        response = await client.patch(
            "/session/params",
            json={"desensWindowMin": 30, "act_threshold": 0.2},
        )

    assert response.status_code == 200
    data = response.json()
    assert data["desens_window_min"] == 30.0
    assert data["act_threshold"] == 0.2
    assert data["nicotine_half_life_min"] == 120.0
    assert api_driver.params.desens_window_min == 30.0


@pytest.mark.anyio("asyncio")
async def test_parameter_update_rejects_invalid_values(api_driver: SimulationDriver) -> None:
    async with _client() as client:
        out_of_range = await client.patch("/session/params", json={"actThreshold": 1.5})
        unknown = await client.patch("/session/params", json={"puffsPerMin": 0.2})

    assert out_of_range.status_code == 422
    detail = out_of_range.json()["detail"]
    assert detail["code"] == "invalid_parameters"
    assert "act_threshold" in detail["context"]["fields"]
    assert unknown.status_code == 422
    assert api_driver.params.act_threshold == 0.15


@pytest.mark.anyio("asyncio")
async def test_puff_rate_is_bounded(api_driver: SimulationDriver) -> None:
    async with _client() as client:
        accepted = await client.put("/session/puff-rate", json={"puffs_per_min": 0.3})
        rejected = await client.put("/session/puff-rate", json={"puffs_per_min": 0.9})

    assert accepted.status_code == 200
    assert accepted.json()["puffs_per_min"] == 0.3
    assert rejected.status_code == 422
    assert api_driver.puffs_per_min == 0.3


@pytest.mark.anyio("asyncio")
@pytest.mark.parametrize("body", ['{"dt_min": Infinity}', '{"dt_min": NaN, "puff_occurred": false}'])
async def test_tick_rejects_non_finite_delta(api_driver: SimulationDriver, body: str) -> None:
    async with _client() as client:
        response = await client.post(
            "/session/tick",
            content=body,
            headers={"content-type": "application/json"},
        )

    assert response.status_code == 422
    assert api_driver.sim_min == 0.0
    assert len(api_driver.trace) == 0

"""
Tests for the census population lookup, using httpx.MockTransport instead of the network.
Run from project root: pytest tests/test_population_service.py -v
"""

import asyncio
import pytest
import httpx
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from zipmarket.services.population_service import PopulationService


POPULATIONS = {"10001": "21000", "10155": "0", "07030": "60000"}


def census_handler(request: httpx.Request) -> httpx.Response:
    zcta = request.url.params["for"].split(":")[-1]
    if zcta == "00000":
        raise httpx.ConnectError("boom", request=request)
    if zcta == "11111":
        return httpx.Response(500, text="server error")
    if zcta == "22222":
        return httpx.Response(200, text="<html>not json</html>")
    if zcta == "33333":
        return httpx.Response(200, json=[["NAME", "B01003_001E", "zip code tabulation area"]])
    if zcta == "44444":
        return httpx.Response(200, json=[["NAME", "B01003_001E"], ["ZCTA5 44444", "null"]])
    if zcta not in POPULATIONS:
        return httpx.Response(204)
    return httpx.Response(200, json=[
        ["NAME", "B01003_001E", "zip code tabulation area"],
        [f"ZCTA5 {zcta}", POPULATIONS[zcta], zcta],
    ])


def make_service(handler=census_handler, **kwargs) -> PopulationService:
    kwargs.setdefault("batch_delay", 0)
    return PopulationService(api_key="test-key", year=2023, transport=httpx.MockTransport(handler), **kwargs)


class TestFetchPopulation:
    def test_success(self):
        assert asyncio.run(make_service().fetch_population("10001")) == 21000

    def test_zero_population(self):
        assert asyncio.run(make_service().fetch_population("10155")) == 0

    @pytest.mark.parametrize("zcta", ["00000", "11111", "22222", "33333", "44444", "99999"])
    def test_failures_degrade_to_none(self, zcta):
        assert asyncio.run(make_service().fetch_population(zcta)) is None

    def test_request_shape(self):
        seen = []

        def handler(request):
            seen.append(request)
            return census_handler(request)

        asyncio.run(make_service(handler).fetch_population("10001"))
        req = seen[0]
        assert req.url.path == "/data/2023/acs/acs5"
        assert req.url.params["get"] == "NAME,B01003_001E"
        assert req.url.params["for"] == "zip code tabulation area:10001"
        assert req.url.params["key"] == "test-key"
        assert req.headers["User-Agent"] == "ZIP-Penetration-Analysis/1.0"

    def test_timeout_degrades_to_none(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        assert asyncio.run(make_service(handler).fetch_population("10001")) is None


class TestParsePopulation:
    @pytest.mark.parametrize("body,expected", [
        ([["NAME", "B01003_001E"], ["x", "42"]], 42),
        ([["NAME", "B01003_001E"], ["x", "-666666666"]], None),
        ([["NAME", "B01003_001E"], ["x"]], None),
        ([["NAME", "B01003_001E"]], None),
        ({"error": "bad"}, None),
        (None, None),
    ])
    def test_parse(self, body, expected):
        assert PopulationService.parse_population(body) == expected


class TestFetchAll:
    def test_results_aligned_with_input(self):
        zips = ["10001", "99999", "07030", "10155", "00000"]
        results = make_service(batch_size=2).fetch_all_sync(zips)
        assert results == [21000, None, 60000, 0, None]

    def test_empty_input(self):
        assert make_service().fetch_all_sync([]) == []

    def test_concurrency_bounded_by_batch_size(self):
        state = {"in_flight": 0, "max_in_flight": 0, "batches": []}

        class SlowTransport(httpx.AsyncBaseTransport):
            async def handle_async_request(self, request):
                state["in_flight"] += 1
                state["max_in_flight"] = max(state["max_in_flight"], state["in_flight"])
                await asyncio.sleep(0.01)
                state["in_flight"] -= 1
                return httpx.Response(200, json=[["NAME", "B01003_001E"], ["x", "100"]])

        svc = PopulationService(api_key="k", batch_size=3, batch_delay=0, transport=SlowTransport())
        results = svc.fetch_all_sync([f"1000{i}" for i in range(8)])
        assert results == [100] * 8
        assert state["max_in_flight"] == 3

    def test_batches_run_one_after_another(self):
        order = []

        class RecordingTransport(httpx.AsyncBaseTransport):
            async def handle_async_request(self, request):
                zcta = request.url.params["for"].split(":")[-1]
                order.append(("start", zcta))
                await asyncio.sleep(0.01)
                order.append(("end", zcta))
                return httpx.Response(200, json=[["NAME", "B01003_001E"], ["x", "5"]])

        svc = PopulationService(api_key="k", batch_size=2, batch_delay=0.001, transport=RecordingTransport())
        svc.fetch_all_sync(["a1", "a2", "b1", "b2"])
        first_b_start = order.index(("start", "b1"))
        assert ("end", "a1") in order[:first_b_start]
        assert ("end", "a2") in order[:first_b_start]

    def test_pause_between_batches_only(self, monkeypatch):
        from zipmarket.services import population_service

        delays = []

        async def fake_sleep(seconds):
            delays.append(seconds)

        monkeypatch.setattr(population_service.asyncio, "sleep", fake_sleep)
        svc = make_service(batch_size=2, batch_delay=0.25)
        results = svc.fetch_all_sync(["10001", "10155", "07030", "99999", "10001"])
        assert results == [21000, 0, 60000, None, 21000]
        # three batches -> two pauses, none after the last batch
        assert delays == [0.25, 0.25]

    def test_no_pause_for_single_batch(self, monkeypatch):
        from zipmarket.services import population_service

        delays = []

        async def fake_sleep(seconds):
            delays.append(seconds)

        monkeypatch.setattr(population_service.asyncio, "sleep", fake_sleep)
        make_service(batch_size=10, batch_delay=0.1).fetch_all_sync(["10001", "07030"])
        assert delays == []

    def test_timeout_does_not_block_batch_siblings(self):
        def handler(request):
            zcta = request.url.params["for"].split(":")[-1]
            if zcta == "10155":
                raise httpx.ReadTimeout("slow", request=request)
            return census_handler(request)

        results = make_service(handler, batch_size=3).fetch_all_sync(["10001", "10155", "07030"])
        assert results == [21000, None, 60000]


class TestDefaults:
    def test_batching_and_timeout_defaults(self):
        svc = PopulationService(api_key="k")
        assert svc.batch_size == 10
        assert svc.batch_delay == 0.1
        assert svc.timeout == 10.0

import asyncio

import httpx
import pytest

from adapters.gometa import GometaClient
from adapters.hacienda import HaciendaClient
from core.errors import ContentTypeError, HttpError, MissingDataError
from core.services.cabys_pager import CabysPager
from core.services.lookups import ExchangeRateLookup, IdentityLookup, LookupState, TaxpayerLookup
from fakes import FakeUpstream

pytestmark = pytest.mark.unit

AE_PAYLOAD = {
    "nombre": "JUAN PEREZ",
    "identificacion": "110220294",
    "regimen": {"descripcion": "Régimen Simplificado"},
    "situacion": {"estado": "Inscrito", "moroso": "NO", "omiso": "NO", "administracionTributaria": "San José"},
    "actividades": [{"codigo": "1", "descripcion": "X", "tipo": "P", "estado": "A"}],
}


class TestTaxpayerLookup:
    @pytest.mark.asyncio
    async def test_invalid_identification_never_reaches_network(self):
        source = FakeUpstream()
        lookup = TaxpayerLookup(source)

        assert await lookup.lookup("12345") is None

        assert source.calls == []
        assert lookup.state.error == "La identificación debe tener 9, 10 u 11 dígitos."
        assert lookup.state.result is None
        assert not lookup.state.loading

    @pytest.mark.asyncio
    async def test_sends_digits_only(self):
        source = FakeUpstream(AE_PAYLOAD)
        lookup = TaxpayerLookup(source)

        record = await lookup.lookup("1-1022-0294")

        assert source.calls == [("fetch_taxpayer", ("110220294",))]
        assert record is lookup.state.result
        assert record.name == "JUAN PEREZ"
        assert lookup.state.error == ""

    @pytest.mark.asyncio
    async def test_failure_clears_previous_result(self):
        source = FakeUpstream(AE_PAYLOAD, HttpError(404))
        lookup = TaxpayerLookup(source)
        await lookup.lookup("110220294")

        assert await lookup.lookup("110220294") is None

        assert lookup.state.result is None
        assert lookup.state.error == "HTTP 404"

    @pytest.mark.asyncio
    async def test_non_object_body(self):
        lookup = TaxpayerLookup(FakeUpstream(["raro"]))
        assert await lookup.lookup("110220294") is None
        assert lookup.state.error == "Respuesta AE sin datos del contribuyente"


class TestIdentityLookup:
    @pytest.mark.asyncio
    async def test_empty_query_is_a_no_op(self):
        source = FakeUpstream()
        lookup = IdentityLookup(source)

        assert await lookup.lookup("  ") == []
        assert source.calls == []
        assert lookup.state.error == ""

    @pytest.mark.asyncio
    async def test_normalizes_results(self):
        source = FakeUpstream({"results": [{"cedula": "101110111", "fullname": "ANA MORA", "guess_type": "F"}]})
        lookup = IdentityLookup(source)

        items = await lookup.lookup(" ana mora ")

        assert source.calls == [("search_cedulas", ("ana mora",))]
        assert [(x.cedula, x.nombre, x.tipo) for x in items] == [("101110111", "ANA MORA", "F")]
        assert lookup.items == items

    @pytest.mark.asyncio
    async def test_content_type_failure(self):
        source = FakeUpstream(
            {"results": [{"cedula": "1"}]},
            ContentTypeError("text/html", "<html> error"),
        )
        lookup = IdentityLookup(source)
        await lookup.lookup("1")

        assert await lookup.lookup("2") == []

        assert lookup.items == []
        assert lookup.state.error == "Respuesta no es JSON (text/html): <html> error"

    @pytest.mark.asyncio
    async def test_latest_response_wins(self):
        gates = {"ana": asyncio.Event(), "luis": asyncio.Event()}

        class Gated:
            async def search_cedulas(self, query):
                await gates[query].wait()
                return [{"cedula": query, "nombre": query.upper()}]

        lookup = IdentityLookup(Gated())
        first = asyncio.create_task(lookup.lookup("ana"))
        await asyncio.sleep(0)
        second = asyncio.create_task(lookup.lookup("luis"))
        await asyncio.sleep(0)

        gates["luis"].set()
        await second
        gates["ana"].set()
        assert await first == []

        assert [x.cedula for x in lookup.items] == ["luis"]


class TestExchangeRateLookup:
    @pytest.mark.asyncio
    async def test_refresh(self):
        lookup = ExchangeRateLookup(FakeUpstream({"dolar": {"compra": {"valor": 505}, "venta": {"valor": 512}}}))

        rate = await lookup.refresh()

        assert (rate.buy, rate.sell) == ("505", "512")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [HttpError(500), MissingDataError("Sin datos de tipo de cambio")])
    async def test_any_failure_is_unavailable(self, error):
        lookup = ExchangeRateLookup(FakeUpstream(error))

        assert await lookup.refresh() is None

        assert lookup.state.error == "Tipo de cambio no disponible"
        assert lookup.state.result is None

    @pytest.mark.asyncio
    async def test_empty_payload_is_unavailable(self):
        lookup = ExchangeRateLookup(FakeUpstream({}))
        assert await lookup.refresh() is None
        assert lookup.state.error == ExchangeRateLookup.UNAVAILABLE


@pytest.mark.asyncio
async def test_failure_in_one_domain_does_not_touch_another():
    ae = TaxpayerLookup(FakeUpstream(HttpError(503)))
    cedulas = IdentityLookup(FakeUpstream([{"cedula": "101110111", "nombre": "ANA"}]))
    await cedulas.lookup("ana")

    await ae.lookup("110220294")

    assert ae.state.error == "HTTP 503"
    assert cedulas.state.error == ""
    assert len(cedulas.items) == 1


def test_lookup_state_ignores_stale_generations():
    state: LookupState[str] = LookupState()
    old = state.begin()
    new = state.begin()

    assert state.succeed(old, "viejo") is False
    assert state.fail(old, "error viejo") is False
    assert state.succeed(new, "nuevo") is True
    assert state.result == "nuevo"
    assert state.error == ""


class TestUpstreamReadFailures:
    @pytest.mark.asyncio
    async def test_redirect_loop_is_recorded_as_error(self, settings, mock_client):
        def handler(request):
            return httpx.Response(302, headers={"location": str(request.url)})

        async with mock_client(handler) as client:
            lookup = IdentityLookup(GometaClient(settings, client=client))
            assert await lookup.lookup("juan") == []

        assert lookup.items == []
        assert lookup.state.error
        assert not lookup.state.loading

    @pytest.mark.asyncio
    async def test_bad_gzip_body_is_recorded_by_pager(self, settings, mock_client):
        def handler(request):
            return httpx.Response(
                200,
                headers={"content-type": "application/json", "content-encoding": "gzip"},
                stream=httpx.ByteStream(b"not gzip"),
            )

        async with mock_client(handler) as client:
            pager = CabysPager(HaciendaClient(settings, client=client))
            assert await pager.search("arroz", reset_page=True) is False

        assert pager.entries == []
        assert pager.error
        assert not pager.loading

    @pytest.mark.asyncio
    async def test_redirect_loop_on_exchange_rate(self, settings, mock_client):
        def handler(request):
            return httpx.Response(302, headers={"location": str(request.url)})

        async with mock_client(handler) as client:
            lookup = ExchangeRateLookup(HaciendaClient(settings, client=client))
            assert await lookup.refresh() is None

        assert lookup.state.error == ExchangeRateLookup.UNAVAILABLE

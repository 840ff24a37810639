"""Tests for NubariumKycProvider against a mocked HTTP transport."""

import json
from collections.abc import Callable

import httpx
import pytest

from origination.config.models.providers import NubariumConfig
from origination.providers.kyc import (
    KycAuthenticationError,
    KycProviderError,
    KycUnavailableError,
    NubariumKycProvider,
)

Handler = Callable[[httpx.Request], httpx.Response]

TOKEN_PATH = "/global/account/v1/generate-jwt"


def _provider(handler: Handler) -> NubariumKycProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return NubariumKycProvider(NubariumConfig(), username="user", password="secret", client=client)


def _with_token(routes: dict[str, Handler], tokens: list[str] | None = None) -> Handler:
    issued = tokens if tokens is not None else []

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == TOKEN_PATH:
            issued.append(f"token-{len(issued) + 1}")
            return httpx.Response(200, json={"bearer_token": issued[-1]})
        return routes[request.url.path](request)

    return handler


class TestCurp:
    @pytest.mark.asyncio
    async def test_valid_curp(self) -> None:
        seen: list[httpx.Request] = []

        def curp(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(
                200,
                json={
                    "estatus": "OK",
                    "curp": "PELJ900515HDFRPN09",
                    "nombre": "JUAN",
                    "apellidoPaterno": "PEREZ",
                    "apellidoMaterno": "LOPEZ",
                    "fechaNacimiento": "15/05/1990",
                    "codigoValidacion": 12345,
                },
            )

        provider = _provider(_with_token({"/renapo/v3/valida_curp": curp}))

        result = await provider.validate_curp(" pelj900515hdfrpn09 ")

        assert result.valid
        assert result.first_name == "JUAN"
        assert result.validation_code == "12345"
        assert result.curp_status == "RCN"
        assert seen[0].headers["Authorization"] == "Bearer token-1"
        assert json.loads(seen[0].content) == {"curp": "PELJ900515HDFRPN09"}

    @pytest.mark.asyncio
    async def test_malformed_curp_skips_http(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise AssertionError("no request expected")

        result = await _provider(handler).validate_curp("NOPE")

        assert not result.valid

    @pytest.mark.asyncio
    async def test_renapo_rejection(self) -> None:
        provider = _provider(
            _with_token(
                {
                    "/renapo/v3/valida_curp": lambda r: httpx.Response(
                        200, json={"estatus": "ERROR", "mensaje": "CURP no existe"}
                    )
                }
            )
        )

        result = await provider.validate_curp("PELJ900515HDFRPN09")

        assert not result.valid
        assert result.error == "CURP no existe"


class TestHttp:
    @pytest.mark.asyncio
    async def test_token_is_cached(self) -> None:
        tokens: list[str] = []
        def ok(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"estatus": "OK"})

        provider = _provider(_with_token({"/sat/valida_rfc": ok}, tokens))

        await provider.validate_rfc("PELJ900515AB1")
        await provider.validate_rfc("PELJ900515AB1")

        assert tokens == ["token-1"]

    @pytest.mark.asyncio
    async def test_refreshes_token_once_on_401(self) -> None:
        tokens: list[str] = []
        calls: list[str] = []

        def rfc(request: httpx.Request) -> httpx.Response:
            calls.append(request.headers["Authorization"])
            if len(calls) == 1:
                return httpx.Response(401)
            return httpx.Response(200, json={"estatus": "OK", "tipoPersona": "F"})

        provider = _provider(_with_token({"/sat/valida_rfc": rfc}, tokens))

        result = await provider.validate_rfc("PELJ900515AB1")

        assert result.valid
        assert calls == ["Bearer token-1", "Bearer token-2"]

    @pytest.mark.asyncio
    async def test_bad_credentials(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401)

        with pytest.raises(KycAuthenticationError):
            await _provider(handler).validate_rfc("PELJ900515AB1")

    @pytest.mark.asyncio
    async def test_server_error_is_unavailable(self) -> None:
        provider = _provider(
            _with_token({"/sat/valida_rfc": lambda r: httpx.Response(503)})
        )

        with pytest.raises(KycUnavailableError) as exc_info:
            await provider.validate_rfc("PELJ900515AB1")
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    async def test_timeout_is_unavailable(self) -> None:
        def timeout(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        provider = _provider(_with_token({"/sat/valida_rfc": timeout}))

        with pytest.raises(KycUnavailableError):
            await provider.validate_rfc("PELJ900515AB1")

    @pytest.mark.asyncio
    async def test_invalid_json(self) -> None:
        provider = _provider(
            _with_token({"/sat/valida_rfc": lambda r: httpx.Response(200, text="<html>")})
        )

        with pytest.raises(KycProviderError):
            await provider.validate_rfc("PELJ900515AB1")


class TestIneAndLists:
    @pytest.mark.asyncio
    async def test_ine_checks_nominal_list_by_cic(self) -> None:
        list_payloads: list[dict] = []

        def ocr(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                200,
                json={
                    "tipo": "INE",
                    "subTipo": "H",
                    "claveElector": "PRLPJN90051509H100",
                    "cic": "123456789",
                    "identificadorCiudadano": "987654321",
                    "nombres": "JUAN",
                },
            )

        def nominal_list(request: httpx.Request) -> httpx.Response:
            list_payloads.append(json.loads(request.content))
            return httpx.Response(200, json={"estatus": "OK", "codigoValidacion": "abc"})

        provider = _provider(
            _with_token(
                {"/ocr/v1/obtener_datos_id": ocr, "/ine/v2/valida_ine": nominal_list}
            )
        )

        result = await provider.validate_ine("front", "back")

        assert result.is_valid
        assert result.list_validation_code == "abc"
        assert list_payloads == [{"cic": "123456789", "identificadorCiudadano": "987654321"}]

    @pytest.mark.asyncio
    async def test_ine_without_identifiers_fails_list_check(self) -> None:
        provider = _provider(
            _with_token(
                {
                    "/ocr/v1/obtener_datos_id": lambda r: httpx.Response(
                        200, json={"subTipo": "H", "nombres": "JUAN"}
                    )
                }
            )
        )

        result = await provider.validate_ine("front")

        assert result.list_checked
        assert not result.is_valid

    @pytest.mark.asyncio
    async def test_face_match(self) -> None:
        provider = _provider(
            _with_token(
                {
                    "/global/biometrics/v1/compare-id-face": lambda r: httpx.Response(
                        200, json={"status": "OK", "messageCode": 0, "similarity": "91.5"}
                    )
                }
            )
        )

        result = await provider.face_match("selfie", "ine", threshold=85)

        assert result.match
        assert result.score == 91.5

    @pytest.mark.asyncio
    async def test_liveness_score_is_normalized(self) -> None:
        provider = _provider(
            _with_token(
                {
                    "/global/biometrics/v1/liveness-face": lambda r: httpx.Response(
                        200, json={"messageCode": 0, "liveness": 0.97}
                    )
                }
            )
        )

        result = await provider.liveness("face")

        assert result.passed
        assert result.score == pytest.approx(97.0)

    @pytest.mark.asyncio
    async def test_ofac_service_missing(self) -> None:
        provider = _provider(
            _with_token({"/blocklist/v1/query": lambda r: httpx.Response(404)})
        )

        result = await provider.check_ofac("Juan Pérez")

        assert not result.found
        assert result.warning is not None

    @pytest.mark.asyncio
    async def test_pld_matches(self) -> None:
        provider = _provider(
            _with_token(
                {
                    "/blacklists/v1/consulta": lambda r: httpx.Response(
                        200,
                        json={"resultados": [{"nombre": "JUAN PEREZ"}], "conteoResultados": 1},
                    )
                }
            )
        )

        result = await provider.check_pld("Juan Pérez", curp="pelj900515hdfrpn09")

        assert result.found
        assert result.count == 1
